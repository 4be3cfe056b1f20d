"""Unit tests for the ansible-vault process runner."""

import subprocess
import sys
from pathlib import Path

import pytest

from vault_editor.vault.exceptions import ProcessLaunchError, TempfileError
from vault_editor.vault.runner import ProcessRunner, RunResult


class TestRunResult:
    """Tests for RunResult."""

    def test_none_streams_normalized(self):
        """Absent output streams become empty strings."""
        result = RunResult(0, None, None)

        assert result.stdout == ""
        assert result.stderr == ""

    def test_ok(self):
        """ok reflects a zero exit status."""
        assert RunResult(0).ok
        assert not RunResult(2).ok

    def test_output_stderr_first(self):
        """output joins stderr before stdout."""
        result = RunResult(1, stdout="out", stderr="err")

        assert result.output == "err\nout"


class TestBuildCommand:
    """Tests for argument vector construction."""

    def test_minimal(self):
        """Executable and action come first."""
        runner = ProcessRunner("ansible-vault")

        assert runner.build_command("view", "secrets.yml") == ["ansible-vault", "view", "secrets.yml"]

    def test_password_file_and_vault_id(self):
        """Password file and vault-id precede trailing arguments."""
        runner = ProcessRunner("/usr/bin/ansible-vault", password_file="/home/me/.vault_pass")

        cmd = runner.build_command("encrypt_string", "--stdin-name", "value", vault_id="prod")

        assert cmd == [
            "/usr/bin/ansible-vault",
            "encrypt_string",
            "--vault-password-file",
            "/home/me/.vault_pass",
            "--encrypt-vault-id",
            "prod",
            "--stdin-name",
            "value",
        ]

    def test_path_arguments_stringified(self, tmp_path: Path):
        """Path arguments are converted to strings."""
        runner = ProcessRunner()

        cmd = runner.build_command("view", tmp_path)

        assert cmd[-1] == str(tmp_path)


class TestRun:
    """Tests for ProcessRunner.run."""

    def test_captures_exit_and_streams(self):
        """Exit status, stdout and stderr are captured."""
        runner = ProcessRunner(sys.executable)
        script = "import sys; sys.stdout.write(sys.stdin.read().upper()); sys.stderr.write('e'); sys.exit(3)"

        result = runner.run([sys.executable, "-c", script], stdin="abc")

        assert result.returncode == 3
        assert result.stdout == "ABC"
        assert result.stderr == "e"

    def test_runs_in_cwd(self, tmp_path: Path):
        """The configured working directory is used."""
        runner = ProcessRunner(sys.executable, cwd=tmp_path)

        result = runner.run([sys.executable, "-c", "import os; print(os.getcwd())"])

        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    def test_missing_executable(self, tmp_path: Path):
        """A missing executable raises ProcessLaunchError."""
        missing = str(tmp_path / "no-such-ansible-vault")
        runner = ProcessRunner(missing)

        with pytest.raises(ProcessLaunchError) as exc_info:
            runner.run(runner.build_command("view", "x.yml"))

        assert exc_info.value.executable == missing

    def test_nonzero_exit_not_raised(self, vault_tool: Path, tmp_path: Path):
        """A refusing tool returns a failed RunResult."""
        plain = tmp_path / "plain.yml"
        plain.write_text("a: 1\n")
        runner = ProcessRunner(str(vault_tool))

        result = runner.run(runner.build_command("view", str(plain)))

        assert not result.ok
        assert "not vault encrypted" in result.stderr


class TestTempfile:
    """Tests for temp file lifecycle."""

    def test_written_and_removed(self, runner_tmp_dir: Path):
        """The temp file holds the text and is gone afterwards."""
        runner = ProcessRunner(tmp_dir=runner_tmp_dir)

        with runner.tempfile("secret\n") as path:
            assert path.parent == runner_tmp_dir
            assert path.name.startswith("vault_editor_")
            assert path.read_text() == "secret\n"

        assert not path.exists()
        assert list(runner_tmp_dir.iterdir()) == []

    def test_removed_on_exception(self, runner_tmp_dir: Path):
        """The temp file is removed when the block raises."""
        runner = ProcessRunner(tmp_dir=runner_tmp_dir)

        with pytest.raises(RuntimeError):
            with runner.tempfile("secret") as path:
                raise RuntimeError("boom")

        assert not path.exists()
        assert list(runner_tmp_dir.iterdir()) == []

    def test_removed_when_subprocess_faults(self, runner_tmp_dir: Path, monkeypatch):
        """An internal fault while running the tool still cleans up."""
        runner = ProcessRunner(tmp_dir=runner_tmp_dir)

        def explode(*args, **kwargs):
            raise subprocess.SubprocessError("unexpected")

        monkeypatch.setattr(subprocess, "run", explode)

        with pytest.raises(subprocess.SubprocessError):
            with runner.tempfile("secret") as path:
                runner.run(runner.build_command("decrypt", str(path)))

        assert list(runner_tmp_dir.iterdir()) == []

    def test_removed_if_already_deleted(self, runner_tmp_dir: Path):
        """Deleting the file inside the block is tolerated."""
        runner = ProcessRunner(tmp_dir=runner_tmp_dir)

        with runner.tempfile("secret") as path:
            path.unlink()

        assert list(runner_tmp_dir.iterdir()) == []

    def test_unusable_directory(self, tmp_path: Path):
        """A missing temp directory raises TempfileError."""
        runner = ProcessRunner(tmp_dir=tmp_path / "does-not-exist")

        with pytest.raises(TempfileError):
            with runner.tempfile("secret"):
                pass
