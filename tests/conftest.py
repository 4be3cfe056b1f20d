"""Shared pytest fixtures for Vault Editor tests."""

import os
import stat
import sys
from pathlib import Path
from typing import Callable, Optional

import pytest


STUB_VAULT_SCRIPT = r'''
import os
import sys

HEADER = "$ANSIBLE_VAULT;1.1;AES256"


def log_call(argv):
    path = os.environ.get("STUB_VAULT_LOG")
    if path:
        with open(path, "a", encoding="utf-8") as f:
            f.write(" ".join(argv) + "\n")


def fail(message):
    sys.stderr.write(message + "\n")
    sys.exit(1)


def encode(text, vault_id=None):
    header = f"$ANSIBLE_VAULT;1.2;AES256;{vault_id}" if vault_id else HEADER
    data = text.encode("utf-8").hex()
    return [header] + [data[i:i + 80] for i in range(0, len(data), 80)]


def decode(text):
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines or not lines[0].startswith("$ANSIBLE_VAULT"):
        fail("ERROR! input is not vault encrypted data")
    try:
        return bytes.fromhex("".join(lines[1:])).decode("utf-8")
    except ValueError:
        fail("ERROR! Decryption failed (no vault secrets were found that could decrypt)")


def check_encrypt(vault_id):
    ids = os.environ.get("STUB_VAULT_IDS")
    if ids and (not vault_id or os.environ.get("STUB_ALWAYS_AMBIGUOUS")):
        fail(
            f"ERROR! The vault-ids {ids} are available to encrypt. "
            "Specify the vault-id to encrypt with --encrypt-vault-id"
        )
    if os.environ.get("STUB_FAIL_ENCRYPT"):
        fail("ERROR! encryption refused")


def read_source(path):
    if path == "/dev/stdin":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def emit(path, output, text):
    if output == "/dev/stderr":
        sys.stderr.write(text)
    else:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)


def main(argv):
    log_call(argv)
    action, rest = argv[0], argv[1:]
    opts, args = {}, []
    i = 0
    while i < len(rest):
        arg = rest[i]
        if arg.startswith("--output="):
            opts["output"] = arg.split("=", 1)[1]
        elif arg in ("--vault-password-file", "--encrypt-vault-id", "--stdin-name"):
            opts[arg] = rest[i + 1]
            i += 1
        else:
            args.append(arg)
        i += 1

    password_file = opts.get("--vault-password-file")
    if password_file and not os.path.exists(password_file):
        fail(f"ERROR! The vault password file {password_file} was not found")

    vault_id = opts.get("--encrypt-vault-id")

    if action == "view":
        sys.stdout.write(decode(read_source(args[0])))
    elif action == "decrypt":
        emit(args[0], opts.get("output"), decode(read_source(args[0])))
        print("Decryption successful")
    elif action == "encrypt":
        check_encrypt(vault_id)
        emit(args[0], opts.get("output"), "\n".join(encode(read_source(args[0]), vault_id)) + "\n")
        print("Encryption successful")
    elif action == "encrypt_string":
        check_encrypt(vault_id)
        name = opts.get("--stdin-name", "string")
        print(f"{name}: !vault |")
        for line in encode(sys.stdin.read(), vault_id):
            print("          " + line)
        sys.stderr.write("Encryption successful\n")
    else:
        fail(f"ERROR! unknown action {action}")


main(sys.argv[1:])
'''


def stub_encrypt(text: str, vault_id: Optional[str] = None) -> list[str]:
    """Ciphertext lines the stub tool would produce for text."""
    header = f"$ANSIBLE_VAULT;1.2;AES256;{vault_id}" if vault_id else "$ANSIBLE_VAULT;1.1;AES256"
    data = text.encode("utf-8").hex()
    return [header] + [data[i:i + 80] for i in range(0, len(data), 80)]


def stub_decrypt(lines: list[str]) -> str:
    """Plaintext behind stub ciphertext lines (indentation ignored)."""
    stripped = [line.strip() for line in lines if line.strip()]
    return bytes.fromhex("".join(stripped[1:])).decode("utf-8")


class VaultCallLog:
    """Reads the invocation log written by the stub tool."""

    def __init__(self, path: Path):
        self.path = path

    def calls(self) -> list[str]:
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()

    def count(self, action: Optional[str] = None) -> int:
        calls = self.calls()
        if action is None:
            return len(calls)
        return sum(1 for call in calls if call.split(" ", 1)[0] == action)


@pytest.fixture(autouse=True)
def reset_globals(monkeypatch):
    """Isolate tests from cached settings and the caller's environment."""
    import vault_editor.config.settings as settings_module
    import vault_editor.vault.config as config_module

    monkeypatch.setattr(settings_module, "_settings", None)
    monkeypatch.setattr(config_module, "_config", None)
    for var in (
        "VAULT_EDITOR_EXECUTABLE",
        "VAULT_EDITOR_PASSWORD_FILE",
        "VAULT_EDITOR_CFG_DIR",
        "VAULT_EDITOR_TRANSPORT",
        "VAULT_EDITOR_DEBUG",
        "VAULT_EDITOR_LOG_FILE",
        "LOG_LEVEL",
        "STUB_VAULT_IDS",
        "STUB_ALWAYS_AMBIGUOUS",
        "STUB_FAIL_ENCRYPT",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def vault_tool(tmp_path: Path) -> Path:
    """An executable stub of ansible-vault using a reversible hex 'cipher'."""
    if os.name != "posix":
        pytest.skip("stub vault tool needs a POSIX shebang")

    tool = tmp_path / "bin" / "ansible-vault"
    tool.parent.mkdir()
    tool.write_text(f"#!{sys.executable}\n{STUB_VAULT_SCRIPT}", encoding="utf-8")
    tool.chmod(tool.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return tool


@pytest.fixture
def vault_log(tmp_path: Path, monkeypatch) -> VaultCallLog:
    """Record every stub tool invocation."""
    log_path = tmp_path / "vault-calls.log"
    monkeypatch.setenv("STUB_VAULT_LOG", str(log_path))
    return VaultCallLog(log_path)


@pytest.fixture
def runner_tmp_dir(tmp_path: Path) -> Path:
    """Dedicated directory for runner temp files, so leaks are visible."""
    directory = tmp_path / "runner-tmp"
    directory.mkdir()
    return directory


@pytest.fixture(params=["stdin", "tempfile"])
def transport(request):
    """Run a test once per payload transport."""
    from vault_editor.vault import Transport

    return Transport(request.param)


@pytest.fixture
def vault_config(vault_tool: Path, transport):
    """VaultConfig pointing at the stub tool."""
    from vault_editor.vault import VaultConfig

    return VaultConfig(vault_executable=str(vault_tool), transport=transport)


@pytest.fixture
def orchestrator(vault_config, runner_tmp_dir: Path):
    """VaultOrchestrator wired to the stub tool."""
    from vault_editor.vault import ProcessRunner, VaultOrchestrator

    runner = ProcessRunner(
        executable=vault_config.vault_executable,
        tmp_dir=runner_tmp_dir,
    )
    return VaultOrchestrator(vault_config, runner=runner)


@pytest.fixture
def encrypt_lines() -> Callable[..., list[str]]:
    """Produce stub ciphertext lines for test documents."""
    return stub_encrypt


@pytest.fixture
def decrypt_lines() -> Callable[[list[str]], str]:
    """Recover plaintext from stub ciphertext lines."""
    return stub_decrypt


@pytest.fixture
def sample_yaml_lines() -> list[str]:
    """A group_vars style document with one inline vault block."""
    cipher = stub_encrypt("s3cret")
    return [
        "---",
        "db:",
        "  password: !vault |",
        *["    " + line for line in cipher],
        "  host: localhost",
        "api_key: plain-value",
    ]


@pytest.fixture
def sample_yaml_file(tmp_path: Path, sample_yaml_lines: list[str]) -> Path:
    """sample_yaml_lines written to disk."""
    path = tmp_path / "group_vars" / "all.yml"
    path.parent.mkdir()
    path.write_text("\n".join(sample_yaml_lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def vault_file(tmp_path: Path) -> Path:
    """A whole-file vault holding a small YAML document."""
    path = tmp_path / "secrets.yml"
    path.write_text("\n".join(stub_encrypt("token: abc123\n")) + "\n", encoding="utf-8")
    return path
