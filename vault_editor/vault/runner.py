"""Subprocess wrapper around the ansible-vault executable.

Non-zero exits are returned in a RunResult for the caller to classify;
only a failure to start the process at all raises.
"""

import os
import subprocess
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Sequence

from ..utils.logging import get_logger
from .exceptions import ProcessLaunchError, TempfileError

logger = get_logger(__name__)

TEMPFILE_PREFIX = "vault_editor_"


@dataclass(frozen=True)
class RunResult:
    """Outcome of one ansible-vault invocation."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    def __post_init__(self):
        # Absent streams normalize to empty strings
        if self.stdout is None:
            object.__setattr__(self, "stdout", "")
        if self.stderr is None:
            object.__setattr__(self, "stderr", "")

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Diagnostic text, stderr first."""
        return "\n".join(part for part in (self.stderr, self.stdout) if part)


class ProcessRunner:
    """
    Runs ansible-vault with a fixed executable, password file and cwd.

    Usage:
        runner = ProcessRunner("ansible-vault", password_file="~/.vault_pass")
        result = runner.run(runner.build_command("view", "secrets.yml"))
        if result.ok:
            print(result.stdout)
    """

    def __init__(
        self,
        executable: str = "ansible-vault",
        password_file: Optional[str] = None,
        cwd: Optional[Path] = None,
        tmp_dir: Optional[Path] = None,
    ):
        """
        Initialize the runner.

        Args:
            executable: ansible-vault executable name or path
            password_file: Optional --vault-password-file value
            cwd: Working directory for the tool (where ansible.cfg lives)
            tmp_dir: Directory for temp files (system default if not provided)
        """
        self.executable = executable
        self.password_file = password_file
        self.cwd = Path(cwd) if cwd else None
        self.tmp_dir = Path(tmp_dir) if tmp_dir else None

    def build_command(
        self,
        action: str,
        *args: str,
        vault_id: Optional[str] = None,
    ) -> list[str]:
        """
        Build an ansible-vault argument vector.

        Args:
            action: Vault sub-command (view, decrypt, encrypt, encrypt_string)
            *args: Trailing arguments (paths, --output, --stdin-name ...)
            vault_id: Optional --encrypt-vault-id value

        Returns:
            Argument list ready for subprocess
        """
        cmd = [self.executable, action]
        if self.password_file:
            cmd.extend(["--vault-password-file", self.password_file])
        if vault_id:
            cmd.extend(["--encrypt-vault-id", vault_id])
        cmd.extend(str(arg) for arg in args)
        logger.debug(f"cmd={self.executable} action={action} vault_id={vault_id or '-'}")
        return cmd

    def run(self, cmd: Sequence[str], stdin: Optional[str] = None) -> RunResult:
        """
        Run a command and capture its exit status and output.

        Args:
            cmd: Argument vector
            stdin: Optional payload for standard input

        Returns:
            RunResult (non-zero exits are not raised)

        Raises:
            ProcessLaunchError: If the executable could not be started
        """
        try:
            proc = subprocess.run(
                list(cmd),
                input=stdin,
                capture_output=True,
                text=True,
                check=False,
                cwd=str(self.cwd) if self.cwd else None,
            )
        except OSError as e:
            raise ProcessLaunchError(cmd[0], e.strerror or str(e)) from e

        result = RunResult(proc.returncode, proc.stdout, proc.stderr)
        logger.debug(
            f"{cmd[1] if len(cmd) > 1 else cmd[0]} exit={result.returncode} "
            f"in_len={len(stdin or '')} out_len={len(result.stdout)} err_len={len(result.stderr)}"
        )
        return result

    @contextmanager
    def tempfile(self, text: str) -> Iterator[Path]:
        """
        Write text to a fresh temp file and always delete it afterwards.

        The file may hold plaintext, so it is removed on every exit path,
        including exceptions raised inside the block.

        Args:
            text: Content to write

        Yields:
            Path to the temp file

        Raises:
            TempfileError: If the file cannot be created or written
        """
        try:
            fd, name = tempfile.mkstemp(
                prefix=TEMPFILE_PREFIX,
                dir=str(self.tmp_dir) if self.tmp_dir else None,
            )
        except OSError as e:
            raise TempfileError(f"Failed to create tempfile: {e}") from e

        path = Path(name)
        try:
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(text)
            except OSError as e:
                raise TempfileError(f"Failed to write tempfile: {e}") from e
            yield path
        finally:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Failed to delete tempfile {path}: {e}")
