"""Encryption orchestration on top of the ansible-vault process runner.

Composes ProcessRunner and vault-id extraction into the operations the
edit session needs: decrypt a block, decrypt a file, encrypt a value and
encrypt a file.
"""

import re
from pathlib import Path
from typing import Optional, Sequence

from ..utils.logging import get_logger
from .config import Transport, VaultConfig, get_vault_config
from .exceptions import DecryptionError, EncryptionError, VaultIdRequiredError
from .identities import classify_failure
from .runner import ProcessRunner, RunResult

logger = get_logger(__name__)

STDIN_PATH = "/dev/stdin"
STDERR_OUTPUT = "--output=/dev/stderr"
STDIN_NAME = "value"

VAULT_HEADER_PREFIX = "$ANSIBLE_VAULT"
HEX_LINE_RE = re.compile(r"^[0-9a-fA-F]+$")
ENCRYPT_STRING_HEADER_RE = re.compile(rf"^\s*{STDIN_NAME}:\s*!vault\b")


def _ciphertext_lines(text: str) -> list[str]:
    """
    Pull vault ciphertext lines out of tool output.

    Keeps the $ANSIBLE_VAULT header and the hex lines after it, dropping
    indentation and any status chatter around them.
    """
    lines: list[str] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not lines:
            if line.startswith(VAULT_HEADER_PREFIX):
                lines.append(line)
        elif HEX_LINE_RE.match(line):
            lines.append(line)
        elif line:
            break
    return lines


class VaultOrchestrator:
    """
    High-level decrypt/encrypt operations backed by ansible-vault.

    Usage:
        vo = VaultOrchestrator(config.for_file(path))

        plaintext = vo.decrypt_block(block.content)
        try:
            lines = vo.encrypt_value(plaintext)
        except VaultIdRequiredError as e:
            lines = vo.encrypt_value(plaintext, vault_id=pick(e.vault_ids))
    """

    def __init__(
        self,
        config: Optional[VaultConfig] = None,
        runner: Optional[ProcessRunner] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Vault configuration (uses global if not provided)
            runner: Process runner (built from config if not provided)
        """
        self.config = config or get_vault_config()
        self.runner = runner or ProcessRunner(
            executable=self.config.vault_executable,
            password_file=self.config.vault_password_file,
            cwd=self.config.ansible_cfg_directory,
        )
        self.transport = self.config.resolved_transport()

    # Detection

    def is_file_vault(self, path: Path) -> bool:
        """Check whether ansible-vault can view a file as a whole-file vault."""
        result = self.runner.run(self.runner.build_command("view", str(path)))
        return result.ok

    # Decryption

    def decrypt_block(self, content_lines: Sequence[str]) -> str:
        """
        Decrypt the ciphertext lines of an inline vault block.

        All leading whitespace is stripped from each line; ciphertext
        carries no meaningful indentation.

        Args:
            content_lines: Raw, indented ciphertext lines

        Returns:
            Decrypted plaintext

        Raises:
            DecryptionError: If ansible-vault refuses
        """
        payload = "\n".join(line.lstrip() for line in content_lines)

        if self.transport == Transport.STDIN:
            logger.debug(f"decrypt_inline via stdin lines={len(content_lines)}")
            cmd = self.runner.build_command("decrypt", STDIN_PATH, STDERR_OUTPUT)
            result = self.runner.run(cmd, stdin=payload)
            if not result.ok:
                raise DecryptionError(result=result)
            return result.stderr

        logger.debug(f"decrypt_inline via tempfile lines={len(content_lines)}")
        with self.runner.tempfile(payload) as tmp:
            result = self.runner.run(self.runner.build_command("decrypt", str(tmp)))
            if not result.ok:
                raise DecryptionError(result=result)
            return tmp.read_text(encoding="utf-8")

    def decrypt_file(self, path: Path) -> str:
        """
        Decrypt a whole-file vault with ``ansible-vault view``.

        Args:
            path: Encrypted file

        Returns:
            Decrypted file content

        Raises:
            DecryptionError: If ansible-vault refuses
        """
        logger.debug(f"decrypt_file file={path}")
        result = self.runner.run(self.runner.build_command("view", str(path)))
        if not result.ok:
            raise DecryptionError(result=result)
        return result.stdout

    # Encryption

    def encrypt_value(self, plaintext: str, vault_id: Optional[str] = None) -> list[str]:
        """
        Encrypt a value for an inline vault block.

        Args:
            plaintext: Value to encrypt
            vault_id: Optional vault-id to encrypt with

        Returns:
            Ciphertext lines without indentation

        Raises:
            VaultIdRequiredError: If ansible-vault needs a vault-id choice
            EncryptionError: On any other refusal
        """
        if self.transport == Transport.STDIN:
            logger.debug(f"encrypt_inline via stdin bytes={len(plaintext)}")
            cmd = self.runner.build_command(
                "encrypt_string", "--stdin-name", STDIN_NAME, vault_id=vault_id
            )
            result = self.runner.run(cmd, stdin=plaintext)
            self._check_encrypted(result)
            return self._parse_encrypt_string(result)

        logger.debug(f"encrypt_inline via tempfile bytes={len(plaintext)}")
        return self._encrypt_via_tempfile(plaintext, vault_id)

    def encrypt_file(self, path: Path, plaintext: str, vault_id: Optional[str] = None) -> None:
        """
        Encrypt plaintext and write it to a file as a whole-file vault.

        The file is only written after ansible-vault succeeded.

        Args:
            path: Destination file
            plaintext: New file content
            vault_id: Optional vault-id to encrypt with

        Raises:
            VaultIdRequiredError: If ansible-vault needs a vault-id choice
            EncryptionError: On any other refusal
        """
        logger.debug(f"encrypt_file file={path} bytes={len(plaintext)}")
        if self.transport == Transport.STDIN:
            cmd = self.runner.build_command("encrypt", STDIN_PATH, STDERR_OUTPUT, vault_id=vault_id)
            result = self.runner.run(cmd, stdin=plaintext)
            self._check_encrypted(result)
            lines = _ciphertext_lines(result.stderr)
            if not lines:
                raise EncryptionError("ansible-vault returned no ciphertext.", result=result)
        else:
            lines = self._encrypt_via_tempfile(plaintext, vault_id)

        Path(path).write_text("\n".join(lines) + "\n", encoding="utf-8")
        logger.debug(f"wrote encrypted file lines={len(lines)}")

    def encrypt_path(self, path: Path, vault_id: Optional[str] = None) -> None:
        """
        Encrypt an existing plaintext file in place.

        Raises:
            VaultIdRequiredError: If ansible-vault needs a vault-id choice
            EncryptionError: On any other refusal
        """
        logger.debug(f"encrypt_path file={path}")
        result = self.runner.run(self.runner.build_command("encrypt", str(path), vault_id=vault_id))
        self._check_encrypted(result)

    # Internals

    def _encrypt_via_tempfile(self, plaintext: str, vault_id: Optional[str]) -> list[str]:
        with self.runner.tempfile(plaintext) as tmp:
            result = self.runner.run(self.runner.build_command("encrypt", str(tmp), vault_id=vault_id))
            self._check_encrypted(result)
            return [line.strip() for line in tmp.read_text(encoding="utf-8").splitlines() if line.strip()]

    @staticmethod
    def _check_encrypted(result: RunResult) -> None:
        """Raise the right encryption error for a failed invocation."""
        if result.ok:
            return
        vault_ids = classify_failure(result)
        if vault_ids:
            raise VaultIdRequiredError(vault_ids, result=result)
        raise EncryptionError(result=result)

    @staticmethod
    def _parse_encrypt_string(result: RunResult) -> list[str]:
        """Strip the ``value: !vault |`` header from encrypt_string output."""
        lines = result.stdout.splitlines()
        for index, line in enumerate(lines):
            if ENCRYPT_STRING_HEADER_RE.match(line):
                body = [l.strip() for l in lines[index + 1:] if l.strip()]
                if body:
                    return body
                break
        raise EncryptionError("Unexpected encrypt_string output.", result=result)
