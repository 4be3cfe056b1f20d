"""Vault exceptions for Vault Editor."""

from typing import Optional


class VaultError(Exception):
    """Base exception for vault operations."""

    pass


class VaultNotFoundError(VaultError):
    """Raised when no vault block or vault file exists at a position."""

    def __init__(self, location: str = ""):
        message = f"No vault found at {location}" if location else "No vault found."
        super().__init__(message)


class ProcessLaunchError(VaultError):
    """Raised when the vault executable cannot be started at all."""

    def __init__(self, executable: str, reason: str = ""):
        self.executable = executable
        message = f"Could not run {executable}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class TempfileError(VaultError):
    """Raised when a temporary file cannot be created or written."""

    def __init__(self, message: str = "Failed to write tempfile."):
        super().__init__(message)


class ToolRefusedError(VaultError):
    """Raised when the vault tool ran but exited non-zero.

    The captured RunResult is kept on the exception so callers can
    inspect the tool's output.
    """

    default_message = "Vault tool failed."

    def __init__(self, message: Optional[str] = None, result=None):
        self.result = result
        if message is None:
            detail = result.output.strip() if result is not None else ""
            message = f"{self.default_message} {detail}".strip()
        super().__init__(message)


class DecryptionError(ToolRefusedError):
    """Raised when decryption fails."""

    default_message = "Failed to decrypt vault content:"


class EncryptionError(ToolRefusedError):
    """Raised when encryption fails."""

    default_message = "Failed to encrypt content:"


class VaultIdRequiredError(EncryptionError):
    """Raised when the tool needs an explicit vault-id to encrypt with.

    Carries the vault-ids the tool reported, in the order it listed them.
    """

    def __init__(self, vault_ids: list[str], result=None):
        self.vault_ids = list(vault_ids)
        super().__init__(
            f"Select a vault-id to encrypt with: {', '.join(self.vault_ids)}",
            result=result,
        )


class SessionClosedError(VaultError):
    """Raised when an edit session is used after it was closed."""

    def __init__(self, message: str = "Edit session is already closed."):
        super().__init__(message)
