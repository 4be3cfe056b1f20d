"""Vault configuration for Vault Editor."""

import os
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional


ANSIBLE_CFG_NAMES = ("ansible.cfg", ".ansible.cfg")


class Transport(str, Enum):
    """How payloads are handed to the vault executable."""

    AUTO = "auto"
    STDIN = "stdin"  # stdin in, stdout/stderr out, nothing on disk
    TEMPFILE = "tempfile"  # short-lived temp file, edited in place

    @classmethod
    def detect(cls) -> "Transport":
        """Pick the std-stream transport when the host exposes /dev/stdin."""
        if os.name == "posix" and os.path.exists("/dev/stdin") and os.path.exists("/dev/stderr"):
            return cls.STDIN
        return cls.TEMPFILE


@dataclass
class VaultConfig:
    """Configuration for ansible-vault invocations."""

    vault_executable: str = "ansible-vault"
    vault_password_file: Optional[str] = None
    ansible_cfg_directory: Optional[str] = None
    transport: Transport = Transport.AUTO
    debug: bool = False

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            VAULT_EDITOR_EXECUTABLE: Path to ansible-vault (default: ansible-vault)
            VAULT_EDITOR_PASSWORD_FILE: Passed as --vault-password-file
            VAULT_EDITOR_CFG_DIR: Directory holding ansible.cfg
            VAULT_EDITOR_TRANSPORT: auto, stdin or tempfile (default: auto)
            VAULT_EDITOR_DEBUG: Enable debug logging (default: false)
        """
        config = cls()

        if executable := os.getenv("VAULT_EDITOR_EXECUTABLE"):
            config.vault_executable = executable

        if password_file := os.getenv("VAULT_EDITOR_PASSWORD_FILE"):
            config.vault_password_file = password_file

        if cfg_dir := os.getenv("VAULT_EDITOR_CFG_DIR"):
            config.ansible_cfg_directory = cfg_dir

        if transport := os.getenv("VAULT_EDITOR_TRANSPORT"):
            config.transport = Transport(transport.lower())

        if os.getenv("VAULT_EDITOR_DEBUG", "").lower() in ("1", "true", "yes"):
            config.debug = True

        return config

    def resolved_transport(self) -> Transport:
        """Return the concrete transport, detecting it when set to auto."""
        if self.transport == Transport.AUTO:
            return Transport.detect()
        return Transport(self.transport)

    def resolve_ansible_cfg_dir(self, file_path: Optional[Path]) -> Optional[Path]:
        """
        Find the directory whose ansible.cfg applies to a file.

        An explicitly configured directory wins. Otherwise walk upward from
        the file's directory looking for ansible.cfg or .ansible.cfg.

        Args:
            file_path: File being edited (may be None)

        Returns:
            Directory path, or None if nothing was found
        """
        if self.ansible_cfg_directory:
            return Path(self.ansible_cfg_directory).expanduser()
        if not file_path:
            return None

        start = Path(file_path).expanduser().resolve().parent
        for directory in (start, *start.parents):
            for name in ANSIBLE_CFG_NAMES:
                if (directory / name).is_file():
                    return directory
        return None

    def for_file(self, file_path: Optional[Path]) -> "VaultConfig":
        """Return a copy with ansible_cfg_directory resolved for a file."""
        if self.ansible_cfg_directory:
            return self
        resolved = self.resolve_ansible_cfg_dir(file_path)
        if resolved is None:
            return self
        return replace(self, ansible_cfg_directory=str(resolved))


# Global configuration instance
_config: VaultConfig | None = None


def get_vault_config() -> VaultConfig:
    """Get the global vault configuration."""
    global _config
    if _config is None:
        _config = VaultConfig.from_env()
    return _config


def set_vault_config(config: VaultConfig) -> None:
    """Set the global vault configuration."""
    global _config
    _config = config
