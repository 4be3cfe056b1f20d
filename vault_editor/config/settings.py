"""Configuration settings for Vault Editor."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..vault.config import VaultConfig


@dataclass
class Settings:
    """Main settings container."""

    vault: VaultConfig = field(default_factory=VaultConfig)

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        settings = cls(vault=VaultConfig.from_env())

        if log_level := os.getenv("LOG_LEVEL"):
            settings.log_level = log_level

        if log_file := os.getenv("VAULT_EDITOR_LOG_FILE"):
            settings.log_file = Path(log_file)

        if settings.vault.debug:
            settings.log_level = "DEBUG"

        return settings


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def configure(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings
