"""Configuration for Vault Editor."""

from .settings import Settings, configure, get_settings

__all__ = ["Settings", "configure", "get_settings"]
