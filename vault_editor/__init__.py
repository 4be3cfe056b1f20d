"""Vault Editor - Ansible Vault inline editing tool."""

__version__ = "0.1.0"

from .vault import EditSession, VaultBlock, VaultConfig, VaultOrchestrator

__all__ = [
    "__version__",
    "EditSession",
    "VaultBlock",
    "VaultConfig",
    "VaultOrchestrator",
]
