"""TUI module for Vault Editor.

Provides the interactive edit surface:
- Modal editor for decrypted vault values
- Vault-id chooser when ansible-vault needs one
"""

from .edit_screen import (
    VaultEditApp,
    VaultEditScreen,
    VaultIdScreen,
    choose_vault_id,
    edit_plaintext,
)

__all__ = [
    "VaultEditApp",
    "VaultEditScreen",
    "VaultIdScreen",
    "edit_plaintext",
    "choose_vault_id",
]
