"""Ansible Vault editing engine for Vault Editor.

Finds inline ``!vault`` blocks and whole-file vaults, runs ansible-vault
to decrypt and encrypt them, and writes edited values back in place.

Usage:
    # Open the vault under line 12 of a YAML file
    from vault_editor.vault import EditSession, FileDocument, VaultOrchestrator
    document = FileDocument(path)
    vo = VaultOrchestrator(get_vault_config().for_file(path))
    session = EditSession.open(vo, document, line=12)

    # Save edits, choosing a vault-id if ansible-vault asks for one
    result = session.save(new_text)
    if result.needs_vault_id:
        session.retry_with_vault_id(result.vault_ids[0])
"""

# Exceptions
from .exceptions import (
    DecryptionError,
    EncryptionError,
    ProcessLaunchError,
    SessionClosedError,
    TempfileError,
    ToolRefusedError,
    VaultError,
    VaultIdRequiredError,
    VaultNotFoundError,
)

# Configuration
from .config import (
    Transport,
    VaultConfig,
    get_vault_config,
    set_vault_config,
)

# Block detection
from .locator import (
    PlainScalar,
    VaultBlock,
    VaultDocument,
    find_plain_scalar,
    find_vault_block,
)

# Process execution
from .runner import (
    ProcessRunner,
    RunResult,
)

# Vault-id negotiation
from .identities import (
    classify_failure,
    extract_vault_ids,
)

# Orchestration
from .orchestrator import VaultOrchestrator

# Documents
from .document import (
    Document,
    FileDocument,
    TextDocument,
)

# Edit sessions
from .session import (
    EditSession,
    FileTarget,
    InlineTarget,
    SaveResult,
    SessionState,
    encrypt_scalar,
)

__all__ = [
    # Exceptions
    "VaultError",
    "VaultNotFoundError",
    "ProcessLaunchError",
    "TempfileError",
    "ToolRefusedError",
    "DecryptionError",
    "EncryptionError",
    "VaultIdRequiredError",
    "SessionClosedError",
    # Configuration
    "Transport",
    "VaultConfig",
    "get_vault_config",
    "set_vault_config",
    # Locator
    "VaultBlock",
    "VaultDocument",
    "PlainScalar",
    "find_vault_block",
    "find_plain_scalar",
    # Runner
    "ProcessRunner",
    "RunResult",
    # Vault-ids
    "extract_vault_ids",
    "classify_failure",
    # Orchestrator
    "VaultOrchestrator",
    # Documents
    "Document",
    "TextDocument",
    "FileDocument",
    # Sessions
    "EditSession",
    "InlineTarget",
    "FileTarget",
    "SaveResult",
    "SessionState",
    "encrypt_scalar",
]
