"""Edit sessions for vaulted values.

An EditSession owns one open edit: the decrypted snapshot, where it came
from, and how to put re-encrypted content back. A session is consumed by
exactly one save or cancel; a vault-id selection adds at most one retry.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..utils.logging import get_logger
from .document import Document
from .exceptions import (
    DecryptionError,
    EncryptionError,
    SessionClosedError,
    VaultError,
    VaultIdRequiredError,
    VaultNotFoundError,
)
from .locator import VaultBlock, VaultDocument, find_plain_scalar, find_vault_block
from .orchestrator import VaultOrchestrator

logger = get_logger(__name__)

# Ciphertext of a newly vaulted scalar sits this far below its key
SCALAR_CONTENT_INDENT = "  "


class SessionState(str, Enum):
    """Lifecycle of an edit session."""

    OPEN = "open"
    NEEDS_VAULT_ID = "needs_vault_id"
    SAVED = "saved"
    UNCHANGED = "unchanged"
    CANCELLED = "cancelled"
    FAILED = "failed"


CLOSED_STATES = {
    SessionState.SAVED,
    SessionState.UNCHANGED,
    SessionState.CANCELLED,
    SessionState.FAILED,
}


@dataclass(frozen=True)
class InlineTarget:
    """An inline vault block inside a document."""

    block: VaultBlock

    @property
    def name(self) -> str:
        return self.block.key


@dataclass(frozen=True)
class FileTarget:
    """A whole-file vault."""

    vault: VaultDocument

    @property
    def path(self) -> Path:
        return self.vault.path

    @property
    def name(self) -> str:
        return self.vault.name


EditTarget = Union[InlineTarget, FileTarget]


@dataclass(frozen=True)
class SaveResult:
    """Outcome of a save or retry."""

    status: SessionState
    vault_ids: Optional[list[str]] = None

    @property
    def needs_vault_id(self) -> bool:
        return self.status == SessionState.NEEDS_VAULT_ID


def editable_text(plaintext: str) -> str:
    """Drop the single synthetic trailing newline the tool adds."""
    return plaintext[:-1] if plaintext.endswith("\n") else plaintext


class EditSession:
    """
    One in-progress edit of a vault block or vault file.

    Usage:
        session = EditSession.open(orchestrator, document, line=12)
        result = session.save(edited_text)
        if result.needs_vault_id:
            result = session.retry_with_vault_id(choose(result.vault_ids))
    """

    def __init__(
        self,
        orchestrator: VaultOrchestrator,
        document: Document,
        target: EditTarget,
        plaintext: str,
        vault_id: Optional[str] = None,
    ):
        """
        Initialize an edit session.

        Args:
            orchestrator: Orchestrator used to re-encrypt on save
            document: Document holding the target
            target: InlineTarget or FileTarget
            plaintext: Decrypted value as returned by ansible-vault
            vault_id: Vault-id for the first encryption attempt
        """
        self.orchestrator = orchestrator
        self.document = document
        self.target = target
        self.original_plaintext = editable_text(plaintext)
        self.vault_id = vault_id
        self.state = SessionState.OPEN
        self._pending_text: Optional[str] = None

    @classmethod
    def open(
        cls,
        orchestrator: VaultOrchestrator,
        document: Document,
        line: int,
        vault_id: Optional[str] = None,
    ) -> "EditSession":
        """
        Open a session for the vault at a line, or for the whole file.

        Args:
            orchestrator: Orchestrator for decrypt/encrypt
            document: Document to edit
            line: 1-based line number
            vault_id: Vault-id for the first encryption attempt

        Returns:
            Open EditSession

        Raises:
            VaultNotFoundError: If there is neither a block nor a vault file
            DecryptionError: If ansible-vault cannot decrypt an inline block
        """
        lines = document.get_lines()
        block = find_vault_block(lines, line)
        if block is not None:
            plaintext = orchestrator.decrypt_block(block.content)
            logger.debug(f"access vault_type=inline key={block.key} lines={block.start_line}-{block.end_line}")
            return cls(orchestrator, document, InlineTarget(block), plaintext, vault_id)

        path = document.path
        where = f"{path}:{line}" if path is not None else f"line {line}"
        if path is None:
            raise VaultNotFoundError(where)

        # One view call both detects and decrypts a whole-file vault
        try:
            plaintext = orchestrator.decrypt_file(path)
        except DecryptionError as e:
            raise VaultNotFoundError(where) from e

        logger.debug(f"access vault_type=file file={path}")
        target = FileTarget(VaultDocument(Path(path), len(lines)))
        return cls(orchestrator, document, target, plaintext, vault_id)

    @property
    def name(self) -> str:
        return self.target.name

    @property
    def is_closed(self) -> bool:
        return self.state in CLOSED_STATES

    def save(self, text: str) -> SaveResult:
        """
        Save edited plaintext back into the target.

        Unchanged text closes the session without running ansible-vault
        or touching the document.

        Args:
            text: Edited plaintext

        Returns:
            SaveResult; NEEDS_VAULT_ID carries the vault-ids to choose from

        Raises:
            SessionClosedError: If the session was already closed
            EncryptionError: If encryption fails for another reason
        """
        self._require_state(SessionState.OPEN)

        if text == self.original_plaintext:
            logger.debug("save unchanged, nothing to encrypt")
            self.state = SessionState.UNCHANGED
            return SaveResult(self.state)

        try:
            self._apply(text, self.vault_id)
        except VaultIdRequiredError as e:
            self._pending_text = text
            self.state = SessionState.NEEDS_VAULT_ID
            return SaveResult(self.state, e.vault_ids)
        except VaultError:
            self.state = SessionState.FAILED
            raise

        self.state = SessionState.SAVED
        return SaveResult(self.state)

    def retry_with_vault_id(self, vault_id: str) -> SaveResult:
        """
        Retry the pending save once with a chosen vault-id.

        A second failure is terminal; there is no further retry.

        Raises:
            SessionClosedError: If the session was already closed
            EncryptionError: If encryption fails again
        """
        self._require_state(SessionState.NEEDS_VAULT_ID)
        text = self._pending_text
        self._pending_text = None

        try:
            self._apply(text, vault_id)
        except VaultIdRequiredError as e:
            self.state = SessionState.FAILED
            raise EncryptionError(
                f"Failed to encrypt with vault-id {vault_id}: {e.result.output.strip() if e.result else e}",
                result=e.result,
            ) from e
        except VaultError:
            self.state = SessionState.FAILED
            raise

        self.state = SessionState.SAVED
        return SaveResult(self.state)

    def cancel(self) -> None:
        """Discard the edit without encrypting or writing anything."""
        if self.is_closed:
            raise SessionClosedError()
        self._pending_text = None
        self.state = SessionState.CANCELLED

    def _require_state(self, expected: SessionState) -> None:
        if self.is_closed:
            raise SessionClosedError()
        if self.state != expected:
            raise VaultError(f"Edit session is {self.state.value}, expected {expected.value}.")

    def _apply(self, text: str, vault_id: Optional[str]) -> None:
        """Encrypt text and write it into the target."""
        if isinstance(self.target, InlineTarget):
            self._apply_inline(self.target.block, text, vault_id)
        else:
            self._apply_file(self.target.path, text, vault_id)

    def _apply_inline(self, block: VaultBlock, text: str, vault_id: Optional[str]) -> None:
        vault_lines = self.orchestrator.encrypt_value(text, vault_id=vault_id)

        # Reread: the range must still hold the same block
        current = find_vault_block(self.document.get_lines(), block.start_line)
        if current is None or current.key != block.key or current.start_line != block.start_line:
            raise VaultNotFoundError(f"{block.key} (document changed since it was opened)")

        indent = block.content_indent
        self.document.replace_lines(
            current.start_line,
            current.end_line,
            [indent + line for line in vault_lines],
        )
        logger.info(f"Re-encrypted {block.key} ({len(vault_lines)} lines)")

    def _apply_file(self, path: Path, text: str, vault_id: Optional[str]) -> None:
        self.orchestrator.encrypt_file(path, text, vault_id=vault_id)
        # The tool produced the bytes on disk; show those, not our plaintext
        self.document.reload()
        logger.info(f"File encrypted: {path}")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def encrypt_scalar(
    orchestrator: VaultOrchestrator,
    document: Document,
    line: int,
    vault_id: Optional[str] = None,
) -> VaultBlock:
    """
    Turn a plain ``key: value`` line into an inline vault block.

    Args:
        orchestrator: Orchestrator used to encrypt the value
        document: Document holding the line
        line: 1-based line number of the scalar
        vault_id: Optional vault-id to encrypt with

    Returns:
        The VaultBlock now occupying the line

    Raises:
        VaultError: If the line holds no plain scalar
        VaultIdRequiredError: If ansible-vault needs a vault-id choice
        EncryptionError: On any other refusal
    """
    scalar = find_plain_scalar(document.get_lines(), line)
    if scalar is None:
        raise VaultError(f"No simple YAML scalar on line {line} to encrypt.")

    vault_lines = orchestrator.encrypt_value(_unquote(scalar.value), vault_id=vault_id)

    content_indent = scalar.indent + SCALAR_CONTENT_INDENT
    header = f"{scalar.indent}{scalar.key}: !vault |-"
    body = [content_indent + l for l in vault_lines]
    document.replace_lines(line - 1, line, [header, *body])
    logger.info(f"Inline value encrypted: {scalar.key}")

    return VaultBlock(
        key=scalar.key,
        start_line=line,
        end_line=line + len(body),
        content=tuple(body),
    )
