"""Vault-id negotiation helpers.

When several vault-ids are configured and none is given, ansible-vault
refuses to encrypt and prints something like:

    ERROR! The vault-ids prod,default are available to encrypt. Specify
    the vault-id to encrypt with --encrypt-vault-id
"""

import re
from typing import Optional

from .runner import RunResult


VAULT_IDS_RE = re.compile(r"The vault-ids\s+(.+?)\s+are available to encrypt")


def extract_vault_ids(text: str) -> Optional[list[str]]:
    """
    Extract the vault-ids offered in an ansible-vault error message.

    Args:
        text: stderr or stdout of a failed invocation

    Returns:
        Vault-ids in the order the tool listed them, or None when the
        message is not a vault-id selection error
    """
    if not text:
        return None

    match = VAULT_IDS_RE.search(text)
    if not match:
        return None

    ids = [token.strip() for token in match.group(1).split(",")]
    ids = [token for token in ids if token]
    return ids or None


def classify_failure(result: RunResult) -> Optional[list[str]]:
    """Return the vault-ids from a failed RunResult, checking stderr first."""
    return extract_vault_ids(result.stderr) or extract_vault_ids(result.stdout)
