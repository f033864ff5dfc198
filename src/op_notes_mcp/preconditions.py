"""Checks that run before any call into 1Password.

Handlers call these in a fixed order (vault, then required fields in schema
order) and return the first failure unchanged.
"""

from typing import Any, Mapping, Optional

from .responses import Outcome, field_required, vault_not_specified

FIELD_LABELS = {
    "noteName": "Note name",
    "content": "Content",
}


def check_vault_configured(vault: Optional[str]) -> Optional[Outcome]:
    """Return a precondition failure when no target vault is configured."""
    if not vault or not vault.strip():
        return vault_not_specified()
    return None


def check_required(fields: Mapping[str, Any], action: str) -> Optional[Outcome]:
    """
    Check required fields in declaration order.

    Args:
        fields: Ordered mapping of parameter name to caller-supplied value
        action: Verb used in the message ("create", "append", ...)

    Returns:
        PreconditionFailed naming the first missing or empty field, or None
    """
    for name, value in fields.items():
        if not isinstance(value, str) or not value:
            return field_required(FIELD_LABELS.get(name, name), action)
    return None
