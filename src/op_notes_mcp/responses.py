"""Tool outcomes and the single function that renders them into MCP content."""

from dataclasses import dataclass
from typing import List, Union

from mcp.types import TextContent

DEFAULT_SUBJECT = "secure note"


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class PreconditionFailed:
    text: str


@dataclass(frozen=True)
class OperationFailed:
    """A call into 1Password failed; rendered as "Failed to {action} {subject}: {message}"."""

    action: str
    message: str
    subject: str = DEFAULT_SUBJECT


Outcome = Union[Success, PreconditionFailed, OperationFailed]


def render(outcome: Outcome) -> List[TextContent]:
    """
    Convert an outcome into the response envelope.

    All variants produce exactly one text item, so callers cannot tell a
    success from a failure by shape, only by the message.

    Args:
        outcome: Result produced by a tool handler

    Returns:
        Single-element list of TextContent
    """
    if isinstance(outcome, OperationFailed):
        text = f"Failed to {outcome.action} {outcome.subject}: {outcome.message}"
    else:
        text = outcome.text
    return [TextContent(type="text", text=text)]


def vault_not_specified() -> PreconditionFailed:
    return PreconditionFailed(
        "Vault hasn't been specified. To use this tool, set the OP_VAULT environment variable."
    )


def field_required(label: str, action: str) -> PreconditionFailed:
    return PreconditionFailed(f"{label} is required to {action} the secure note.")


def success(text: str) -> Success:
    return Success(text)


def operation_failed(action: str, error: Union[BaseException, str], subject: str = DEFAULT_SUBJECT) -> OperationFailed:
    message = str(error) if isinstance(error, BaseException) else error
    return OperationFailed(action=action, message=message, subject=subject)
