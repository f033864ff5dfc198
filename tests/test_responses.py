from __future__ import annotations

from op_notes_mcp.op_client import ItemNotFoundError
from op_notes_mcp.responses import (
    OperationFailed,
    PreconditionFailed,
    Success,
    field_required,
    operation_failed,
    render,
    vault_not_specified,
)


def test_success_and_precondition_render_text_unchanged() -> None:
    for outcome in (Success("hello"), PreconditionFailed("set OP_VAULT")):
        envelope = render(outcome)
        assert len(envelope) == 1
        assert envelope[0].type == "text"
        assert envelope[0].text == outcome.text


def test_operation_failed_renders_action_and_message() -> None:
    envelope = render(OperationFailed(action="create", message="already exists"))

    assert [item.text for item in envelope] == ["Failed to create secure note: already exists"]


def test_operation_failed_uses_custom_subject() -> None:
    envelope = render(OperationFailed(action="list", message="not signed in", subject="secure notes"))

    assert envelope[0].text == "Failed to list secure notes: not signed in"


def test_operation_failed_from_exception_uses_message() -> None:
    outcome = operation_failed("get", ItemNotFoundError("missing"))

    assert outcome == OperationFailed(action="get", message="missing")


def test_helper_messages() -> None:
    assert "OP_VAULT" in vault_not_specified().text
    assert field_required("Note name", "archive").text == "Note name is required to archive the secure note."
