from __future__ import annotations

from typing import Any, Optional, Sequence

import pytest

from op_notes_mcp.op_client import (
    SECURE_NOTE_CATEGORY,
    DuplicateOrInvalidError,
    ItemNotFoundError,
    ItemSummary,
    OpError,
)
from op_notes_mcp.security import AuditLogger
from op_notes_mcp.server import build_catalog
from op_notes_mcp.session import OpSession


class FakeOpClient:
    """In-memory stand-in for OpClient that records every call."""

    def __init__(self) -> None:
        self.notes: dict[tuple[str, str], str] = {}
        self.archived: set[tuple[str, str]] = set()
        self.calls: list[tuple[Any, ...]] = []
        self.fail_with: Optional[OpError] = None
        self.cli_version = "2.30.3"

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if self.fail_with is not None:
            raise self.fail_with

    def _missing(self, vault: str, name: str) -> ItemNotFoundError:
        return ItemNotFoundError(
            f'"{name}" was not found in the "{vault}" vault. '
            "Note may not exist - consider creating it first."
        )

    @property
    def store_calls(self) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] != "validate_cli"]

    def version(self) -> str:
        self._record("version")
        return self.cli_version

    def validate_cli(self) -> None:
        self._record("validate_cli")

    def check_vault_access(self, vault: str) -> bool:
        self._record("check_vault_access", vault)
        return True

    def list_items(self, vault: str, categories: Optional[Sequence[str]] = None) -> list[ItemSummary]:
        self._record("list_items", vault)
        return [
            ItemSummary(id=f"id-{name}", title=name, category=SECURE_NOTE_CATEGORY, vault=item_vault)
            for (item_vault, name) in self.notes
            if item_vault == vault
        ]

    def get_note_field(self, vault: str, name: str) -> str:
        self._record("get_note_field", vault, name)
        try:
            return self.notes[(vault, name)]
        except KeyError:
            raise self._missing(vault, name) from None

    def create_item(self, vault: str, name: str, content: str) -> None:
        self._record("create_item", vault, name, content)
        if (vault, name) in self.notes:
            raise DuplicateOrInvalidError(f'An item named "{name}" already exists in the "{vault}" vault.')
        self.notes[(vault, name)] = content

    def replace_note_field(self, vault: str, name: str, content: str) -> None:
        self._record("replace_note_field", vault, name, content)
        if (vault, name) not in self.notes:
            raise self._missing(vault, name)
        self.notes[(vault, name)] = content

    def archive_item(self, vault: str, name: str) -> None:
        self._record("archive_item", vault, name)
        if (vault, name) not in self.notes:
            raise self._missing(vault, name)
        del self.notes[(vault, name)]
        self.archived.add((vault, name))


def text_of(envelope) -> str:
    assert len(envelope) == 1
    assert envelope[0].type == "text"
    return envelope[0].text


@pytest.fixture
def fake_client() -> FakeOpClient:
    return FakeOpClient()


@pytest.fixture
def session() -> OpSession:
    return OpSession(vault="Personal")


@pytest.fixture
def catalog(session: OpSession, fake_client: FakeOpClient):
    return build_catalog(session, fake_client, AuditLogger())


@pytest.fixture
def unconfigured_catalog(fake_client: FakeOpClient):
    return build_catalog(OpSession(vault=None), fake_client, AuditLogger())
