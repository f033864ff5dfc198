from __future__ import annotations

import asyncio

import pytest
from mcp import types

import op_notes_mcp
from op_notes_mcp.security import AuditLogger
from op_notes_mcp.server import create_server
from op_notes_mcp.session import OpSession


def _call(server, name: str, arguments: dict | None):
    handler = server.request_handlers[types.CallToolRequest]
    request = types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments),
    )
    return asyncio.run(handler(request)).root


def test_list_tools_over_protocol(fake_client) -> None:
    server = create_server(OpSession(vault="Personal"), fake_client, AuditLogger())
    handler = server.request_handlers[types.ListToolsRequest]

    result = asyncio.run(handler(types.ListToolsRequest(method="tools/list"))).root

    assert [tool.name for tool in result.tools][:3] == ["op-version", "list-secure-notes", "get-secure-note"]
    assert len(result.tools) == 7


def test_missing_argument_is_a_text_result(fake_client) -> None:
    server = create_server(OpSession(vault="Personal"), fake_client, AuditLogger())

    result = _call(server, "create-secure-note", {"noteName": "draft"})

    assert not result.isError
    assert [item.text for item in result.content] == ["Content is required to create the secure note."]


def test_unknown_tool_uses_protocol_error_path(fake_client) -> None:
    server = create_server(OpSession(vault="Personal"), fake_client, AuditLogger())

    result = _call(server, "no-such-tool", {})

    assert result.isError
    assert "no-such-tool" in result.content[0].text
    assert fake_client.calls == []


def test_run_exits_nonzero_on_startup_failure(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    async def _broken(session):
        raise OSError("stdio unavailable")

    monkeypatch.setattr(op_notes_mcp, "main", _broken)
    monkeypatch.setattr(op_notes_mcp, "configure_logging", lambda level: None)

    with pytest.raises(SystemExit) as excinfo:
        op_notes_mcp.run()

    assert excinfo.value.code == 1
    assert "Fatal error: stdio unavailable" in capsys.readouterr().err


def test_run_exits_cleanly_on_interrupt(monkeypatch: pytest.MonkeyPatch) -> None:
    async def _interrupted(session):
        raise KeyboardInterrupt

    monkeypatch.setattr(op_notes_mcp, "main", _interrupted)
    monkeypatch.setattr(op_notes_mcp, "configure_logging", lambda level: None)

    with pytest.raises(SystemExit) as excinfo:
        op_notes_mcp.run()

    assert excinfo.value.code == 0
