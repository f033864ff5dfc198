"""MCP server setup and tool registration for op-notes-mcp."""

from typing import Optional, Sequence

from mcp.server import Server
from mcp.types import TextContent, Tool

from .op_client import OpClient
from .security import AuditLogger
from .session import OpSession
from .tools import ToolCatalog
from .tools.read import GetSecureNoteTool, ListSecureNotesTool, OpVersionTool
from .tools.write import (
    AppendSecureNoteTool,
    ArchiveSecureNoteTool,
    CreateSecureNoteTool,
    UpdateSecureNoteTool,
)

SERVER_NAME = "op-notes-mcp"

TOOL_CLASSES = (
    OpVersionTool,
    ListSecureNotesTool,
    GetSecureNoteTool,
    CreateSecureNoteTool,
    AppendSecureNoteTool,
    UpdateSecureNoteTool,
    ArchiveSecureNoteTool,
)


def build_catalog(
    session: OpSession,
    client: Optional[OpClient] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> ToolCatalog:
    """
    Instantiate every tool and register it.

    Raises:
        DuplicateOperationError: If two tools share a name
    """
    if client is None:
        client = OpClient(session.cli_path, timeout=session.timeout)
    if audit_logger is None:
        audit_logger = AuditLogger(session.audit_log)

    catalog = ToolCatalog()
    for tool_class in TOOL_CLASSES:
        catalog.register(tool_class(session, client, audit_logger))
    return catalog


def create_server(
    session: OpSession,
    client: Optional[OpClient] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> Server:
    """Create the MCP server with list_tools and call_tool bound to a fresh catalog."""
    catalog = build_catalog(session, client, audit_logger)
    app = Server(SERVER_NAME)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """
        List all available secure note tools.

        Returns:
            List of Tool descriptions for MCP
        """
        return catalog.list_tools()

    # Missing arguments are answered by the tools themselves, so the SDK's
    # schema validation is turned off.
    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict) -> Sequence[TextContent]:
        """
        Execute a tool with given arguments.

        An unknown name raises, which the SDK reports as an error result.

        Args:
            name: Tool name to execute
            arguments: Tool arguments from MCP

        Returns:
            Sequence of TextContent responses
        """
        return catalog.dispatch(name, arguments)

    return app
