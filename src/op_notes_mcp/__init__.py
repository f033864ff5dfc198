"""op-notes-mcp: Model Context Protocol server for 1Password secure notes."""

import asyncio
import logging
import sys
from typing import Optional

from .op_client import OpClient
from .server import create_server
from .session import OpSession

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Send log records to stderr; stdout carries the MCP protocol."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


async def main(session: Optional[OpSession] = None):
    """
    Main entry point for the op-notes-mcp server.

    Sets up stdio-based MCP server and runs it until the client closes the stream.
    """
    from mcp.server.stdio import stdio_server

    if session is None:
        session = OpSession.from_environment()

    client = OpClient(session.cli_path, timeout=session.timeout)
    if not session.has_vault:
        logger.warning("OP_VAULT is not set; secure note tools will ask for it")
    elif not client.check_vault_access(session.vault):
        logger.warning("Vault %r is not accessible; sign in with `op signin` or check OP_VAULT", session.vault)

    app = create_server(session, client)
    logger.info("1Password secure notes MCP server running on stdio")

    async with stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options()
        )


def run():
    """Synchronous wrapper for main() to use as console script entry point."""
    session = OpSession.from_environment()
    configure_logging(session.log_level)
    try:
        asyncio.run(main(session))
    except KeyboardInterrupt:
        print("\nop-notes-mcp server stopped.", file=sys.stderr)
        sys.exit(0)
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        sys.exit(1)


__version__ = "1.0.0"
__all__ = ["main", "run", "create_server", "OpSession", "OpClient"]
