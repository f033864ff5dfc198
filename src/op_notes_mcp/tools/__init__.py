"""Tool registry and base classes for MCP tools."""

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from mcp.types import TextContent, Tool

from ..op_client import OpClient, OpError
from ..preconditions import check_required, check_vault_configured
from ..responses import DEFAULT_SUBJECT, Outcome, operation_failed, render
from ..security import AuditLogger
from ..session import OpSession

logger = logging.getLogger(__name__)

NOTE_NAME_PROPERTY = {
    "type": "string",
    "description": "Title of the secure note in the configured vault",
}


class DuplicateOperationError(Exception):
    """Raised when two tools are registered under the same name."""


class UnknownOperationError(Exception):
    """Raised when a caller asks for a tool that is not in the catalog."""


class ToolHandler:
    """
    Base class for MCP tool handlers.

    Subclasses declare their schema as class attributes and implement
    execute(). run_tool() applies the shared contract: vault check, required
    arguments in declaration order, CLI check, then execute(), then render().
    """

    title: str = ""
    description: str = ""
    properties: Mapping[str, dict] = {}
    required: Tuple[str, ...] = ()
    # Verb used in "Failed to {action} {subject}" and "... is required to {action} ..."
    action: str = ""
    subject: str = DEFAULT_SUBJECT
    requires_vault: bool = True
    requires_cli_check: bool = True
    mutating: bool = False

    def __init__(
        self,
        name: str,
        session: OpSession,
        client: OpClient,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """Initialize tool handler with name and its collaborators."""
        self.name = name
        self.session = session
        self.client = client
        self.audit_logger = audit_logger or AuditLogger()

    @property
    def vault(self) -> Optional[str]:
        return self.session.vault

    def get_tool_description(self) -> Tool:
        """
        Get MCP tool description with input schema.

        Returns:
            Tool description for MCP
        """
        return Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            inputSchema={
                "type": "object",
                "properties": {key: dict(value) for key, value in self.properties.items()},
                "required": list(self.required),
            },
        )

    def check_preconditions(self, arguments: Mapping[str, Any]) -> Optional[Outcome]:
        if self.requires_vault:
            outcome = check_vault_configured(self.vault)
            if outcome is not None:
                return outcome

        return check_required({field: arguments.get(field) for field in self.required}, self.action)

    def run_tool(self, arguments: Optional[dict]) -> Sequence[TextContent]:
        """
        Execute the tool with given arguments.

        Args:
            arguments: Tool arguments from MCP, unvalidated

        Returns:
            Single-element sequence of TextContent
        """
        arguments = arguments or {}

        outcome = self.check_preconditions(arguments)
        if outcome is None:
            try:
                if self.requires_cli_check:
                    self.client.validate_cli()
                outcome = self.execute(arguments)
            except OpError as e:
                logger.warning("%s failed: %s", self.name, e)
                if self.mutating:
                    self.audit_logger.log("FAILED", arguments.get("noteName", ""), self.vault or "", f"{self.action}: {e}")
                outcome = operation_failed(self.action, e, self.subject)

        return render(outcome)

    def execute(self, arguments: Mapping[str, Any]) -> Outcome:
        """
        Perform the operation once all preconditions hold.

        Must be implemented by subclasses. OpError raised here is converted
        to an OperationFailed outcome by run_tool().
        """
        raise NotImplementedError


class ToolCatalog:
    """Registry mapping tool names to handlers, in registration order."""

    def __init__(self):
        self._handlers: Dict[str, ToolHandler] = {}

    def register(self, handler: ToolHandler) -> ToolHandler:
        if handler.name in self._handlers:
            raise DuplicateOperationError(f"Tool '{handler.name}' is already registered")
        self._handlers[handler.name] = handler
        return handler

    @property
    def handlers(self) -> Mapping[str, ToolHandler]:
        return MappingProxyType(self._handlers)

    def names(self) -> List[str]:
        return list(self._handlers)

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def list_tools(self) -> List[Tool]:
        return [handler.get_tool_description() for handler in self._handlers.values()]

    def dispatch(self, name: str, arguments: Optional[dict]) -> Sequence[TextContent]:
        """
        Run the named tool and return its envelope untouched.

        Raises:
            UnknownOperationError: If no tool is registered under name
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownOperationError(
                f"Unknown tool: {name}. Available tools: {', '.join(self._handlers)}"
            )

        logger.debug("Dispatching %s", name)
        return handler.run_tool(arguments)
