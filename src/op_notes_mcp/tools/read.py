"""Read-only tools: op-version, list-secure-notes, get-secure-note."""

from typing import Any, Mapping, Optional

from ..op_client import SECURE_NOTE_CATEGORY, OpClient
from ..responses import Outcome, success
from ..security import AuditLogger
from ..session import OpSession
from ..tools import NOTE_NAME_PROPERTY, ToolHandler


class OpVersionTool(ToolHandler):
    """Tool for reporting the installed 1Password CLI version."""

    title = "1Password CLI Version"
    description = "Show the version of the 1Password CLI (`op`) used by this server."
    action = "query"
    subject = "`op` version"
    requires_vault = False
    requires_cli_check = False

    def __init__(self, session: OpSession, client: OpClient, audit_logger: Optional[AuditLogger] = None):
        super().__init__("op-version", session, client, audit_logger)

    def execute(self, arguments: Mapping[str, Any]) -> Outcome:
        return success(f"`op` version: {self.client.version()}")


class ListSecureNotesTool(ToolHandler):
    """Tool for listing the secure notes in the configured vault."""

    title = "List Secure Notes"
    description = """List the secure notes in the configured 1Password vault.

Returns the number of notes and their titles. Use a title as noteName for the
other secure note tools."""
    action = "list"
    subject = "secure notes"

    def __init__(self, session: OpSession, client: OpClient, audit_logger: Optional[AuditLogger] = None):
        super().__init__("list-secure-notes", session, client, audit_logger)

    def execute(self, arguments: Mapping[str, Any]) -> Outcome:
        items = self.client.list_items(self.vault, categories=[SECURE_NOTE_CATEGORY])
        if not items:
            return success(f'There are no secure notes in the "{self.vault}" vault.')

        noun = "secure note" if len(items) == 1 else "secure notes"
        titles = '\n'.join(f"  • {item.title}" for item in items)
        return success(f'There are {len(items)} {noun} in the "{self.vault}" vault:\n\n{titles}')


class GetSecureNoteTool(ToolHandler):
    """Tool for reading the content of one secure note."""

    title = "Get Secure Note"
    description = """Get the content of a secure note from the configured 1Password vault.

Returns the note's plain-text field. Archived notes cannot be retrieved."""
    properties = {"noteName": NOTE_NAME_PROPERTY}
    required = ("noteName",)
    action = "get"

    def __init__(self, session: OpSession, client: OpClient, audit_logger: Optional[AuditLogger] = None):
        super().__init__("get-secure-note", session, client, audit_logger)

    def execute(self, arguments: Mapping[str, Any]) -> Outcome:
        note_name = arguments["noteName"]
        content = self.client.get_note_field(self.vault, note_name)
        if not content:
            return success(f'Secure note "{note_name}" is empty.')
        return success(content)
