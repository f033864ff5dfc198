"""Write tools: create, append, update and archive secure notes."""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from ..op_client import OpClient
from ..responses import Outcome, success
from ..security import AuditLogger
from ..session import OpSession
from ..tools import NOTE_NAME_PROPERTY, ToolHandler

CONTENT_PROPERTY = {
    "type": "string",
    "description": "Plain-text content stored in the note's concealed field",
}


class CreateSecureNoteTool(ToolHandler):
    """Tool for creating a new secure note."""

    title = "Create Secure Note"
    description = """Create a secure note in the configured 1Password vault.

The note is stored as a "Secure Note" item whose concealed notesPlain field
holds the content. Fails if an item with the same name already exists."""
    properties = {"noteName": NOTE_NAME_PROPERTY, "content": CONTENT_PROPERTY}
    required = ("noteName", "content")
    action = "create"
    mutating = True

    def __init__(self, session: OpSession, client: OpClient, audit_logger: Optional[AuditLogger] = None):
        super().__init__("create-secure-note", session, client, audit_logger)

    def execute(self, arguments: Mapping[str, Any]) -> Outcome:
        note_name = arguments["noteName"]
        self.client.create_item(self.vault, note_name, arguments["content"])
        self.audit_logger.log("CREATED", note_name, self.vault)
        return success(f'Created secure note "{note_name}" in the "{self.vault}" vault.')


class AppendSecureNoteTool(ToolHandler):
    """
    Tool for appending a line to an existing secure note.

    Appending is a read-modify-write against 1Password, which has no atomic
    append. Calls for the same note are serialized within this process;
    writers outside the process can still interleave and lose an update.
    """

    title = "Append to Secure Note"
    description = """Append content to an existing secure note in the configured 1Password vault.

The new content is added after the existing content, separated by a single newline."""
    properties = {"noteName": NOTE_NAME_PROPERTY, "content": CONTENT_PROPERTY}
    required = ("noteName", "content")
    action = "append"
    mutating = True

    def __init__(self, session: OpSession, client: OpClient, audit_logger: Optional[AuditLogger] = None):
        super().__init__("append-secure-note", session, client, audit_logger)
        # (vault, note) -> [lock, number of callers holding or waiting for it]
        self._locks: Dict[Tuple[str, str], list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _note_lock(self, note_name: str) -> Iterator[None]:
        """Hold the per-note lock; the entry is dropped when its last caller leaves."""
        key = (self.vault, note_name)
        with self._locks_guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def execute(self, arguments: Mapping[str, Any]) -> Outcome:
        note_name = arguments["noteName"]
        content = arguments["content"]

        with self._note_lock(note_name):
            existing = self.client.get_note_field(self.vault, note_name)
            combined = f"{existing}\n{content}" if existing else content
            self.client.replace_note_field(self.vault, note_name, combined)

        self.audit_logger.log("APPENDED", note_name, self.vault, f"{len(content)} chars")
        return success(f'Appended to secure note "{note_name}".')


class UpdateSecureNoteTool(ToolHandler):
    """Tool for replacing the content of a secure note."""

    title = "Update Secure Note"
    description = """Replace the entire content of an existing secure note in the configured 1Password vault.

⚠️ The previous content is overwritten. Use append-secure-note to add to it instead."""
    properties = {"noteName": NOTE_NAME_PROPERTY, "content": CONTENT_PROPERTY}
    required = ("noteName", "content")
    action = "update"
    mutating = True

    def __init__(self, session: OpSession, client: OpClient, audit_logger: Optional[AuditLogger] = None):
        super().__init__("update-secure-note", session, client, audit_logger)

    def execute(self, arguments: Mapping[str, Any]) -> Outcome:
        note_name = arguments["noteName"]
        self.client.replace_note_field(self.vault, note_name, arguments["content"])
        self.audit_logger.log("UPDATED", note_name, self.vault)
        return success(f'Replaced the content of secure note "{note_name}".')


class ArchiveSecureNoteTool(ToolHandler):
    """Tool for archiving a secure note."""

    title = "Archive Secure Note"
    description = """Archive a secure note in the configured 1Password vault.

The item is moved to 1Password's archive rather than deleted permanently.
Archived notes are no longer returned by get-secure-note or list-secure-notes."""
    properties = {"noteName": NOTE_NAME_PROPERTY}
    required = ("noteName",)
    action = "archive"
    mutating = True

    def __init__(self, session: OpSession, client: OpClient, audit_logger: Optional[AuditLogger] = None):
        super().__init__("archive-secure-note", session, client, audit_logger)

    def execute(self, arguments: Mapping[str, Any]) -> Outcome:
        note_name = arguments["noteName"]
        self.client.archive_item(self.vault, note_name)
        self.audit_logger.log("ARCHIVED", note_name, self.vault)
        return success(f'Archived secure note "{note_name}".')
