"""Audit logging for operations that change secure notes."""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class AuditLogger:
    """Appends one line per mutating note operation. Note content is never written."""

    def __init__(self, log_path: Optional[str] = None):
        """
        Initialize audit logger.

        Args:
            log_path: Path to audit log file, or None to disable auditing
        """
        self.log_path = Path(log_path).expanduser() if log_path else None

    @property
    def enabled(self) -> bool:
        return self.log_path is not None

    def log(self, action: str, note: str, vault: str, details: str = "", user: str = "mcp-server"):
        """
        Write audit log entry.

        Args:
            action: Action performed (CREATED, APPENDED, UPDATED, ARCHIVED, FAILED, ...)
            note: Note name
            vault: Vault name
            details: Additional details
            user: User/source of the action
        """
        if self.log_path is None:
            return

        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
        log_entry = f"[{timestamp}] USER={user} ACTION={action} NOTE={note} VAULT={vault} DETAILS={details}\n"

        try:
            with open(self.log_path, 'a') as f:
                f.write(log_entry)
        except OSError as e:
            print(f"Warning: Could not write to audit log: {e}", file=sys.stderr)
