"""Process-wide configuration for the 1Password CLI, loaded from environment variables."""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class OpSession:
    """Read-only settings shared by every tool for the lifetime of the process."""

    vault: Optional[str] = None
    cli_path: str = "op"
    timeout: Optional[float] = None
    audit_log: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> 'OpSession':
        """
        Load settings from environment variables.

        An unset or blank OP_VAULT is a valid state: tools that need a vault
        answer with a precondition message instead of failing at startup.

        Returns:
            OpSession populated from the environment
        """
        vault = (os.getenv('OP_VAULT') or '').strip() or None
        cli_path = os.getenv('OP_CLI_PATH') or 'op'
        audit_log = os.getenv('OP_AUDIT_LOG') or None
        log_level = (os.getenv('OP_MCP_LOG_LEVEL') or 'INFO').upper()

        timeout = None
        raw_timeout = os.getenv('OP_TIMEOUT')
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                # Invalid format, treat as no timeout set
                pass
            else:
                if timeout <= 0:
                    timeout = None

        return cls(
            vault=vault,
            cli_path=cli_path,
            timeout=timeout,
            audit_log=audit_log,
            log_level=log_level,
        )

    @property
    def has_vault(self) -> bool:
        return bool(self.vault)
