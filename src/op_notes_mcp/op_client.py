"""Subprocess client for the 1Password CLI (`op`)."""

import json
import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

logger = logging.getLogger(__name__)

NOTE_FIELD = "notesPlain"
SECURE_NOTE_CATEGORY = "Secure Note"
MIN_CLI_VERSION = (2, 25, 0)

# "[ERROR] 2024/05/01 10:00:00 message" -> "message"
_ERROR_PREFIX = re.compile(r"^\[ERROR\]\s+\d{4}/\d{2}/\d{2}\s+\d{2}:\d{2}:\d{2}\s+")
_NOT_FOUND_MARKERS = ("isn't an item", "isn't a field", "not found", "no item found")


class OpError(Exception):
    """Base class for every failure reported by the 1Password CLI."""


class OpCliError(OpError):
    """`op` exited with a non-zero status or produced unusable output."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class OpNotInstalledError(OpError):
    """The `op` executable could not be started."""


class ItemNotFoundError(OpError):
    """The named item (or its note field) does not exist in the vault."""


class DuplicateOrInvalidError(OpError):
    """An item could not be created because of a name conflict or invalid input."""


@dataclass(frozen=True)
class ItemSummary:
    """One row of `op item list`."""
    id: str
    title: str
    category: str = ""
    vault: str = ""
    updated_at: str = ""

    @classmethod
    def from_json(cls, data: dict) -> 'ItemSummary':
        vault = data.get('vault') or {}
        return cls(
            id=str(data.get('id', '')),
            title=str(data.get('title', '')),
            category=str(data.get('category', '')),
            vault=str(vault.get('name', '')) if isinstance(vault, dict) else str(vault),
            updated_at=str(data.get('updated_at', '')),
        )


def clean_error(stderr: str) -> str:
    """Strip the `[ERROR] date time` prefix that `op` puts on each line."""
    lines = [_ERROR_PREFIX.sub('', line).strip() for line in stderr.splitlines()]
    return ' '.join(line for line in lines if line)


def parse_version(text: str) -> tuple:
    match = re.search(r"(\d+)\.(\d+)\.(\d+)", text)
    if not match:
        return ()
    return tuple(int(part) for part in match.groups())


def note_assignment(content: str) -> str:
    """
    Build the `op` assignment statement that sets the concealed note field.

    The statement is passed on the command line, so the note content is
    visible to local users who can read the process list while `op` runs.
    """
    return f"{NOTE_FIELD}[concealed]={content}"


class OpClient:
    """Client for Secure Note items through the `op` command-line tool."""

    def __init__(self, cli_path: str = "op", timeout: Optional[float] = None):
        """
        Initialize the client.

        Args:
            cli_path: Path or name of the `op` executable
            timeout: Seconds to wait for each call, or None to wait indefinitely
        """
        self.cli_path = cli_path
        self.timeout = timeout
        self._cli_validated = False

    def _run(self, args: Sequence[str], what: str, positional: Sequence[str] = ()) -> str:
        """
        Run `op` with the given arguments and return its stdout.

        Positional values (item names, assignments) go after a `--` separator
        so a name such as "--help" is never parsed as a flag.

        stdin is detached so `op` never reads the MCP channel as an item template.

        Raises:
            OpNotInstalledError: If the executable cannot be started
            OpCliError: On timeout or non-zero exit
        """
        cmd = [self.cli_path, *args]
        if positional:
            cmd += ["--", *positional]
        logger.debug("Running op %s", what)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                stdin=subprocess.DEVNULL,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise OpNotInstalledError(
                f"1Password CLI not found at '{self.cli_path}'. Install it and sign in, or set OP_CLI_PATH."
            ) from e
        except subprocess.TimeoutExpired as e:
            raise OpCliError(f"`op {what}` timed out after {self.timeout} seconds") from e
        except OSError as e:
            raise OpCliError(f"Could not run `op {what}`: {e}") from e

        if result.returncode != 0:
            message = clean_error(result.stderr or result.stdout or "")
            if not message:
                message = f"`op {what}` exited with status {result.returncode}"
            raise OpCliError(message, returncode=result.returncode, stderr=result.stderr or "")

        return result.stdout

    def _run_json(self, args: Sequence[str], what: str, positional: Sequence[str] = ()) -> Any:
        output = self._run([*args, "--format", "json"], what, positional)
        if not output.strip():
            return None
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise OpCliError(f"Unexpected output from `op {what}`: {e}") from e

    @staticmethod
    def _is_not_found(error: OpCliError) -> bool:
        text = str(error).lower()
        return any(marker in text for marker in _NOT_FOUND_MARKERS)

    def _not_found(self, vault: str, name: str) -> ItemNotFoundError:
        return ItemNotFoundError(
            f'"{name}" was not found in the "{vault}" vault. '
            "Note may not exist - consider creating it first."
        )

    def version(self) -> str:
        """Return the installed `op` version string."""
        return self._run(["--version"], "--version").strip()

    def validate_cli(self) -> None:
        """
        Confirm the CLI is installed and recent enough for the calls below.

        Raises:
            OpError: If `op` cannot run or is older than MIN_CLI_VERSION
        """
        if self._cli_validated:
            return

        raw = self.version()
        found = parse_version(raw)
        if not found:
            raise OpCliError(f"Could not determine the `op` version from output {raw!r}")
        if found < MIN_CLI_VERSION:
            required = '.'.join(str(part) for part in MIN_CLI_VERSION)
            raise OpCliError(f"`op` version {raw} is too old; version {required} or newer is required")

        self._cli_validated = True

    def check_vault_access(self, vault: str) -> bool:
        """Return True if the vault exists and the signed-in account can read it."""
        try:
            self._run(["vault", "get", "--format", "json"], "vault get", [vault])
        except OpError as e:
            logger.debug("Cannot access vault %r: %s", vault, e)
            return False
        return True

    def list_items(self, vault: str, categories: Optional[Sequence[str]] = None) -> List[ItemSummary]:
        """
        List items in a vault.

        Args:
            vault: Vault name
            categories: Optional category filter, e.g. ["Secure Note"]

        Returns:
            ItemSummary per item, in the order `op` reports them
        """
        args = ["item", "list", f"--vault={vault}"]
        if categories:
            args += ["--categories", ",".join(categories)]
        data = self._run_json(args, "item list") or []
        if not isinstance(data, list):
            raise OpCliError("Unexpected output from `op item list`: expected a list of items")
        return [ItemSummary.from_json(entry) for entry in data if isinstance(entry, dict)]

    def get_note_field(self, vault: str, name: str) -> str:
        """
        Fetch the plain-text note field of an item.

        Raises:
            ItemNotFoundError: If the item or its note field does not exist
        """
        args = ["item", "get", f"--vault={vault}", f"--fields=label={NOTE_FIELD}", "--reveal"]
        try:
            data = self._run_json(args, "item get", [name])
        except OpCliError as e:
            if self._is_not_found(e):
                raise self._not_found(vault, name) from e
            raise

        if isinstance(data, list):
            data = data[0] if data else None
        if data is None:
            raise self._not_found(vault, name)
        if not isinstance(data, dict):
            raise OpCliError("Unexpected output from `op item get`: expected a field object")
        return str(data.get('value') or '')

    def create_item(self, vault: str, name: str, content: str) -> None:
        """
        Create a Secure Note whose concealed note field holds content.

        `op` allows several items to share a title, so an existing title is
        rejected here to keep note names unique within the vault.

        The content travels in the `op` command line; see note_assignment().

        Raises:
            DuplicateOrInvalidError: If the title is taken or `op` rejects the item
        """
        if any(item.title == name for item in self.list_items(vault)):
            raise DuplicateOrInvalidError(f'An item named "{name}" already exists in the "{vault}" vault.')

        args = [
            "item", "create",
            f"--category={SECURE_NOTE_CATEGORY}",
            f"--title={name}",
            f"--vault={vault}",
            "--format", "json",
        ]
        try:
            self._run(args, "item create", [note_assignment(content)])
        except OpCliError as e:
            raise DuplicateOrInvalidError(str(e)) from e

    def replace_note_field(self, vault: str, name: str, content: str) -> None:
        """
        Replace the note field of an existing item.

        The content travels in the `op` command line; see note_assignment().

        Raises:
            ItemNotFoundError: If the item does not exist
        """
        args = ["item", "edit", f"--vault={vault}", "--format", "json"]
        try:
            self._run(args, "item edit", [name, note_assignment(content)])
        except OpCliError as e:
            if self._is_not_found(e):
                raise self._not_found(vault, name) from e
            raise

    def archive_item(self, vault: str, name: str) -> None:
        """
        Move an item to the archive.

        Raises:
            ItemNotFoundError: If the item does not exist
        """
        try:
            self._run(["item", "delete", f"--vault={vault}", "--archive"], "item delete", [name])
        except OpCliError as e:
            if self._is_not_found(e):
                raise self._not_found(vault, name) from e
            raise
