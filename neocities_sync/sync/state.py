"""State management for tracking what was last uploaded.

The state file remembers, for every synced file, the SHA-1 hash of the
content that was last sent to the server. A later run only has to compare
fresh local hashes against it instead of asking the server again.
"""

import logging
import os
import tempfile
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Optional, Union

from ..api import NeocitiesClient
from ..exceptions import StateFileError
from ..models import FileEntry, Session

logger = logging.getLogger(__name__)


class _UnknownHash:
    """Hash of a state entry whose line could not be parsed.

    Never equal to anything but itself, so such entries always look
    changed and get uploaded again.
    """

    _instance: Optional["_UnknownHash"] = None

    def __new__(cls) -> "_UnknownHash":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNKNOWN_HASH"

    def __bool__(self) -> bool:
        return False


UNKNOWN_HASH = _UnknownHash()

StateHash = Union[str, _UnknownHash]


class SyncState(Mapping[str, StateHash]):
    """Mapping of relative path to content hash as last known on the remote."""

    def __init__(self, entries: Optional[Mapping[str, StateHash]] = None):
        self._entries: dict[str, StateHash] = dict(entries or {})

    def __getitem__(self, path: str) -> StateHash:
        return self._entries[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SyncState({self._entries!r})"

    def serialize(self) -> str:
        """Render the state in the on-disk ``path:hash`` line format.

        Entries with an unknown hash are written as a bare path so they
        stay unknown after a reload.
        """
        lines = []
        for path in sorted(self._entries):
            file_hash = self._entries[path]
            if file_hash is UNKNOWN_HASH:
                lines.append(path)
            else:
                lines.append(f"{path}:{file_hash}")
        return "\n".join(lines)

    @classmethod
    def parse(cls, content: str) -> "SyncState":
        """Parse the on-disk line format.

        Each line is split on its last colon. A line without a colon is
        tolerated and recorded with UNKNOWN_HASH.
        """
        entries: dict[str, StateHash] = {}
        for line_number, line in enumerate(content.splitlines(), start=1):
            if not line.strip():
                continue
            path, separator, file_hash = line.rpartition(":")
            if not separator:
                logger.warning(
                    f"Malformed state line {line_number}: {line!r}, "
                    "treating as changed"
                )
                entries[line] = UNKNOWN_HASH
                continue
            entries[path] = file_hash
        return cls(entries)


class SyncStateManager:
    """Reads and writes the state file."""

    def load(self, state_file: Path) -> Optional[SyncState]:
        """Load the state file.

        Args:
            state_file: Path of the state file

        Returns:
            SyncState if the file exists, None otherwise
        """
        try:
            content = state_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"No sync state found at {state_file}")
            return None

        state = SyncState.parse(content)
        logger.debug(f"Loaded sync state with {len(state)} files from {state_file}")
        return state

    def save(self, state: Mapping[str, StateHash], state_file: Path) -> None:
        """Replace the state file with the given state.

        The content goes to a temporary file next to the target which is
        then renamed over it, so an interrupted write never leaves a
        truncated state file behind.

        Args:
            state: Mapping of relative path to hash
            state_file: Path of the state file

        Raises:
            StateFileError: If the file cannot be written
        """
        content = SyncState(state).serialize()

        try:
            state_file.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=state_file.parent,
                prefix=f".{state_file.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                    f.write(content)
                os.replace(temp_path, state_file)
            except BaseException:
                os.unlink(temp_path)
                raise
        except OSError as e:
            raise StateFileError(
                f"Failed to write state file {state_file}: {e}"
            ) from e

        logger.debug(f"Saved sync state with {len(state)} files to {state_file}")

    def clear(self, state_file: Path) -> bool:
        """Delete the state file.

        Args:
            state_file: Path of the state file

        Returns:
            True if state was cleared, False if no state existed
        """
        if state_file.exists():
            state_file.unlink()
            logger.debug(f"Cleared sync state at {state_file}")
            return True
        return False


def fetch_remote_state(client: NeocitiesClient, session: Session) -> SyncState:
    """Build a SyncState from the server's file listing.

    Directories and files without a reported hash are left out.

    Raises:
        NeocitiesAuthenticationError: If the session is not valid
        NeocitiesNetworkError: If the listing cannot be fetched
    """
    entries = client.list_files(session)
    state = SyncState(
        {
            entry.path: entry.sha1_hash
            for entry in entries
            if isinstance(entry, FileEntry) and entry.sha1_hash
        }
    )
    logger.debug(
        f"Fetched remote state: {len(state)} files out of {len(entries)} entries"
    )
    return state
