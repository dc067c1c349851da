"""Data models for Neocities API payloads."""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .exceptions import NeocitiesProtocolError


@dataclass(frozen=True)
class Session:
    """Authenticated session returned by ``NeocitiesClient.login``.

    Passed explicitly to every call that needs authorization.
    """

    api_key: str = field(repr=False)
    """Bearer token for the account"""

    username: Optional[str] = None
    """Account name the key belongs to, if known"""

    @property
    def authorization(self) -> str:
        """Value of the Authorization header for this session."""
        return f"Bearer {self.api_key}"


@dataclass(frozen=True)
class FileEntry:
    """A file in the remote listing."""

    path: str
    size: int
    updated_at: str
    sha1_hash: Optional[str]
    is_directory: bool = False


@dataclass(frozen=True)
class DirectoryEntry:
    """A directory in the remote listing."""

    path: str
    updated_at: str
    is_directory: bool = True


RemoteEntry = Union[FileEntry, DirectoryEntry]


def parse_remote_entry(data: Any) -> RemoteEntry:
    """Build a FileEntry or DirectoryEntry from one item of the list response.

    Raises:
        NeocitiesProtocolError: If the item does not look like a listing entry
    """
    if not isinstance(data, dict) or not isinstance(data.get("path"), str):
        raise NeocitiesProtocolError(f"Unexpected list entry: {data!r}")

    updated_at = data.get("updated_at") or ""
    if data.get("is_directory"):
        return DirectoryEntry(path=data["path"], updated_at=updated_at)

    sha1_hash = data.get("sha1_hash")
    if sha1_hash is not None and not isinstance(sha1_hash, str):
        raise NeocitiesProtocolError(f"Unexpected sha1_hash in entry: {data!r}")

    return FileEntry(
        path=data["path"],
        size=int(data.get("size") or 0),
        updated_at=updated_at,
        sha1_hash=sha1_hash.lower() if sha1_hash else None,
    )
