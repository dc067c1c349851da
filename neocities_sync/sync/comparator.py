"""Comparison of local files against the last known remote state."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .scanner import LocalFile, ScanResult
from .state import StateHash


class SyncAction(str, Enum):
    """Actions that can be taken during sync."""

    UPLOAD = "upload"
    """Upload local file to remote"""

    DELETE_REMOTE = "delete_remote"
    """Delete remote file"""

    SKIP = "skip"
    """Skip file (no action needed)"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    local_file: Optional[LocalFile]
    """Local file (if exists)"""

    relative_path: str
    """Relative path of the file"""


@dataclass
class SyncPlan:
    """Outcome of comparing a scan against a baseline state."""

    decisions: list[SyncDecision] = field(default_factory=list)
    """One decision per path seen in either the scan or the baseline"""

    new_state: dict[str, str] = field(default_factory=dict)
    """State to persist once the plan has been applied"""

    @property
    def uploads(self) -> list[str]:
        return [
            d.relative_path for d in self.decisions if d.action == SyncAction.UPLOAD
        ]

    @property
    def deletes(self) -> list[str]:
        return [
            d.relative_path
            for d in self.decisions
            if d.action == SyncAction.DELETE_REMOTE
        ]

    @property
    def upload_files(self) -> list[LocalFile]:
        return [
            d.local_file
            for d in self.decisions
            if d.action == SyncAction.UPLOAD and d.local_file is not None
        ]

    @property
    def skips(self) -> int:
        return sum(1 for d in self.decisions if d.action == SyncAction.SKIP)

    @property
    def is_empty(self) -> bool:
        return not self.uploads and not self.deletes


class FileComparator:
    """Compares scanned files with the baseline state to find changes."""

    def __init__(self, exclude: Optional[Callable[[str], bool]] = None):
        """Initialize file comparator.

        Args:
            exclude: Predicate for paths that must never be deleted remotely,
                typically DirectoryScanner.is_excluded
        """
        self.exclude = exclude

    def reconcile(
        self,
        baseline: Mapping[str, StateHash],
        scanned: ScanResult,
    ) -> SyncPlan:
        """Compare scanned files against the baseline state.

        Args:
            baseline: Relative path to hash, as last known on the remote
            scanned: Freshly scanned local files

        Returns:
            SyncPlan with uploads, deletes and the state to persist
        """
        decisions = [
            self._compare_scanned_file(path, local_file, baseline.get(path))
            for path, local_file in sorted(scanned.items())
        ]
        decisions.extend(
            self._handle_remote_only(path)
            for path in sorted(baseline)
            if path not in scanned
        )
        return SyncPlan(decisions=decisions, new_state=scanned.hashes())

    def _compare_scanned_file(
        self,
        path: str,
        local_file: LocalFile,
        known_hash: Optional[StateHash],
    ) -> SyncDecision:
        """Decide what to do with a file that exists locally."""
        if known_hash is None:
            return SyncDecision(
                action=SyncAction.UPLOAD,
                reason="New local file",
                local_file=local_file,
                relative_path=path,
            )

        if known_hash != local_file.sha1:
            return SyncDecision(
                action=SyncAction.UPLOAD,
                reason="Content changed",
                local_file=local_file,
                relative_path=path,
            )

        return SyncDecision(
            action=SyncAction.SKIP,
            reason="Unchanged",
            local_file=local_file,
            relative_path=path,
        )

    def _handle_remote_only(self, path: str) -> SyncDecision:
        """Handle a file that is known remotely but no longer exists locally."""
        if self.exclude is not None and self.exclude(path):
            return SyncDecision(
                action=SyncAction.SKIP,
                reason="Excluded from sync",
                local_file=None,
                relative_path=path,
            )

        return SyncDecision(
            action=SyncAction.DELETE_REMOTE,
            reason="File deleted locally",
            local_file=None,
            relative_path=path,
        )
