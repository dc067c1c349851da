"""Sync engine for neocities-sync - hash-based one-way sync to a site."""

from .comparator import FileComparator, SyncAction, SyncDecision, SyncPlan
from .engine import SyncEngine, SyncReport, SyncResult, resolve_result
from .modes import ApplyMode
from .operations import OperationOutcome, SyncOperations
from .scanner import DirectoryScanner, LocalFile, ScanResult, default_state_file
from .state import (
    UNKNOWN_HASH,
    SyncState,
    SyncStateManager,
    fetch_remote_state,
)

__all__ = [
    "SyncEngine",
    "SyncReport",
    "SyncResult",
    "resolve_result",
    "ApplyMode",
    "SyncOperations",
    "OperationOutcome",
    "DirectoryScanner",
    "LocalFile",
    "ScanResult",
    "default_state_file",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "SyncPlan",
    "SyncState",
    "SyncStateManager",
    "UNKNOWN_HASH",
    "fetch_remote_state",
]
