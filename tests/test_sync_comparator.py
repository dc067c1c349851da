"""Tests for the FileComparator class."""

import itertools
from pathlib import Path

import pytest

from neocities_sync.sync.comparator import FileComparator, SyncAction
from neocities_sync.sync.scanner import LocalFile, ScanResult
from neocities_sync.sync.state import UNKNOWN_HASH, SyncState
from neocities_sync.utils import is_disallowed_file_type


def make_scan(hashes: dict[str, str]) -> ScanResult:
    """Create a ScanResult from a path -> hash mapping."""
    return ScanResult(
        {
            path: LocalFile(
                path=Path(f"/site/{path}"),
                relative_path=path,
                size=100,
                sha1=file_hash,
            )
            for path, file_hash in hashes.items()
        }
    )


class TestReconcileScenarios:
    """Plans for the typical change patterns."""

    def test_new_file_is_uploaded(self):
        plan = FileComparator().reconcile(
            SyncState({"a.txt": "h1"}), make_scan({"a.txt": "h1", "b.txt": "h2"})
        )

        assert plan.uploads == ["b.txt"]
        assert plan.deletes == []

    def test_removed_file_is_deleted(self):
        plan = FileComparator().reconcile(
            SyncState({"a.txt": "h1", "b.txt": "h2"}), make_scan({"a.txt": "h1"})
        )

        assert plan.uploads == []
        assert plan.deletes == ["b.txt"]

    def test_changed_file_is_uploaded(self):
        plan = FileComparator().reconcile(
            SyncState({"a.txt": "h1"}), make_scan({"a.txt": "h9"})
        )

        assert plan.uploads == ["a.txt"]
        assert plan.deletes == []

    def test_rename_is_delete_plus_upload(self):
        plan = FileComparator().reconcile(
            SyncState({"old.txt": "h1"}), make_scan({"new.txt": "h1"})
        )

        assert plan.uploads == ["new.txt"]
        assert plan.deletes == ["old.txt"]

    def test_empty_scan_deletes_everything(self):
        plan = FileComparator().reconcile(
            SyncState({"a.txt": "h1", "b.txt": "h2"}), make_scan({})
        )

        assert plan.uploads == []
        assert plan.deletes == ["a.txt", "b.txt"]
        assert plan.new_state == {}

    def test_empty_baseline_uploads_everything(self):
        plan = FileComparator().reconcile(
            SyncState(), make_scan({"b.txt": "h2", "a.txt": "h1"})
        )

        assert plan.uploads == ["a.txt", "b.txt"]
        assert plan.deletes == []

    def test_unchanged_tree_gives_empty_plan(self):
        plan = FileComparator().reconcile(
            SyncState({"a.txt": "h1"}), make_scan({"a.txt": "h1"})
        )

        assert plan.is_empty
        assert plan.skips == 1
        assert plan.new_state == {"a.txt": "h1"}

    def test_unknown_hash_is_always_uploaded(self):
        plan = FileComparator().reconcile(
            SyncState({"a.txt": UNKNOWN_HASH}), make_scan({"a.txt": "h1"})
        )

        assert plan.uploads == ["a.txt"]

    def test_plain_dict_baseline(self):
        plan = FileComparator().reconcile({"a.txt": "h1"}, make_scan({}))
        assert plan.deletes == ["a.txt"]


class TestDecisions:
    """Decision reasons and new state."""

    def test_reasons(self):
        plan = FileComparator().reconcile(
            SyncState({"same.txt": "h1", "changed.txt": "h2", "gone.txt": "h3"}),
            make_scan({"same.txt": "h1", "changed.txt": "h9", "new.txt": "h4"}),
        )
        reasons = {d.relative_path: (d.action, d.reason) for d in plan.decisions}

        assert reasons == {
            "same.txt": (SyncAction.SKIP, "Unchanged"),
            "changed.txt": (SyncAction.UPLOAD, "Content changed"),
            "new.txt": (SyncAction.UPLOAD, "New local file"),
            "gone.txt": (SyncAction.DELETE_REMOTE, "File deleted locally"),
        }

    def test_new_state_is_exactly_scanned(self):
        scanned = make_scan({"a.txt": "h1", "b.txt": "h2"})
        plan = FileComparator().reconcile(SyncState({"c.txt": "h3"}), scanned)
        assert plan.new_state == {"a.txt": "h1", "b.txt": "h2"}

    def test_upload_files_carry_local_files(self):
        scanned = make_scan({"a.txt": "h1"})
        plan = FileComparator().reconcile(SyncState(), scanned)
        assert plan.upload_files == [scanned["a.txt"]]


class TestExcludedPaths:
    """Excluded paths are never deleted."""

    def test_excluded_baseline_path_is_skipped(self):
        comparator = FileComparator(exclude=is_disallowed_file_type)
        plan = comparator.reconcile(
            SyncState({"site.css": "h1", "program.exe": "h2"}), make_scan({})
        )

        assert plan.deletes == ["program.exe"]
        decision = next(d for d in plan.decisions if d.relative_path == "site.css")
        assert decision.action == SyncAction.SKIP
        assert decision.reason == "Excluded from sync"

    def test_excluded_path_dropped_from_new_state(self):
        comparator = FileComparator(exclude=lambda path: path == ".state")
        plan = comparator.reconcile(SyncState({".state": "h1"}), make_scan({}))

        assert plan.deletes == []
        assert plan.new_state == {}


PATHS = ["a.txt", "b.txt", "c.txt"]
HASHES = ["h1", "h2"]


def all_states():
    """Every state over PATHS with values from HASHES, or path missing."""
    for values in itertools.product([None, *HASHES], repeat=len(PATHS)):
        yield {p: v for p, v in zip(PATHS, values) if v is not None}


@pytest.mark.parametrize("baseline", list(all_states()))
def test_plan_properties(baseline):
    """Uploads and deletes are disjoint and drawn from the right side."""
    for scanned_hashes in all_states():
        scanned = make_scan(scanned_hashes)
        plan = FileComparator().reconcile(SyncState(baseline), scanned)

        assert not set(plan.uploads) & set(plan.deletes)
        assert set(plan.uploads) <= set(scanned)
        assert set(plan.deletes) <= set(baseline) - set(scanned)
        assert set(plan.deletes) == set(baseline) - set(scanned)
        assert plan.new_state == scanned_hashes


@pytest.mark.parametrize("hashes", list(all_states()))
def test_reconcile_with_itself_is_empty(hashes):
    plan = FileComparator().reconcile(SyncState(hashes), make_scan(hashes))
    assert plan.uploads == []
    assert plan.deletes == []
