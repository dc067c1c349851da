"""Core sync engine for executing sync operations."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..api import UNDELETABLE_FILES, NeocitiesClient
from ..exceptions import NeocitiesAuthenticationError, NeocitiesNetworkError
from ..models import Session
from ..output import OutputFormatter
from ..utils import format_size
from .comparator import FileComparator, SyncPlan
from .modes import ApplyMode
from .operations import OperationOutcome, SyncOperations
from .scanner import DirectoryScanner, ScanResult, default_state_file
from .state import SyncState, SyncStateManager, fetch_remote_state

logger = logging.getLogger(__name__)


class SyncResult(str, Enum):
    """Overall outcome of a sync pass."""

    OK = "ok"
    OUT_OF_SYNC = "out-of-sync"
    INVALID_FILE_TYPE = "invalid-file-type"
    INVALID_AUTH = "invalid-auth"
    NETWORK_ERROR = "network-error"

    @property
    def is_error(self) -> bool:
        """Whether the pass failed (OUT_OF_SYNC is only advisory)."""
        return self not in (SyncResult.OK, SyncResult.OUT_OF_SYNC)

    @property
    def exit_code(self) -> int:
        return 1 if self.is_error else 0


@dataclass
class SyncReport:
    """Statistics and outcome of a sync pass."""

    result: SyncResult
    plan: Optional[SyncPlan] = None
    dry_run: bool = False
    state_written: bool = False

    @property
    def uploaded(self) -> int:
        return len(self.plan.uploads) if self.plan else 0

    @property
    def deleted(self) -> int:
        return len(self.plan.deletes) if self.plan else 0

    @property
    def skipped(self) -> int:
        return self.plan.skips if self.plan else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": self.result.value,
            "uploads": self.uploaded,
            "deletes": self.deleted,
            "skips": self.skipped,
            "dry_run": self.dry_run,
            "state_written": self.state_written,
        }


def resolve_result(
    upload: OperationOutcome,
    delete: OperationOutcome,
    delete_requested: bool,
) -> SyncResult:
    """Combine upload and delete outcomes into one result.

    Upload failures take priority over delete failures. A "missing files"
    answer to an empty delete request is the normal no-op outcome; to a
    non-empty one it means the state file listed files the server lacks.

    Args:
        upload: Outcome of the upload request
        delete: Outcome of the delete request
        delete_requested: Whether the plan contained any deletes
    """
    if upload == OperationOutcome.NETWORK_ERROR:
        return SyncResult.NETWORK_ERROR
    if upload == OperationOutcome.INVALID_AUTH:
        return SyncResult.INVALID_AUTH
    if upload == OperationOutcome.INVALID_FILE_TYPE:
        return SyncResult.INVALID_FILE_TYPE
    if delete == OperationOutcome.NETWORK_ERROR:
        return SyncResult.NETWORK_ERROR
    if delete == OperationOutcome.INVALID_AUTH:
        return SyncResult.INVALID_AUTH
    if delete == OperationOutcome.MISSING_FILES and delete_requested:
        return SyncResult.OUT_OF_SYNC
    return SyncResult.OK


class SyncEngine:
    """Core sync engine that orchestrates file synchronization."""

    def __init__(
        self,
        client: NeocitiesClient,
        output: Optional[OutputFormatter] = None,
        state_manager: Optional[SyncStateManager] = None,
        max_workers: Optional[int] = None,
    ):
        """Initialize sync engine.

        Args:
            client: Neocities API client
            output: Output formatter for displaying progress/status
            state_manager: State file reader/writer
            max_workers: Number of hashing threads (uses config if not provided)
        """
        self.client = client
        self.output = output or OutputFormatter()
        self.state_manager = state_manager or SyncStateManager()
        self.operations = SyncOperations(client)
        self.max_workers = max_workers

    def sync(
        self,
        session: Session,
        local_path: Path,
        state_path: Optional[Path] = None,
        ignore_disallowed_file_types: bool = False,
        apply_mode: ApplyMode = ApplyMode.SAFE,
        dry_run: bool = False,
        refresh_state: bool = False,
    ) -> SyncReport:
        """Sync a local directory to the site.

        Args:
            session: Authenticated session
            local_path: Root directory to sync
            state_path: State file (defaults to <local_path>/.state)
            ignore_disallowed_file_types: Skip files with disallowed extensions
            apply_mode: Ordering of remote changes and the state file write
            dry_run: If True, only show what would be done
            refresh_state: Ignore the state file and start from the remote
                file list

        Returns:
            SyncReport with the result and the applied plan

        Raises:
            ValueError: If local_path is not an existing directory
            ScanError: If a local file cannot be read
            StateFileError: If the state file cannot be written
            NeocitiesProtocolError: If the server answers unexpectedly

        Examples:
            >>> engine = SyncEngine(client)
            >>> report = engine.sync(session, Path("./public"), dry_run=True)
            >>> print(f"Would upload {report.uploaded} files")
        """
        if not local_path.exists():
            raise ValueError(f"Local directory does not exist: {local_path}")
        if not local_path.is_dir():
            raise ValueError(f"Local path is not a directory: {local_path}")

        if state_path is None:
            state_path = default_state_file(local_path)

        if not self.output.quiet:
            self.output.info(f"Syncing: {local_path}")
            self.output.info(f"State file: {state_path}")
            if dry_run:
                self.output.info("Dry run: No changes will be made")
            self.output.print("")

        # Step 1: Baseline state
        try:
            baseline = self._load_baseline(session, state_path, refresh_state)
        except NeocitiesAuthenticationError as e:
            logger.debug(f"Fetching remote state failed: {e}")
            return SyncReport(result=SyncResult.INVALID_AUTH, dry_run=dry_run)
        except NeocitiesNetworkError as e:
            logger.debug(f"Fetching remote state failed: {e}")
            return SyncReport(result=SyncResult.NETWORK_ERROR, dry_run=dry_run)

        # Step 2: Scan
        scanner = DirectoryScanner(
            state_file=state_path,
            ignore_disallowed_file_types=ignore_disallowed_file_types,
            max_workers=self.max_workers,
        )
        scanned = self._scan_local(scanner, local_path)

        # Step 3: Plan
        comparator = FileComparator(exclude=scanner.is_excluded)
        plan = comparator.reconcile(baseline, scanned)
        self._display_sync_plan(plan, scanned)

        if dry_run:
            if not self.output.quiet:
                self._display_summary(plan, dry_run=True)
            return SyncReport(result=SyncResult.OK, plan=plan, dry_run=True)

        # Step 4: Apply
        result, state_written = self._apply(session, plan, state_path, apply_mode)

        if not self.output.quiet and not result.is_error:
            self._display_summary(plan, dry_run=False)

        return SyncReport(result=result, plan=plan, state_written=state_written)

    def _load_baseline(
        self, session: Session, state_path: Path, refresh: bool = False
    ) -> SyncState:
        """Load the state file, falling back to the remote listing.

        Raises:
            NeocitiesAuthenticationError: If listing the site is unauthorized
            NeocitiesNetworkError: If the listing cannot be fetched
        """
        if not refresh:
            state = self.state_manager.load(state_path)
            if state is not None:
                return state

        logger.debug("Fetching remote file list")
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            disable=self.output.quiet,
        ) as progress:
            task = progress.add_task("Fetching remote file list...", total=None)
            state = fetch_remote_state(self.client, session)
            progress.update(task, description=f"Found {len(state)} remote file(s)")
        return state

    def _scan_local(self, scanner: DirectoryScanner, local_path: Path) -> ScanResult:
        """Scan and hash the local tree.

        Raises:
            ScanError: If a local file cannot be read
        """
        scan_start = time.time()
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            disable=self.output.quiet,
        ) as progress:
            task = progress.add_task("Scanning local directory...", total=None)
            scanned = scanner.scan_local(local_path)
            progress.update(task, description=f"Found {len(scanned)} local file(s)")

        scan_elapsed = time.time() - scan_start
        logger.debug(f"Local scan took {scan_elapsed:.2f}s for {len(scanned)} files")
        return scanned

    def _apply(
        self,
        session: Session,
        plan: SyncPlan,
        state_path: Path,
        apply_mode: ApplyMode,
    ) -> tuple[SyncResult, bool]:
        """Upload, delete and persist the new state.

        Upload and delete always run concurrently. The state write joins
        them in FAST mode; in SAFE mode it waits for both and is skipped
        when either failed.

        Returns:
            Tuple of (result, whether the state file was written)
        """
        apply_start = time.time()
        uploads = plan.upload_files
        # index.html cannot be deleted on the host
        deletes = [path for path in plan.deletes if path not in UNDELETABLE_FILES]
        logger.debug(
            f"Applying plan ({apply_mode.value}): "
            f"{len(uploads)} upload(s), {len(deletes)} delete(s)"
        )

        with ThreadPoolExecutor(max_workers=3) as executor:
            upload_future = executor.submit(self.operations.upload, session, uploads)
            delete_future = executor.submit(self.operations.delete, session, deletes)
            state_future = None
            if apply_mode.writes_state_concurrently:
                state_future = executor.submit(
                    self.state_manager.save, plan.new_state, state_path
                )

            upload_outcome = upload_future.result()
            delete_outcome = delete_future.result()
            if state_future is not None:
                state_future.result()

        result = resolve_result(upload_outcome, delete_outcome, bool(deletes))
        logger.debug(
            f"Upload: {upload_outcome.value}, delete: {delete_outcome.value}, "
            f"result: {result.value}"
        )

        state_written = state_future is not None
        if not state_written and not result.is_error:
            self.state_manager.save(plan.new_state, state_path)
            state_written = True
        elif not state_written:
            logger.debug(f"Keeping previous state file after {result.value}")

        logger.debug(f"Apply took {time.time() - apply_start:.2f}s")
        return result, state_written

    def _display_sync_plan(self, plan: SyncPlan, scanned: ScanResult) -> None:
        """Display sync plan to user."""
        if self.output.quiet:
            return

        self.output.info(
            f"Scanned {len(scanned)} file(s) ({format_size(scanned.total_size)})"
        )
        self.output.info("Sync plan:")
        if plan.uploads:
            self.output.info(f"  ↑ Upload: {len(plan.uploads)} file(s)")
        if plan.deletes:
            self.output.info(f"  ✗ Delete remote: {len(plan.deletes)} file(s)")
        if plan.skips:
            self.output.info(f"  = Skip: {plan.skips} file(s)")
        for decision in plan.decisions:
            logger.debug(
                f"{decision.action.value}: {decision.relative_path} "
                f"({decision.reason})"
            )
        self.output.print("")

    def _display_summary(self, plan: SyncPlan, dry_run: bool) -> None:
        """Display sync summary."""
        if dry_run:
            self.output.success("Dry run complete!")
        else:
            self.output.success("Sync complete!")

        if plan.is_empty:
            self.output.info("No changes needed - everything is in sync!")
            return

        verb = "Would upload" if dry_run else "Uploaded"
        if plan.uploads:
            self.output.info(f"  {verb}: {len(plan.uploads)}")
        verb = "Would delete" if dry_run else "Deleted"
        if plan.deletes:
            self.output.info(f"  {verb}: {len(plan.deletes)}")
