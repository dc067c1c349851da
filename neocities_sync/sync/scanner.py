"""Directory scanning utilities for sync operations."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import DEFAULT_STATE_FILE_NAME, config
from ..exceptions import ScanError
from ..utils import calculate_sha1, is_disallowed_file_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalFile:
    """Represents a local file with its content hash."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Relative path (using forward slashes for cross-platform compatibility)"""

    size: int
    """File size in bytes"""

    sha1: str
    """Lowercase hex SHA-1 of the file content"""

    @classmethod
    def from_path(cls, file_path: Path, base_path: Path) -> "LocalFile":
        """Create LocalFile from a path, hashing its content.

        Args:
            file_path: Absolute path to the file
            base_path: Base path for calculating relative paths

        Returns:
            LocalFile instance

        Raises:
            OSError: If the file cannot be read
        """
        # Use as_posix() to ensure forward slashes on all platforms
        relative_path = file_path.relative_to(base_path).as_posix()
        size = file_path.stat().st_size
        return cls(
            path=file_path,
            relative_path=relative_path,
            size=size,
            sha1=calculate_sha1(file_path),
        )

    def read_bytes(self) -> bytes:
        """Read the file content for upload."""
        return self.path.read_bytes()


class ScanResult(dict[str, LocalFile]):
    """Files found by a scan, keyed by relative path."""

    def hashes(self) -> dict[str, str]:
        """Mapping of relative path to content hash."""
        return {path: local_file.sha1 for path, local_file in self.items()}

    @property
    def total_size(self) -> int:
        return sum(local_file.size for local_file in self.values())


class DirectoryScanner:
    """Scans a directory tree and hashes every eligible file.

    Two rules decide eligibility: the state file itself is never synced,
    and with ``ignore_disallowed_file_types`` files whose extension is in
    DISALLOWED_FILE_TYPES are skipped. Excluded files are never read.

    Examples:
        >>> scanner = DirectoryScanner(state_file=Path("/site/.state"))
        >>> files = scanner.scan_local(Path("/site"))
        >>> sorted(files)
        ['about.html', 'css/site.css', 'index.html']
    """

    def __init__(
        self,
        state_file: Optional[Path] = None,
        ignore_disallowed_file_types: bool = False,
        max_workers: Optional[int] = None,
    ):
        """Initialize directory scanner.

        Args:
            state_file: Path of the state file, excluded when inside the root
            ignore_disallowed_file_types: Skip files with a disallowed extension
            max_workers: Number of hashing threads (uses config if not provided)
        """
        self.state_file = state_file
        self.ignore_disallowed_file_types = ignore_disallowed_file_types
        self.max_workers = max_workers or config.max_workers
        self._state_relative_path: Optional[str] = None

    def _relative_state_path(self, base_path: Path) -> Optional[str]:
        """Path of the state file relative to base_path, if it lies inside it."""
        if self.state_file is None:
            return None
        try:
            return (
                self.state_file.resolve()
                .relative_to(base_path.resolve())
                .as_posix()
            )
        except ValueError:
            return None

    def is_excluded(self, relative_path: str) -> bool:
        """Check if a relative path is excluded from syncing.

        Args:
            relative_path: Path relative to the scan root, forward slashes

        Returns:
            True if path should be ignored
        """
        if (
            self._state_relative_path is not None
            and relative_path == self._state_relative_path
        ):
            return True

        if self.ignore_disallowed_file_types and is_disallowed_file_type(
            relative_path
        ):
            return True

        return False

    def bind(self, base_path: Path) -> None:
        """Resolve the state file location against a scan root.

        Called by scan_local; only needed directly when is_excluded is used
        before scanning.
        """
        self._state_relative_path = self._relative_state_path(base_path)

    def _collect_paths(self, directory: Path, base_path: Path) -> list[Path]:
        """Recursively list eligible regular files below a directory."""
        paths: list[Path] = []

        for item in sorted(directory.iterdir()):
            if item.is_symlink() and item.is_dir():
                logger.debug(f"Not following directory link: {item}")
                continue
            if item.is_dir():
                paths.extend(self._collect_paths(item, base_path))
                continue
            if not item.is_file():
                # sockets, fifos, dangling symlinks
                continue

            relative_path = item.relative_to(base_path).as_posix()
            if self.is_excluded(relative_path):
                logger.debug(f"Ignoring: {relative_path}")
                continue
            paths.append(item)

        return paths

    def _hash_file(self, file_path: Path, base_path: Path) -> LocalFile:
        try:
            return LocalFile.from_path(file_path, base_path)
        except OSError as e:
            raise ScanError(
                file_path.relative_to(base_path).as_posix(),
                e.strerror or str(e),
            ) from e

    def scan_local(self, directory: Path) -> ScanResult:
        """Recursively scan a local directory and hash its files.

        Args:
            directory: Root of the tree to scan

        Returns:
            ScanResult keyed by relative path

        Raises:
            ScanError: If any eligible file cannot be read
        """
        self.bind(directory)

        try:
            paths = self._collect_paths(directory, directory)
        except OSError as e:
            raise ScanError(str(directory), e.strerror or str(e)) from e

        logger.debug(f"Hashing {len(paths)} file(s) with {self.max_workers} workers")

        result = ScanResult()
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._hash_file, path, directory) for path in paths
            ]
            # result() re-raises the first ScanError; leaving the with block
            # waits for the remaining hashes
            for future in futures:
                local_file = future.result()
                result[local_file.relative_path] = local_file

        return result


def default_state_file(directory: Path) -> Path:
    """State file location used when none is given."""
    return directory / DEFAULT_STATE_FILE_NAME
