"""neocities-sync - Sync a directory to Neocities with few API requests."""

from .api import NeocitiesClient
from .exceptions import (
    NeocitiesAPIError,
    NeocitiesAuthenticationError,
    NeocitiesConfigError,
    NeocitiesError,
    NeocitiesInvalidFileTypeError,
    NeocitiesMissingFilesError,
    NeocitiesNetworkError,
    NeocitiesProtocolError,
    ScanError,
    StateFileError,
)
from .models import DirectoryEntry, FileEntry, Session
from .utils import calculate_sha1

__version__ = "0.1.0"

__all__ = [
    "NeocitiesClient",
    "NeocitiesError",
    "NeocitiesAPIError",
    "NeocitiesAuthenticationError",
    "NeocitiesConfigError",
    "NeocitiesInvalidFileTypeError",
    "NeocitiesMissingFilesError",
    "NeocitiesNetworkError",
    "NeocitiesProtocolError",
    "ScanError",
    "StateFileError",
    "Session",
    "FileEntry",
    "DirectoryEntry",
    "calculate_sha1",
]
