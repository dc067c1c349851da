"""Configuration for neocities-sync.

Values are read from the environment so that scripts and CI jobs can
override them without extra command line flags.
"""

import os
from typing import Optional

from .exceptions import NeocitiesConfigError

DEFAULT_API_URL = "https://neocities.org/api"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_WORKERS = 8
DEFAULT_STATE_FILE_NAME = ".state"


class Config:
    """Runtime configuration backed by environment variables."""

    def __init__(self, environ: Optional[dict[str, str]] = None):
        """Initialize configuration.

        Args:
            environ: Mapping to read values from (defaults to os.environ)
        """
        self._environ = environ if environ is not None else os.environ

    @property
    def api_url(self) -> str:
        """Base URL of the Neocities API, without trailing slash."""
        return self._environ.get("NEOCITIES_API_URL", DEFAULT_API_URL).rstrip("/")

    @property
    def timeout(self) -> float:
        """Per-request timeout in seconds."""
        raw = self._environ.get("NEOCITIES_TIMEOUT")
        if raw is None:
            return DEFAULT_TIMEOUT
        try:
            value = float(raw)
        except ValueError as e:
            raise NeocitiesConfigError(
                f"NEOCITIES_TIMEOUT must be a number, got {raw!r}"
            ) from e
        if value <= 0:
            raise NeocitiesConfigError("NEOCITIES_TIMEOUT must be positive")
        return value

    @property
    def max_workers(self) -> int:
        """Number of threads used for hashing files."""
        raw = self._environ.get("NEOCITIES_MAX_WORKERS")
        if raw is None:
            return DEFAULT_MAX_WORKERS
        try:
            value = int(raw)
        except ValueError as e:
            raise NeocitiesConfigError(
                f"NEOCITIES_MAX_WORKERS must be an integer, got {raw!r}"
            ) from e
        if value < 1:
            raise NeocitiesConfigError("NEOCITIES_MAX_WORKERS must be at least 1")
        return value


config = Config()
