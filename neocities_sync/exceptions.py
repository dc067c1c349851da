"""Exceptions raised by neocities-sync."""


class NeocitiesError(Exception):
    """Base exception for all neocities-sync errors."""


class NeocitiesAPIError(NeocitiesError):
    """Error reported by (or while talking to) the Neocities API."""


class NeocitiesAuthenticationError(NeocitiesAPIError):
    """Username, password or API key was rejected."""


class NeocitiesNetworkError(NeocitiesAPIError):
    """Transport failure or unreadable response body."""


class NeocitiesInvalidFileTypeError(NeocitiesAPIError):
    """The server refused to host one of the uploaded file types."""


class NeocitiesMissingFilesError(NeocitiesAPIError):
    """A delete request matched no files on the server."""


class NeocitiesProtocolError(NeocitiesAPIError):
    """The server answered with a payload of unexpected shape."""

    def __init__(self, message: str, error_type: str | None = None):
        super().__init__(message)
        self.error_type = error_type


class NeocitiesConfigError(NeocitiesError):
    """Invalid configuration value."""


class ScanError(NeocitiesError):
    """A local file could not be read while scanning."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to read {path}: {reason}")
        self.path = path
        self.reason = reason


class StateFileError(NeocitiesError):
    """The state file could not be written."""
