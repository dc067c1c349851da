"""Sync operations wrapper around the API client."""

import logging
from enum import Enum

from ..api import NeocitiesClient
from ..exceptions import (
    NeocitiesAuthenticationError,
    NeocitiesInvalidFileTypeError,
    NeocitiesMissingFilesError,
    NeocitiesNetworkError,
    ScanError,
)
from ..models import Session
from .scanner import LocalFile

logger = logging.getLogger(__name__)


class OperationOutcome(str, Enum):
    """Expected outcomes of an upload or delete request."""

    OK = "ok"
    MISSING_FILES = "missing-files"
    INVALID_FILE_TYPE = "invalid-file-type"
    INVALID_AUTH = "invalid-auth"
    NETWORK_ERROR = "network-error"


class SyncOperations:
    """Runs upload and delete requests and turns expected failures into
    OperationOutcome values.

    Unexpected failures, such as NeocitiesProtocolError, propagate.
    """

    def __init__(self, client: NeocitiesClient):
        """Initialize sync operations.

        Args:
            client: Neocities API client
        """
        self.client = client

    def upload(self, session: Session, files: list[LocalFile]) -> OperationOutcome:
        """Upload local files in one request.

        Args:
            session: Authenticated session
            files: Files to upload

        Returns:
            OK, INVALID_FILE_TYPE, INVALID_AUTH or NETWORK_ERROR
        """
        if not files:
            return OperationOutcome.OK

        try:
            payload = [(f.relative_path, f.read_bytes()) for f in files]
        except OSError as e:
            raise ScanError(str(e.filename), e.strerror or str(e)) from e

        try:
            self.client.upload_files(session, payload)
        except NeocitiesInvalidFileTypeError as e:
            logger.debug(f"Upload rejected: {e}")
            return OperationOutcome.INVALID_FILE_TYPE
        except NeocitiesAuthenticationError as e:
            logger.debug(f"Upload unauthorized: {e}")
            return OperationOutcome.INVALID_AUTH
        except NeocitiesNetworkError as e:
            logger.debug(f"Upload failed: {e}")
            return OperationOutcome.NETWORK_ERROR
        return OperationOutcome.OK

    def delete(self, session: Session, paths: list[str]) -> OperationOutcome:
        """Delete remote files in one request.

        Args:
            session: Authenticated session
            paths: Relative paths to delete

        Returns:
            OK, MISSING_FILES, INVALID_AUTH or NETWORK_ERROR
        """
        try:
            self.client.delete_files(session, paths)
        except NeocitiesMissingFilesError as e:
            logger.debug(f"Delete matched nothing: {e}")
            return OperationOutcome.MISSING_FILES
        except NeocitiesAuthenticationError as e:
            logger.debug(f"Delete unauthorized: {e}")
            return OperationOutcome.INVALID_AUTH
        except NeocitiesNetworkError as e:
            logger.debug(f"Delete failed: {e}")
            return OperationOutcome.NETWORK_ERROR
        return OperationOutcome.OK
