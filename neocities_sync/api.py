"""API client for Neocities."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx

from .config import config
from .exceptions import (
    NeocitiesAuthenticationError,
    NeocitiesInvalidFileTypeError,
    NeocitiesMissingFilesError,
    NeocitiesNetworkError,
    NeocitiesProtocolError,
)
from .models import RemoteEntry, Session, parse_remote_entry

logger = logging.getLogger(__name__)

# The host refuses to delete the site's front page
UNDELETABLE_FILES = frozenset({"index.html"})


class NeocitiesClient:
    """Client for interacting with the Neocities API.

    The client itself is stateless with respect to authentication: ``login``
    returns a :class:`Session` which has to be passed to every other call.
    """

    def __init__(
        self,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize Neocities API client.

        Args:
            api_url: Optional API URL (uses config if not provided)
            timeout: Request timeout in seconds (uses config if not provided)
            transport: Optional httpx transport, mainly for testing
        """
        self.api_url = (api_url or config.api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    def __enter__(self) -> NeocitiesClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        """Make an API request and decode its JSON body.

        Neocities reports failures as JSON with an ``error_type`` field, often
        together with a 4xx status, so the status code alone is not checked.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON data

        Raises:
            NeocitiesNetworkError: On transport failure or non-JSON body
            NeocitiesProtocolError: If the body is JSON but not an object
        """
        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        logger.debug(f"{method} {url}")

        try:
            response = self._get_client().request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise NeocitiesNetworkError(f"Network error: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise NeocitiesNetworkError(
                f"Invalid JSON response from server (status {response.status_code})"
            ) from e

        if not isinstance(data, dict):
            raise NeocitiesProtocolError(f"Unexpected response payload: {data!r}")
        return data

    @staticmethod
    def _raise_for_error(data: dict[str, Any], operation: str) -> None:
        """Raise NeocitiesProtocolError for any error not handled by the caller."""
        if data.get("result") == "error" or data.get("error_type"):
            error_type = data.get("error_type")
            raise NeocitiesProtocolError(
                f"({operation}) {error_type}: {data.get('message')}",
                error_type=error_type,
            )

    # =========================
    # Authentication Operations
    # =========================

    def login(self, username: str, password: str) -> Session:
        """Exchange account credentials for an API key.

        Args:
            username: Site name or account email
            password: Account password

        Returns:
            Session carrying the API key

        Raises:
            NeocitiesAuthenticationError: If the credentials are rejected
        """
        data = self._request("GET", "/key", auth=(username, password))
        if data.get("error_type") == "invalid_auth":
            raise NeocitiesAuthenticationError("Username or password is incorrect")
        self._raise_for_error(data, "login")

        api_key = data.get("api_key")
        if not isinstance(api_key, str) or not api_key:
            raise NeocitiesProtocolError(f"Missing api_key in response: {data!r}")
        return Session(api_key=api_key, username=username)

    # =========================
    # File Operations
    # =========================

    def upload_files(
        self, session: Session, files: Iterable[tuple[str, bytes]]
    ) -> None:
        """Upload files in a single request.

        Args:
            session: Authenticated session
            files: (relative_path, content) pairs; the path is used as both
                the form field name and the file name

        Raises:
            NeocitiesAuthenticationError: If the session is not valid
            NeocitiesInvalidFileTypeError: If the account may not host a type
        """
        parts = [(path, (path, content)) for path, content in files]
        if not parts:
            return

        logger.debug(f"Uploading {len(parts)} file(s)")
        data = self._request(
            "POST",
            "/upload",
            headers={"Authorization": session.authorization},
            files=parts,
        )
        if data.get("error_type") == "invalid_auth":
            raise NeocitiesAuthenticationError("Invalid session")
        if "invalid_file_type" in (data.get("result"), data.get("error_type")):
            raise NeocitiesInvalidFileTypeError(
                data.get("message") or "Invalid file type"
            )
        self._raise_for_error(data, "upload")

    def delete_files(self, session: Session, paths: Iterable[str]) -> None:
        """Delete files in a single request.

        ``index.html`` is never sent since the host refuses to delete it.

        Args:
            session: Authenticated session
            paths: Relative paths of the files to delete

        Raises:
            NeocitiesMissingFilesError: If there is nothing to delete or the
                server does not know one of the files
            NeocitiesAuthenticationError: If the session is not valid
        """
        filenames = [path for path in paths if path not in UNDELETABLE_FILES]
        if not filenames:
            raise NeocitiesMissingFilesError("No files to delete")

        logger.debug(f"Deleting {len(filenames)} file(s)")
        data = self._request(
            "POST",
            "/delete",
            headers={"Authorization": session.authorization},
            data={"filenames[]": filenames},
        )
        if data.get("error_type") == "invalid_auth":
            raise NeocitiesAuthenticationError("Invalid session")
        if "missing_files" in (data.get("result"), data.get("error_type")):
            raise NeocitiesMissingFilesError(data.get("message") or "Missing files")
        self._raise_for_error(data, "delete")

    def list_files(self, session: Session) -> list[RemoteEntry]:
        """List every file and directory of the site.

        Args:
            session: Authenticated session

        Returns:
            List of FileEntry and DirectoryEntry objects

        Raises:
            NeocitiesAuthenticationError: If the session is not valid
        """
        data = self._request(
            "GET", "/list", headers={"Authorization": session.authorization}
        )
        if data.get("error_type") == "invalid_auth":
            raise NeocitiesAuthenticationError("Invalid session")
        self._raise_for_error(data, "list")

        files = data.get("files")
        if not isinstance(files, list):
            raise NeocitiesProtocolError(f"Missing files in response: {data!r}")
        return [parse_remote_entry(item) for item in files]
