"""Unit tests for the Neocities API client."""

import json

import httpx
import pytest

from neocities_sync.api import NeocitiesClient
from neocities_sync.exceptions import (
    NeocitiesAuthenticationError,
    NeocitiesInvalidFileTypeError,
    NeocitiesMissingFilesError,
    NeocitiesNetworkError,
    NeocitiesProtocolError,
)
from neocities_sync.models import DirectoryEntry, FileEntry, Session

API_URL = "https://neocities.test/api"


def make_client(handler):
    """Create a client whose requests are answered by handler."""
    return NeocitiesClient(
        api_url=API_URL, timeout=5.0, transport=httpx.MockTransport(handler)
    )


def json_response(data, status_code=200):
    return httpx.Response(status_code, json=data)


@pytest.fixture
def session():
    return Session(api_key="test_key", username="tester")


class TestNeocitiesClient:
    """Tests for client initialization and request handling."""

    def test_init_with_custom_api_url(self):
        """Trailing slashes are stripped from the API URL."""
        client = NeocitiesClient(api_url="https://custom.api/")
        assert client.api_url == "https://custom.api"

    def test_default_api_url_from_config(self, monkeypatch):
        """Without an explicit URL the environment is used."""
        monkeypatch.setenv("NEOCITIES_API_URL", "https://env.api")
        client = NeocitiesClient()
        assert client.api_url == "https://env.api"

    def test_context_manager_closes_client(self):
        """Leaving the with block closes the httpx client."""
        with make_client(lambda request: json_response({})) as client:
            client._get_client()
        assert client._client is None

    def test_request_error_becomes_network_error(self):
        """Transport failures are reported as NeocitiesNetworkError."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        with pytest.raises(NeocitiesNetworkError, match="Network error"):
            client._request("GET", "/list")

    def test_non_json_body_becomes_network_error(self):
        """An HTML error page cannot be decoded and counts as network error."""
        client = make_client(lambda request: httpx.Response(502, text="<html>"))
        with pytest.raises(NeocitiesNetworkError, match="Invalid JSON"):
            client._request("GET", "/list")

    def test_non_object_body_is_protocol_error(self):
        """A JSON body that is not an object is unexpected."""
        client = make_client(lambda request: json_response(["unexpected"]))
        with pytest.raises(NeocitiesProtocolError):
            client._request("GET", "/list")


class TestLogin:
    """Tests for login."""

    def test_login_returns_session(self):
        """A successful login yields a Session carrying the API key."""
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            return json_response({"result": "success", "api_key": "abc123"})

        session = make_client(handler).login("user", "pass")

        assert session == Session(api_key="abc123", username="user")
        assert seen["url"] == f"{API_URL}/key"
        assert seen["auth"].startswith("Basic ")

    def test_login_invalid_auth(self):
        """invalid_auth maps to NeocitiesAuthenticationError."""
        client = make_client(
            lambda request: json_response(
                {"result": "error", "error_type": "invalid_auth"}, status_code=403
            )
        )
        with pytest.raises(NeocitiesAuthenticationError):
            client.login("user", "wrong")

    def test_login_unknown_error_is_protocol_error(self):
        """Unhandled error types are not silently ignored."""
        client = make_client(
            lambda request: json_response(
                {"result": "error", "error_type": "server_error", "message": "boom"}
            )
        )
        with pytest.raises(NeocitiesProtocolError, match="server_error: boom"):
            client.login("user", "pass")

    def test_login_missing_api_key_is_protocol_error(self):
        client = make_client(lambda request: json_response({"result": "success"}))
        with pytest.raises(NeocitiesProtocolError, match="api_key"):
            client.login("user", "pass")

    def test_session_is_not_stored_on_client(self):
        """The client keeps no token after login."""
        client = make_client(
            lambda request: json_response({"result": "success", "api_key": "k"})
        )
        client.login("user", "pass")
        assert not hasattr(client, "api_key")


class TestUpload:
    """Tests for upload_files."""

    def test_upload_sends_multipart_with_bearer(self, session):
        """Each file is sent as a part named after its path."""
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            seen["content_type"] = request.headers.get("Content-Type")
            seen["body"] = request.read()
            return json_response({"result": "success"})

        make_client(handler).upload_files(
            session, [("index.html", b"<h1>hi</h1>"), ("css/site.css", b"body{}")]
        )

        assert seen["auth"] == "Bearer test_key"
        assert seen["content_type"].startswith("multipart/form-data")
        assert b'name="css/site.css"' in seen["body"]
        assert b"<h1>hi</h1>" in seen["body"]

    def test_upload_nothing_makes_no_request(self, session):
        def handler(request):
            raise AssertionError("no request expected")

        make_client(handler).upload_files(session, [])

    def test_upload_invalid_file_type(self, session):
        client = make_client(
            lambda request: json_response(
                {"result": "error", "error_type": "invalid_file_type"}
            )
        )
        with pytest.raises(NeocitiesInvalidFileTypeError):
            client.upload_files(session, [("app.exe", b"MZ")])

    def test_upload_invalid_auth(self, session):
        client = make_client(
            lambda request: json_response(
                {"result": "error", "error_type": "invalid_auth"}
            )
        )
        with pytest.raises(NeocitiesAuthenticationError):
            client.upload_files(session, [("index.html", b"x")])


class TestDelete:
    """Tests for delete_files."""

    def test_delete_sends_filenames(self, session):
        seen = {}

        def handler(request):
            seen["body"] = request.read().decode()
            return json_response({"result": "success"})

        make_client(handler).delete_files(session, ["old.html", "img/a.png"])

        assert "filenames%5B%5D=old.html" in seen["body"]
        assert "filenames%5B%5D=img%2Fa.png" in seen["body"]

    def test_delete_empty_is_missing_files(self, session):
        """Nothing to delete is reported as missing files, without a request."""

        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(NeocitiesMissingFilesError):
            make_client(handler).delete_files(session, [])

    def test_delete_never_sends_index_html(self, session):
        """index.html cannot be deleted on the host and is filtered out."""

        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(NeocitiesMissingFilesError):
            make_client(handler).delete_files(session, ["index.html"])

    def test_delete_missing_files_from_server(self, session):
        client = make_client(
            lambda request: json_response(
                {"result": "error", "error_type": "missing_files"}
            )
        )
        with pytest.raises(NeocitiesMissingFilesError):
            client.delete_files(session, ["gone.html"])

    def test_delete_invalid_auth(self, session):
        client = make_client(
            lambda request: json_response(
                {"result": "error", "error_type": "invalid_auth"}
            )
        )
        with pytest.raises(NeocitiesAuthenticationError):
            client.delete_files(session, ["old.html"])


class TestList:
    """Tests for list_files."""

    def test_list_parses_entries(self, session):
        payload = {
            "result": "success",
            "files": [
                {
                    "path": "index.html",
                    "is_directory": False,
                    "size": 1023,
                    "updated_at": "Sat, 13 Feb 2016 03:04:00 -0000",
                    "sha1_hash": "C8AAC06F343C962A24A7EB111AAD739FF48B7FB1",
                },
                {
                    "path": "img",
                    "is_directory": True,
                    "updated_at": "Sat, 13 Feb 2016 03:04:00 -0000",
                },
            ],
        }
        client = make_client(
            lambda request: httpx.Response(200, text=json.dumps(payload))
        )

        entries = client.list_files(session)

        assert entries == [
            FileEntry(
                path="index.html",
                size=1023,
                updated_at="Sat, 13 Feb 2016 03:04:00 -0000",
                sha1_hash="c8aac06f343c962a24a7eb111aad739ff48b7fb1",
            ),
            DirectoryEntry(path="img", updated_at="Sat, 13 Feb 2016 03:04:00 -0000"),
        ]

    def test_list_invalid_auth(self, session):
        client = make_client(
            lambda request: json_response(
                {"result": "error", "error_type": "invalid_auth"}
            )
        )
        with pytest.raises(NeocitiesAuthenticationError):
            client.list_files(session)

    def test_list_without_files_is_protocol_error(self, session):
        client = make_client(lambda request: json_response({"result": "success"}))
        with pytest.raises(NeocitiesProtocolError, match="Missing files"):
            client.list_files(session)

    def test_list_with_malformed_entry_is_protocol_error(self, session):
        client = make_client(
            lambda request: json_response({"result": "success", "files": [42]})
        )
        with pytest.raises(NeocitiesProtocolError):
            client.list_files(session)
