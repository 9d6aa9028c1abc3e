"""
Tests for KomgaClient.
Covers exceptions, initialization, request error mapping, pagination and the
series/book API methods. HTTP traffic goes through httpx.MockTransport.
"""

import json
import threading
import time
from unittest.mock import MagicMock, patch

import httpx
import pytest

from comicmeta.komga.client import (
    KomgaAuthError,
    KomgaClient,
    KomgaConnectionError,
    KomgaError,
    KomgaNotFoundError,
    _is_localhost,
    _normalize_host,
)
from comicmeta.series.models import CatalogBook, CatalogSeries


def series_json(series_id: str, name: str = "Foo") -> dict:
    return {"id": series_id, "libraryId": "lib1", "name": name, "booksCount": 2, "metadata": {"title": name}}


def book_json(book_id: str, name: str, number: float) -> dict:
    return {"id": book_id, "seriesId": "s1", "libraryId": "lib1", "name": name, "number": number}


def make_client(handler) -> KomgaClient:
    return KomgaClient("http://localhost:25600", "secret", transport=httpx.MockTransport(handler))


# -----------------------------------------------------------------------------
# Exception Tests
# -----------------------------------------------------------------------------
class TestExceptions:
    def test_komgaerror_with_response(self):
        err = KomgaError("Test error", status_code=500, response={"error": "fail"})
        assert str(err) == "Test error"
        assert err.status_code == 500
        assert err.response == {"error": "fail"}

    def test_komgaerror_without_response(self):
        err = KomgaError("Test error")
        assert err.status_code is None
        assert err.response is None

    def test_subclasses_inherit(self):
        assert isinstance(KomgaConnectionError("Conn fail"), KomgaError)
        assert isinstance(KomgaAuthError("Auth fail"), KomgaError)
        assert isinstance(KomgaNotFoundError("Not found"), KomgaError)


# -----------------------------------------------------------------------------
# Host handling & initialization
# -----------------------------------------------------------------------------
class TestHostHandling:
    @pytest.mark.parametrize("host", ["localhost", "localhost:25600", "http://127.0.0.1:25600", "[::1]:25600"])
    def test_is_localhost(self, host):
        assert _is_localhost(host)

    def test_remote_is_not_localhost(self):
        assert not _is_localhost("komga.example.com")

    def test_normalize_adds_scheme(self):
        assert _normalize_host("localhost:25600/") == "http://localhost:25600"
        assert _normalize_host("komga.example.com") == "https://komga.example.com"
        assert _normalize_host("http://komga.lan") == "http://komga.lan"


class TestClientInit:
    def test_init_defaults(self):
        client = KomgaClient("localhost:25600", "secret")
        assert client.host == "http://localhost:25600"
        assert client._client.headers["X-API-Key"] == "secret"
        client.close()

    def test_remote_http_rejected(self):
        with pytest.raises(KomgaConnectionError, match="insecure HTTP is not allowed"):
            KomgaClient("http://komga.example.com", "secret")

    def test_remote_http_allowed_explicitly(self):
        client = KomgaClient("http://komga.example.com", "secret", allow_insecure_http=True)
        assert client.host == "http://komga.example.com"
        client.close()

    def test_missing_ca_bundle(self, tmp_path):
        with pytest.raises(KomgaConnectionError, match="tls_ca_bundle"):
            KomgaClient("https://komga.example.com", "secret", tls_ca_bundle=str(tmp_path / "missing.pem"))

    def test_context_manager_calls_close(self):
        client = KomgaClient("http://localhost:25600", "secret")
        with patch.object(client, "close") as mock_close:
            with client:
                pass
            mock_close.assert_called_once()


# -----------------------------------------------------------------------------
# Request handling
# -----------------------------------------------------------------------------
class TestRequest:
    def test_api_prefix_and_auth_header(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["key"] = request.headers["X-API-Key"]
            return httpx.Response(200, json={"ok": True})

        assert make_client(handler)._get("/series/s1") == {"ok": True}
        assert seen == {"path": "/api/v1/series/s1", "key": "secret"}

    @pytest.mark.parametrize(
        ("status", "error"),
        [(401, KomgaAuthError), (403, KomgaAuthError), (404, KomgaNotFoundError), (500, KomgaError)],
    )
    def test_status_errors(self, status, error):
        client = make_client(lambda request: httpx.Response(status))

        with pytest.raises(error) as exc_info:
            client._get("/series/s1")

        assert exc_info.value.status_code == status

    def test_connect_error(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused")

        with pytest.raises(KomgaConnectionError, match="Failed to connect"):
            make_client(handler)._get("/series/s1")

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out")

        with pytest.raises(KomgaConnectionError, match="timed out"):
            make_client(handler)._get("/series/s1")

    def test_empty_body(self):
        client = make_client(lambda request: httpx.Response(204))
        assert client._patch("/series/s1/metadata", json={"title": "Foo"}) == {}

    def test_invalid_json(self):
        client = make_client(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(KomgaError, match="invalid JSON"):
            client._get("/series/s1")

    def test_non_dict_json(self):
        client = make_client(lambda request: httpx.Response(200, json=[1, 2]))
        with pytest.raises(KomgaError, match="Expected dict"):
            client._get("/series/s1")

    def test_rate_limit_disabled_by_default(self):
        client = KomgaClient("http://localhost:25600", "secret")
        with patch("comicmeta.komga.client.time.sleep") as mock_sleep:
            client._rate_limit()
            client._rate_limit()
        mock_sleep.assert_not_called()

    def test_rate_limit_spaces_concurrent_requests(self):
        """Threads sharing a client still wait rate_limit_delay between requests."""
        client = KomgaClient("http://localhost:25600", "secret", rate_limit_delay=0.05)
        threads = [threading.Thread(target=client._rate_limit) for _ in range(4)]

        start = time.monotonic()
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # First request goes through at once, the other three wait in turn
        assert time.monotonic() - start >= 0.14


# -----------------------------------------------------------------------------
# Series & Book Methods
# -----------------------------------------------------------------------------
class TestSeriesMethods:
    @pytest.fixture
    def client(self):
        c = KomgaClient("http://localhost:25600", "secret")
        c._request = MagicMock()
        return c

    def test_get_series(self, client):
        client._request.return_value = series_json("s1")

        series = client.get_series("s1")

        assert series == CatalogSeries(id="s1", library_id="lib1", name="Foo", book_count=2)
        client._request.assert_called_once_with("GET", "/series/s1", params=None)

    def test_get_series_unexpected_response(self, client):
        client._request.return_value = {"id": "s1"}

        with pytest.raises(KomgaError, match="Unexpected KomgaSeries"):
            client.get_series("s1")

    def test_get_library_series_follows_pages(self, client):
        client._request.side_effect = [
            {"content": [series_json("s1")], "number": 0, "totalPages": 2, "last": False},
            {"content": [series_json("s2", "Bar")], "number": 1, "totalPages": 2, "last": True},
        ]

        series = client.get_library_series("lib1")

        assert [s.id for s in series] == ["s1", "s2"]
        assert client._request.call_count == 2
        params = client._request.call_args.kwargs["params"]
        assert params == {"library_id": "lib1", "page": 1, "size": KomgaClient.PAGE_SIZE}

    def test_update_series_metadata(self, client):
        client._request.return_value = {}

        client.update_series_metadata("s1", {"title": "Foo"})

        client._request.assert_called_once_with("PATCH", "/series/s1/metadata", json={"title": "Foo"})

    def test_get_books(self, client):
        client._request.return_value = {
            "content": [book_json("b1", "Foo v01", 1), book_json("b2", "Foo v02", 2)],
            "totalPages": 1,
            "last": True,
        }

        books = client.get_books("s1")

        assert books[0] == CatalogBook(id="b1", series_id="s1", library_id="lib1", name="Foo v01", number=1)
        assert [b.id for b in books] == ["b1", "b2"]
        client._request.assert_called_once_with("GET", "/series/s1/books", params={"unpaged": "true"})

    def test_update_book_metadata(self, client):
        client._request.return_value = {}

        client.update_book_metadata("b1", {"number": "1"})

        client._request.assert_called_once_with("PATCH", "/books/b1/metadata", json={"number": "1"})


class TestRoundTripThroughTransport:
    def test_patch_body_sent_as_json(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "PATCH"
            bodies.append(json.loads(request.content))
            return httpx.Response(204)

        make_client(handler).update_book_metadata("b1", {"title": "Vol 1", "numberSort": 1.0})

        assert bodies == [{"title": "Vol 1", "numberSort": 1.0}]
