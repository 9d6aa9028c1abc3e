"""
Komga API client.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError

from ..series.models import CatalogBook, CatalogSeries
from .models import BookPage, KomgaSeries, SeriesPage

logger = logging.getLogger(__name__)


class KomgaError(Exception):
    """Base exception for Komga API errors."""

    def __init__(self, message: str, status_code: int | None = None, response: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response

    def __str__(self) -> str:
        return self.message


class KomgaConnectionError(KomgaError):
    """Connection error."""


class KomgaAuthError(KomgaError):
    """Authentication error."""


class KomgaNotFoundError(KomgaError):
    """Resource not found error."""


def _is_localhost(host: str) -> bool:
    """Check if host is localhost or loopback address."""
    parsed = urlparse(host if "://" in host else f"http://{host}")
    hostname = parsed.hostname or ""
    return hostname in ("localhost", "127.0.0.1", "::1")


def _normalize_host(host: str) -> str:
    """
    Normalize host URL by adding scheme if missing.

    Localhost defaults to http://, anything else to https://.
    """
    host = host.rstrip("/")
    if "://" in host:
        return host
    if _is_localhost(host):
        return f"http://{host}"
    return f"https://{host}"


class KomgaClient:
    """
    Komga API client.

    Authenticates with an API key sent in the ``X-API-Key`` header.

    Example:
        with KomgaClient("https://komga.example.com", api_key) as client:
            series = client.get_series(series_id)
            books = client.get_books(series.id)
    """

    PAGE_SIZE = 500

    def __init__(
        self,
        host: str,
        api_key: str,
        timeout: float = 30.0,
        rate_limit_delay: float = 0.0,
        allow_insecure_http: bool = False,
        tls_ca_bundle: str | None = None,
        insecure_tls: bool = False,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the Komga client.

        Args:
            host: Komga server URL (e.g., https://komga.example.com or localhost:25600)
            api_key: API key for authentication
            timeout: Request timeout in seconds
            rate_limit_delay: Delay between requests (0 = disabled)
            allow_insecure_http: Allow HTTP connections to non-localhost (localhost always allowed)
            tls_ca_bundle: Path to CA certificate bundle for self-signed certs
            insecure_tls: DANGEROUS - Disable SSL verification entirely
            transport: Optional httpx transport (used by tests)
        """
        self.host = _normalize_host(host)
        self.timeout = timeout
        self.rate_limit_delay = rate_limit_delay
        self._last_request_time = 0.0
        self._rate_limit_lock = threading.Lock()

        is_https = self.host.startswith("https://")

        if tls_ca_bundle and not Path(tls_ca_bundle).is_file():
            raise KomgaConnectionError(
                f"tls_ca_bundle path does not exist or is not a file: {tls_ca_bundle}\n"
                "Fix the path, or remove it to use the system trust store."
            )

        # HTTP only allowed for localhost or if explicitly enabled
        if not is_https and not _is_localhost(self.host) and not allow_insecure_http:
            raise KomgaConnectionError(
                f"Komga host is HTTP but insecure HTTP is not allowed: {self.host}\n"
                "Options:\n"
                "  1. Use HTTPS for Komga (recommended)\n"
                "  2. Set allow_insecure_http: true in config.yaml (not recommended)\n"
                "  3. Set KOMGA_ALLOW_INSECURE_HTTP=true environment variable"
            )

        if insecure_tls:
            logger.warning(
                "SSL certificate verification is DISABLED. This is insecure and should only be used for testing."
            )

        verify: bool | str = True
        if is_https:
            if insecure_tls:
                verify = False
            elif tls_ca_bundle:
                verify = tls_ca_bundle
                logger.debug("Using custom CA bundle: %s", tls_ca_bundle)

        self._client = httpx.Client(
            base_url=self.host,
            headers={
                "X-API-Key": api_key,
                "Accept": "application/json",
            },
            timeout=timeout,
            verify=verify,
            transport=transport,
        )

    def _rate_limit(self) -> None:
        """Apply rate limiting between requests (skipped if delay is 0)."""
        if self.rate_limit_delay <= 0:
            return
        # Held while sleeping so aggregation threads are spaced out too
        with self._rate_limit_lock:
            elapsed = time.time() - self._last_request_time
            if elapsed < self.rate_limit_delay:
                time.sleep(self.rate_limit_delay - elapsed)
            self._last_request_time = time.time()

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> dict:
        """
        Make an API request.

        Args:
            method: HTTP method
            endpoint: API endpoint below /api/v1 (e.g., /series/{id})
            params: Query parameters
            json: JSON body

        Returns:
            Response JSON as dict (empty for 204 responses)

        Raises:
            KomgaError: On API errors
        """
        self._rate_limit()

        url = f"/api/v1{endpoint}"
        logger.debug("Komga API request: %s %s params=%s", method, url, params)

        try:
            response = self._client.request(method=method, url=url, params=params, json=json)
        except httpx.ConnectError as e:
            logger.debug("Komga connection error: %s", e)
            raise KomgaConnectionError(f"Failed to connect to {self.host}: {e}") from e
        except httpx.TimeoutException as e:
            logger.debug("Komga timeout: %s", e)
            raise KomgaConnectionError(f"Request timed out: {e}") from e

        if response.status_code == 401:
            raise KomgaAuthError("Authentication failed. Check your API key.", status_code=401)
        elif response.status_code == 403:
            raise KomgaAuthError("Access forbidden. Insufficient permissions.", status_code=403)
        elif response.status_code == 404:
            raise KomgaNotFoundError(f"Resource not found: {endpoint}", status_code=404)
        elif response.status_code >= 400:
            logger.debug("Komga API error: %d for %s", response.status_code, endpoint)
            raise KomgaError(f"API error: {response.status_code}", status_code=response.status_code)

        if not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            content_preview = response.text[:200] if response.text else "(empty)"
            raise KomgaError(
                f"Server returned invalid JSON response. Status: {response.status_code}, "
                f"Content preview: {content_preview}",
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise KomgaError(f"Expected dict response, got {type(data).__name__}", status_code=response.status_code)
        return data

    def _get(self, endpoint: str, params: dict | None = None) -> dict:
        """Make a GET request."""
        return self._request("GET", endpoint, params=params)

    def _patch(self, endpoint: str, json: dict) -> dict:
        """Make a PATCH request."""
        return self._request("PATCH", endpoint, json=json)

    def _parse(self, model: Any, data: dict) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise KomgaError(f"Unexpected {model.__name__} response: {e}") from e

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "KomgaClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =====================
    # Series
    # =====================

    def get_series(self, series_id: str) -> CatalogSeries:
        """
        Get a series.

        Args:
            series_id: Komga series ID

        Returns:
            CatalogSeries
        """
        series: KomgaSeries = self._parse(KomgaSeries, self._get(f"/series/{series_id}"))
        return series.to_catalog()

    def get_library_series(self, library_id: str) -> list[CatalogSeries]:
        """
        Get every series of a library, following pagination.

        Args:
            library_id: Komga library ID

        Returns:
            List of CatalogSeries
        """
        series: list[CatalogSeries] = []
        page = 0
        while True:
            data = self._get("/series", params={"library_id": library_id, "page": page, "size": self.PAGE_SIZE})
            parsed: SeriesPage = self._parse(SeriesPage, data)
            series.extend(s.to_catalog() for s in parsed.content)
            if parsed.last or page + 1 >= parsed.total_pages:
                break
            page += 1

        logger.debug("Fetched %d series from library %s", len(series), library_id)
        return series

    def update_series_metadata(self, series_id: str, metadata: dict[str, Any]) -> None:
        """
        Patch series metadata. Only the given fields are changed.

        Args:
            series_id: Komga series ID
            metadata: Komga series metadata fields (camelCase)
        """
        self._patch(f"/series/{series_id}/metadata", json=metadata)

    # =====================
    # Books
    # =====================

    def get_books(self, series_id: str) -> list[CatalogBook]:
        """
        Get every book of a series.

        Args:
            series_id: Komga series ID

        Returns:
            List of CatalogBook in Komga's order
        """
        data = self._get(f"/series/{series_id}/books", params={"unpaged": "true"})
        parsed: BookPage = self._parse(BookPage, data)
        return [book.to_catalog() for book in parsed.content]

    def update_book_metadata(self, book_id: str, metadata: dict[str, Any]) -> None:
        """
        Patch book metadata. Only the given fields are changed.

        Args:
            book_id: Komga book ID
            metadata: Komga book metadata fields (camelCase)
        """
        self._patch(f"/books/{book_id}/metadata", json=metadata)
