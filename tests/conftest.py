"""Pytest configuration and shared fixtures."""

from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import httpx
import pytest

from comicmeta.komga import KomgaClient
from comicmeta.series.models import CatalogBook, CatalogSeries
from tests.factories import make_book


@pytest.fixture
def series() -> CatalogSeries:
    """Catalog series 'Foo'."""
    return CatalogSeries(id="s1", library_id="lib1", name="Foo", book_count=2)


@pytest.fixture
def catalog_books() -> list[CatalogBook]:
    """Two single-volume books of series 'Foo'."""
    return [make_book("Foo v01.cbz", 1, "b1"), make_book("Foo v02.cbz", 2, "b2")]


# ============================================================================
# Komga Client Mocks
# ============================================================================


@pytest.fixture
def mock_komga_client(series, catalog_books) -> KomgaClient:
    """Mock Komga client for testing without network calls (success path)."""
    client = MagicMock(spec=KomgaClient)
    client.get_series.return_value = series
    client.get_library_series.return_value = [series]
    client.get_books.return_value = catalog_books
    return client


@pytest.fixture
def mock_komga_client_conn_error() -> KomgaClient:
    """
    Mock Komga client that raises connection errors.

    Simulates an unreachable Komga server.
    """
    client = MagicMock(spec=KomgaClient)
    client.get_series.side_effect = httpx.ConnectError("Connection refused")
    client.get_library_series.side_effect = httpx.ConnectError("Connection refused")
    client.get_books.side_effect = httpx.ConnectError("Connection refused")
    return client


@pytest.fixture
def executor():
    """Thread pool for aggregation tests."""
    with ThreadPoolExecutor(max_workers=4) as pool:
        yield pool
