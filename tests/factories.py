"""Test data builders and an in-memory provider."""

from comicmeta.metadata.models import (
    BookMetadata,
    Provider,
    ProviderBookMetadata,
    ProviderSeriesMetadata,
    SeriesBook,
    SeriesMetadata,
    SeriesSearchResult,
)
from comicmeta.metadata.provider import MetadataProvider
from comicmeta.series.models import CatalogBook


def make_book(name: str, number: float = 1, book_id: str | None = None) -> CatalogBook:
    """Catalog book in series s1 with a file name."""
    return CatalogBook(
        id=book_id or name,
        series_id="s1",
        library_id="lib1",
        name=name,
        number=number,
    )


def make_provider_book(book_id: str, number: float | None, edition: str | None = None) -> SeriesBook:
    """Provider book record."""
    return SeriesBook(id=book_id, name=f"Book {book_id}", number=number, edition=edition)


def make_provider_series(
    provider: Provider,
    title: str,
    books: list[SeriesBook] | None = None,
    series_id: str | None = None,
    **metadata,
) -> ProviderSeriesMetadata:
    """Provider series with a title and optional extra SeriesMetadata fields."""
    return ProviderSeriesMetadata(
        id=series_id or f"{provider.value}-{title}",
        provider=provider,
        metadata=SeriesMetadata(title=title, **metadata),
        books=books or [],
    )


class FakeProvider(MetadataProvider):
    """
    In-memory provider.

    ``series`` maps provider series title -> ProviderSeriesMetadata, ``books``
    maps provider book id -> BookMetadata. Every search returns all series.
    """

    def __init__(
        self,
        provider: Provider,
        series: dict[str, ProviderSeriesMetadata] | None = None,
        books: dict[str, BookMetadata] | None = None,
    ):
        super().__init__(match_threshold=90.0)
        self.provider = provider
        self.series = series or {}
        self.books = books or {}
        self.searched: list[str] = []

    def search_series(self, series_name: str, limit: int = 5) -> list[SeriesSearchResult]:
        self.searched.append(series_name)
        results = [
            SeriesSearchResult(provider=self.provider, result_id=s.id, title=title) for title, s in self.series.items()
        ]
        return results[:limit]

    def get_series_metadata(self, series_id: str) -> ProviderSeriesMetadata:
        return next(s for s in self.series.values() if s.id == series_id)

    def get_book_metadata(self, series_id: str, book_id: str) -> ProviderBookMetadata:
        return ProviderBookMetadata(id=book_id, metadata=self.books.get(book_id, BookMetadata()))
