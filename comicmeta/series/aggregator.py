"""
Multi-provider metadata aggregation.

After a series is matched with one provider, the remaining providers are
queried in parallel and their results merged into the first one. Results are
merged in provider order, not completion order, so the outcome only depends on
what the providers return.
"""

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import Executor
from typing import TYPE_CHECKING

from ..metadata.merger import merge_book_metadata, merge_series_metadata
from ..metadata.models import BookMetadata, ProviderSeriesMetadata
from ..metadata.provider import MetadataProvider
from .matcher import associate_book_metadata
from .models import CatalogBook, CatalogSeries, SeriesAndBookMetadata

if TYPE_CHECKING:
    from ..komga import KomgaClient

logger = logging.getLogger(__name__)


def is_ascii_printable(text: str) -> bool:
    """Whether text only contains printable ASCII characters."""
    return text.isascii() and text.isprintable()


def merge_metadata(original: SeriesAndBookMetadata, new: SeriesAndBookMetadata) -> SeriesAndBookMetadata:
    """
    Merge provider results, keeping ``original`` values where both have one.

    Books are paired by catalog book id. The result holds exactly the books of
    ``original``; books only known to ``new`` are dropped.
    """
    if original.series_metadata is not None and new.series_metadata is not None:
        series_metadata = merge_series_metadata(original.series_metadata, new.series_metadata)
    else:
        series_metadata = original.series_metadata or new.series_metadata

    books = {book.id: book for book in original.book_metadata}
    merged_books = merge_book_metadata(
        {book.id: metadata for book, metadata in original.book_metadata.items()},
        {book.id: metadata for book, metadata in new.book_metadata.items()},
    )

    return SeriesAndBookMetadata(
        series_metadata=series_metadata,
        book_metadata={books[book_id]: metadata for book_id, metadata in merged_books.items()},
    )


class MetadataAggregator:
    """
    Resolves provider matches into SeriesAndBookMetadata and merges several of them.

    Example:
        with ThreadPoolExecutor(max_workers=4) as executor:
            aggregator = MetadataAggregator(komga_client, executor)
            metadata = aggregator.resolve(series.id, anilist, anilist_match)
            metadata = aggregator.aggregate(series, metadata, [mangaupdates, mal])
    """

    def __init__(self, catalog: "KomgaClient", executor: Executor):
        """
        Initialize the aggregator.

        Args:
            catalog: Catalog client used to list the books of a series
            executor: Executor running one provider query per task
        """
        self._catalog = catalog
        self._executor = executor

    def resolve(
        self,
        series_id: str,
        provider: MetadataProvider,
        series_metadata: ProviderSeriesMetadata,
        edition: str | None = None,
    ) -> SeriesAndBookMetadata:
        """
        Match the catalog books of a series to a provider series and fetch their metadata.

        Args:
            series_id: Catalog series ID
            provider: Provider the series was matched with
            series_metadata: Provider series (metadata and book list)
            edition: Optional edition hint passed to the book matcher

        Returns:
            SeriesAndBookMetadata with an entry for every catalog book
        """
        books = self._catalog.get_books(series_id)
        matches = associate_book_metadata(books, series_metadata.books, edition)

        book_metadata: dict[CatalogBook, BookMetadata | None] = {}
        for book, provider_book in matches.items():
            if provider_book is None:
                book_metadata[book] = None
                continue
            logger.info("(%s) fetching metadata for book %s", provider.provider_name().value, provider_book.name)
            book_metadata[book] = provider.get_book_metadata(series_metadata.id, provider_book.id).metadata

        return SeriesAndBookMetadata(series_metadata=series_metadata.metadata, book_metadata=book_metadata)

    @staticmethod
    def search_titles(series: CatalogSeries, metadata: SeriesAndBookMetadata) -> list[str]:
        """Catalog name, matched title and alternative titles, without duplicates."""
        titles = [series.name]
        if metadata.series_metadata is not None:
            if metadata.series_metadata.title:
                titles.append(metadata.series_metadata.title)
            titles.extend(metadata.series_metadata.alternative_titles)
        return list(dict.fromkeys(titles))

    def provider_metadata(
        self,
        series: CatalogSeries,
        search_titles: Iterable[str],
        provider: MetadataProvider,
        edition: str | None = None,
    ) -> SeriesAndBookMetadata | None:
        """
        Match a series with one provider, trying each search title in turn.

        Titles with non-ASCII characters are skipped. The first title that
        matches is used; None if no title matches.
        """
        provider_name = provider.provider_name().value
        for title in search_titles:
            if not is_ascii_printable(title):
                continue

            logger.info("Searching '%s' using %s", title, provider_name)
            series_metadata = provider.match_series_metadata(title)
            if series_metadata is None:
                continue

            logger.info(
                "Found match: '%s' from %s (%s)", series_metadata.metadata.title, provider_name, series_metadata.id
            )
            return self.resolve(series.id, provider, series_metadata, edition)

        return None

    def aggregate(
        self,
        series: CatalogSeries,
        metadata: SeriesAndBookMetadata,
        providers: Sequence[MetadataProvider],
        edition: str | None = None,
    ) -> SeriesAndBookMetadata:
        """
        Merge metadata from additional providers into an existing result.

        All providers are queried in parallel. A provider that fails or finds
        no match contributes nothing.

        Args:
            series: Catalog series being matched
            metadata: Result of the primary provider
            providers: Providers to query, in merge priority order
            edition: Optional edition hint for book matching

        Returns:
            Merged SeriesAndBookMetadata (``metadata`` itself if there are no providers)
        """
        if not providers:
            return metadata

        logger.info("Launching metadata aggregation using %s", [p.provider_name().value for p in providers])
        search_titles = self.search_titles(series, metadata)

        futures = [
            self._executor.submit(self.provider_metadata, series, search_titles, provider, edition)
            for provider in providers
        ]

        # Wait in submission order so the merge order never depends on timing
        result = metadata
        for provider, future in zip(providers, futures):
            try:
                provider_result = future.result()
            except Exception as e:
                logger.warning(
                    "Aggregation with %s failed for series '%s': %s",
                    provider.provider_name().value,
                    series.name,
                    e,
                    exc_info=True,
                )
                continue

            if provider_result is not None:
                result = merge_metadata(result, provider_result)

        return result
