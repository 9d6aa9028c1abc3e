"""
Write-back of merged metadata to Komga.
"""

import logging
from typing import TYPE_CHECKING, Any

from ..metadata.models import Author, BookMetadata, SeriesMetadata
from .models import CatalogSeries, SeriesAndBookMetadata
from .postprocess import MetadataPostProcessor

if TYPE_CHECKING:
    from ..komga import KomgaClient

logger = logging.getLogger(__name__)


def _drop_empty(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if value not in (None, "", [])}


def series_metadata_patch(metadata: SeriesMetadata) -> dict[str, Any]:
    """Komga series metadata PATCH body with the non-empty fields of ``metadata``."""
    return _drop_empty(
        {
            "status": metadata.status.value if metadata.status else None,
            "title": metadata.title,
            "titleSort": metadata.title,
            "alternateTitles": [
                {"label": t.language or (t.type.value.lower() if t.type else "alternative"), "title": t.name}
                for t in metadata.titles
                if t.name != metadata.title
            ],
            "summary": metadata.summary,
            "publisher": metadata.publisher,
            "readingDirection": metadata.reading_direction.value if metadata.reading_direction else None,
            "ageRating": metadata.age_rating,
            "language": metadata.language,
            "genres": list(metadata.genres),
            "tags": list(metadata.tags),
            "totalBookCount": metadata.total_book_count,
            "links": [{"label": link.label, "url": link.url} for link in metadata.links],
        }
    )


def book_metadata_patch(metadata: BookMetadata) -> dict[str, Any]:
    """Komga book metadata PATCH body with the non-empty fields of ``metadata``."""
    return _drop_empty(
        {
            "title": metadata.title,
            "summary": metadata.summary,
            "number": str(metadata.number) if metadata.number else None,
            "numberSort": metadata.number_sort,
            "releaseDate": metadata.release_date,
            "authors": [{"name": a.name, "role": a.role} for a in metadata.authors],
            "tags": list(metadata.tags),
            "isbn": metadata.isbn,
            "links": [{"label": link.label, "url": link.url} for link in metadata.links],
        }
    )


class MetadataUpdateService:
    """
    Post-processes merged metadata and writes it to Komga.

    Example:
        updater = MetadataUpdateService(komga_client, MetadataPostProcessor(settings.post_processing))
        updater.update_metadata(series, metadata)
    """

    def __init__(self, catalog: "KomgaClient", post_processor: MetadataPostProcessor):
        self._catalog = catalog
        self._post_processor = post_processor

    def update_metadata(self, series: CatalogSeries, metadata: SeriesAndBookMetadata) -> None:
        """
        Write series and book metadata for a series.

        Args:
            series: Catalog series to update
            metadata: Merged metadata; books mapped to None are left untouched,
                books without authors get the series authors
        """
        metadata = self._post_processor.process(metadata)

        series_authors: list[Author] = []
        if metadata.series_metadata is not None:
            series_authors = metadata.series_metadata.authors
            patch = series_metadata_patch(metadata.series_metadata)
            if patch:
                logger.debug("Updating series '%s' fields %s", series.name, sorted(patch))
                self._catalog.update_series_metadata(series.id, patch)

        updated = 0
        for book, book_metadata in metadata.book_metadata.items():
            if book_metadata is None:
                continue
            # Komga only stores authors on books
            if not book_metadata.authors and series_authors:
                book_metadata = book_metadata.model_copy(update={"authors": list(series_authors)})
            patch = book_metadata_patch(book_metadata)
            if not patch:
                continue
            self._catalog.update_book_metadata(book.id, patch)
            updated += 1

        logger.info("Updated metadata of %d/%d books in series '%s'", updated, len(metadata.book_metadata), series.name)
