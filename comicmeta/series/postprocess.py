"""
Adjustments applied to merged metadata right before it is written back.
"""

from ..config import PostProcessingSettings
from ..metadata import filename
from ..metadata.models import BookMetadata, SeriesMetadata, SeriesTitle
from .models import CatalogBook, SeriesAndBookMetadata


class MetadataPostProcessor:
    """Applies the configured title, language, reading direction and numbering rules."""

    def __init__(self, settings: PostProcessingSettings):
        self.settings = settings

    def process(self, metadata: SeriesAndBookMetadata) -> SeriesAndBookMetadata:
        return SeriesAndBookMetadata(
            series_metadata=self._process_series(metadata.series_metadata),
            book_metadata=self._process_books(metadata.book_metadata),
        )

    def _should_create_series_metadata(self) -> bool:
        return self.settings.language_value is not None or self.settings.reading_direction_value is not None

    def _process_series(self, series: SeriesMetadata | None) -> SeriesMetadata | None:
        if series is None:
            if not self._should_create_series_metadata():
                return None
            series = SeriesMetadata()

        if self.settings.series_title:
            title = self._series_title(series.titles)
            title_name = title.name if title else series.title
        else:
            title_name = None

        return series.model_copy(
            update={
                "title": title_name,
                "titles": list(series.titles) if self.settings.alternative_series_titles else [],
                "reading_direction": self.settings.reading_direction_value or series.reading_direction,
                "language": self.settings.language_value or series.language,
            }
        )

    def _series_title(self, titles: list[SeriesTitle]) -> SeriesTitle | None:
        typed = [t for t in titles if t.type is not None]
        preferred = next((t for t in typed if t.type == self.settings.title_type), None)
        return preferred or (typed[0] if typed else None)

    def _process_books(
        self, books: dict[CatalogBook, BookMetadata | None]
    ) -> dict[CatalogBook, BookMetadata | None]:
        if not self.settings.order_books:
            return books
        return {book: self._order_book(book, metadata or BookMetadata()) for book, metadata in books.items()}

    @staticmethod
    def _order_book(book: CatalogBook, metadata: BookMetadata) -> BookMetadata:
        number = filename.get_volumes(book.name) or filename.get_chapters(book.name)
        if number is None:
            return metadata
        return metadata.model_copy(update={"number": number, "number_sort": number.start})
