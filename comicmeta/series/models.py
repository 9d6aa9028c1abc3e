"""
Catalog-side models and the merged metadata container.

CatalogSeries and CatalogBook are what the catalog server (Komga) knows about a
series; SeriesAndBookMetadata is what providers contribute to it.
"""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict

from ..metadata.models import BookMetadata, SeriesBook, SeriesMetadata


class CatalogSeries(BaseModel):
    """A series in the catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    library_id: str
    name: str
    book_count: int = 0


class CatalogBook(BaseModel):
    """A book in the catalog. Hashable, used as a mapping key."""

    model_config = ConfigDict(frozen=True)

    id: str
    series_id: str
    library_id: str
    name: str
    number: float


# Local book -> matched provider book (None when unmatched)
MatchMap = dict[CatalogBook, SeriesBook | None]


@dataclass(frozen=True)
class SeriesAndBookMetadata:
    """Series metadata plus per-book metadata for every catalog book."""

    series_metadata: SeriesMetadata | None = None
    book_metadata: dict[CatalogBook, BookMetadata | None] = field(default_factory=dict)
