"""
Pydantic models for Komga API responses.
"""

from pydantic import BaseModel, Field

from ..series.models import CatalogBook, CatalogSeries


class KomgaAuthor(BaseModel):
    """Author credit as stored by Komga."""

    name: str
    role: str


class KomgaSeriesMetadata(BaseModel):
    """Series metadata block."""

    status: str | None = None
    title: str | None = None
    title_sort: str | None = Field(default=None, alias="titleSort")
    summary: str = ""
    reading_direction: str | None = Field(default=None, alias="readingDirection")
    publisher: str = ""
    age_rating: int | None = Field(default=None, alias="ageRating")
    language: str = ""
    genres: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    total_book_count: int | None = Field(default=None, alias="totalBookCount")

    model_config = {"extra": "ignore", "populate_by_name": True}


class KomgaSeries(BaseModel):
    """Komga series."""

    id: str
    library_id: str = Field(alias="libraryId")
    name: str
    url: str | None = None
    books_count: int = Field(default=0, alias="booksCount")
    metadata: KomgaSeriesMetadata = Field(default_factory=KomgaSeriesMetadata)

    model_config = {"extra": "ignore", "populate_by_name": True}

    def to_catalog(self) -> CatalogSeries:
        return CatalogSeries(id=self.id, library_id=self.library_id, name=self.name, book_count=self.books_count)


class KomgaBookMetadata(BaseModel):
    """Book metadata block."""

    title: str | None = None
    summary: str = ""
    number: str | None = None
    number_sort: float | None = Field(default=None, alias="numberSort")
    release_date: str | None = Field(default=None, alias="releaseDate")
    authors: list[KomgaAuthor] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    isbn: str = ""

    model_config = {"extra": "ignore", "populate_by_name": True}


class KomgaBook(BaseModel):
    """Komga book."""

    id: str
    series_id: str = Field(alias="seriesId")
    library_id: str = Field(alias="libraryId")
    name: str
    url: str | None = None
    number: float = 0
    metadata: KomgaBookMetadata = Field(default_factory=KomgaBookMetadata)

    model_config = {"extra": "ignore", "populate_by_name": True}

    def to_catalog(self) -> CatalogBook:
        return CatalogBook(
            id=self.id,
            series_id=self.series_id,
            library_id=self.library_id,
            name=self.name,
            number=self.number,
        )


class SeriesPage(BaseModel):
    """Paged series listing."""

    content: list[KomgaSeries] = Field(default_factory=list)
    number: int = 0
    total_pages: int = Field(default=1, alias="totalPages")
    last: bool = True

    model_config = {"extra": "ignore", "populate_by_name": True}


class BookPage(BaseModel):
    """Paged book listing."""

    content: list[KomgaBook] = Field(default_factory=list)
    number: int = 0
    total_pages: int = Field(default=1, alias="totalPages")
    last: bool = True

    model_config = {"extra": "ignore", "populate_by_name": True}
