"""
Pydantic models for provider-side metadata.

These models describe what a metadata provider returns for a series and its
books, independent of the catalog server they end up written to.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Provider(str, Enum):
    """Known metadata provider names."""

    ANILIST = "anilist"
    BOOK_WALKER = "bookwalker"
    COMIC_VINE = "comicvine"
    KODANSHA = "kodansha"
    MANGADEX = "mangadex"
    MANGA_UPDATES = "mangaupdates"
    MAL = "mal"
    NAUTILJON = "nautiljon"
    VIZ = "viz"
    YEN_PRESS = "yenpress"


class SeriesStatus(str, Enum):
    """Publication status of a series."""

    ENDED = "ENDED"
    ONGOING = "ONGOING"
    ABANDONED = "ABANDONED"
    HIATUS = "HIATUS"


class ReadingDirection(str, Enum):
    """Reading direction of a series."""

    LEFT_TO_RIGHT = "LEFT_TO_RIGHT"
    RIGHT_TO_LEFT = "RIGHT_TO_LEFT"
    VERTICAL = "VERTICAL"
    WEBTOON = "WEBTOON"


class TitleType(str, Enum):
    """Script/language family of a series title."""

    ROMAJI = "ROMAJI"
    LOCALIZED = "LOCALIZED"
    NATIVE = "NATIVE"


class NumberRange(BaseModel):
    """Inclusive numeric range, e.g. volumes 1-3 of an omnibus."""

    model_config = ConfigDict(frozen=True)

    start: float
    end: float

    @model_validator(mode="before")
    @classmethod
    def _default_end(cls, data):
        if isinstance(data, dict) and data.get("end") is None:
            data = {**data, "end": data.get("start")}
        return data

    @model_validator(mode="after")
    def _check_order(self) -> "NumberRange":
        if self.end < self.start:
            raise ValueError(f"range end {self.end} is lower than start {self.start}")
        return self

    @property
    def is_single(self) -> bool:
        """Whether the range covers exactly one ordinal."""
        return self.start == self.end

    def __str__(self) -> str:
        start = _format_number(self.start)
        if self.is_single:
            return start
        return f"{start}-{_format_number(self.end)}"


def _format_number(value: float) -> str:
    return str(int(value)) if value == int(value) else str(value)


class Author(BaseModel):
    """Author credit with a role (writer, penciller, ...)."""

    model_config = ConfigDict(frozen=True)

    name: str
    role: str = "writer"


class WebLink(BaseModel):
    """Labelled external link."""

    model_config = ConfigDict(frozen=True)

    label: str
    url: str


class SeriesTitle(BaseModel):
    """A series title with optional type and language."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TitleType | None = None
    language: str | None = None


class SeriesMetadata(BaseModel):
    """Series-level metadata as returned by a provider."""

    model_config = ConfigDict(frozen=True)

    status: SeriesStatus | None = None
    title: str | None = None
    titles: list[SeriesTitle] = Field(default_factory=list)
    summary: str | None = None
    publisher: str | None = None
    reading_direction: ReadingDirection | None = None
    age_rating: int | None = None
    language: str | None = None
    genres: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    total_book_count: int | None = None
    authors: list[Author] = Field(default_factory=list)
    links: list[WebLink] = Field(default_factory=list)

    @property
    def alternative_titles(self) -> list[str]:
        """Names of all known titles except the main one."""
        return [t.name for t in self.titles if t.name != self.title]


class BookMetadata(BaseModel):
    """Book-level metadata as returned by a provider."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    summary: str | None = None
    number: NumberRange | None = None
    number_sort: float | None = None
    release_date: str | None = None
    authors: list[Author] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    isbn: str | None = None
    links: list[WebLink] = Field(default_factory=list)


class SeriesBook(BaseModel):
    """A book as listed in a provider's series page."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    number: float | None = None
    edition: str | None = None
    type: str | None = None


class ProviderSeriesMetadata(BaseModel):
    """Series metadata plus the provider's book list for that series."""

    model_config = ConfigDict(frozen=True)

    id: str
    provider: Provider
    metadata: SeriesMetadata
    books: list[SeriesBook] = Field(default_factory=list)


class ProviderBookMetadata(BaseModel):
    """Metadata for a single provider book."""

    model_config = ConfigDict(frozen=True)

    id: str
    metadata: BookMetadata


class SeriesSearchResult(BaseModel):
    """A single series search hit."""

    model_config = ConfigDict(frozen=True)

    provider: Provider
    result_id: str
    title: str
    url: str | None = None
    image_url: str | None = None
