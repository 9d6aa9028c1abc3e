"""
Provider metadata: models, provider contract, file name parsing and merging.
"""

from .models import (
    Author,
    BookMetadata,
    NumberRange,
    Provider,
    ProviderBookMetadata,
    ProviderSeriesMetadata,
    ReadingDirection,
    SeriesBook,
    SeriesMetadata,
    SeriesSearchResult,
    SeriesStatus,
    SeriesTitle,
    TitleType,
    WebLink,
)
from .provider import (
    MetadataProvider,
    ProviderConnectionError,
    ProviderError,
    ProviderResponseError,
    UnknownProviderError,
)

__all__ = [
    # Models
    "Author",
    "BookMetadata",
    "NumberRange",
    "Provider",
    "ProviderBookMetadata",
    "ProviderSeriesMetadata",
    "ReadingDirection",
    "SeriesBook",
    "SeriesMetadata",
    "SeriesSearchResult",
    "SeriesStatus",
    "SeriesTitle",
    "TitleType",
    "WebLink",
    # Providers
    "MetadataProvider",
    "ProviderError",
    "ProviderConnectionError",
    "ProviderResponseError",
    "UnknownProviderError",
]
