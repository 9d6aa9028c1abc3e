"""
Metadata provider contract.

Concrete providers (AniList, MangaUpdates, ...) subclass MetadataProvider and
implement the search and fetch calls against their own API. Series matching by
name is shared: rapidfuzz scores each search result against the requested name.
"""

import logging
import re
from abc import ABC, abstractmethod

from rapidfuzz import fuzz

from .models import (
    Provider,
    ProviderBookMetadata,
    ProviderSeriesMetadata,
    SeriesSearchResult,
)

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Base exception for metadata provider errors."""

    def __init__(self, message: str, provider: Provider | None = None, response: dict | None = None):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.response = response

    def __str__(self) -> str:
        return self.message


class ProviderConnectionError(ProviderError):
    """Provider unreachable or timed out."""


class ProviderResponseError(ProviderError):
    """Provider returned a malformed or unexpected response."""


class UnknownProviderError(ProviderError):
    """Requested provider is not configured."""


def normalize_series_name(name: str) -> str:
    """Normalize a series name for fuzzy comparison."""
    name = name.lower().strip()
    if name.startswith("the "):
        name = name[4:]
    # Punctuation differs wildly between providers ("Re:Zero" vs "Re Zero")
    name = re.sub(r"[^\w\s]", " ", name)
    name = re.sub(r"\s+", " ", name)
    for suffix in [" series", " manga", " comic", " comics"]:
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    return name.strip()


def name_similarity(a: str, b: str) -> float:
    """Similarity score (0-100) between two series names."""
    return fuzz.ratio(normalize_series_name(a), normalize_series_name(b))


class MetadataProvider(ABC):
    """
    Base class for metadata providers.

    Subclasses set ``provider`` and implement the three API calls. They may
    override match_series_metadata() when the provider has a better way to
    resolve a name than search + similarity.

    Example:
        class AniListProvider(MetadataProvider):
            provider = Provider.ANILIST
            ...

        match = AniListProvider().match_series_metadata("Berserk")
    """

    provider: Provider

    def __init__(self, match_threshold: float = 90.0, search_limit: int = 5):
        """
        Initialize the provider.

        Args:
            match_threshold: Minimum name similarity (0-100) for a search result to match
            search_limit: Number of search results considered when matching
        """
        self.match_threshold = match_threshold
        self.search_limit = search_limit

    def provider_name(self) -> Provider:
        """Stable provider name used for logging and selection."""
        return self.provider

    @abstractmethod
    def search_series(self, series_name: str, limit: int = 5) -> list[SeriesSearchResult]:
        """Search the provider for series matching a name."""

    @abstractmethod
    def get_series_metadata(self, series_id: str) -> ProviderSeriesMetadata:
        """Fetch series metadata and the provider's book list for a series."""

    @abstractmethod
    def get_book_metadata(self, series_id: str, book_id: str) -> ProviderBookMetadata:
        """Fetch metadata for one provider book."""

    def match_series_metadata(self, series_name: str) -> ProviderSeriesMetadata | None:
        """
        Find the single best series for a name.

        Search results are checked in the order the provider returns them; the
        first one whose title scores at least ``match_threshold`` is fetched.

        Args:
            series_name: Series name to resolve

        Returns:
            ProviderSeriesMetadata for the match, or None if nothing is close enough
        """
        results = self.search_series(series_name, limit=self.search_limit)
        for result in results[: self.search_limit]:
            score = name_similarity(series_name, result.title)
            if score >= self.match_threshold:
                logger.debug(
                    "(%s) '%s' matched search result '%s' (score %.1f)",
                    self.provider.value,
                    series_name,
                    result.title,
                    score,
                )
                return self.get_series_metadata(result.result_id)

        logger.debug("(%s) no search result for '%s' above threshold", self.provider.value, series_name)
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.provider.value})"
