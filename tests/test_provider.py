"""
Tests for the metadata provider contract.
Covers exceptions, name normalization and match_series_metadata.
"""

from unittest.mock import MagicMock

from comicmeta.metadata.models import Provider, SeriesSearchResult
from comicmeta.metadata.provider import (
    ProviderConnectionError,
    ProviderError,
    ProviderResponseError,
    UnknownProviderError,
    name_similarity,
    normalize_series_name,
)
from tests.factories import FakeProvider, make_provider_series


# -----------------------------------------------------------------------------
# Exception Tests
# -----------------------------------------------------------------------------
class TestExceptions:
    def test_provider_error_with_response(self):
        err = ProviderError("Test error", provider=Provider.MAL, response={"error": "fail"})
        assert str(err) == "Test error"
        assert err.provider == Provider.MAL
        assert err.response == {"error": "fail"}

    def test_provider_error_without_response(self):
        err = ProviderError("Test error")
        assert err.provider is None
        assert err.response is None

    def test_subclasses_inherit(self):
        for cls in (ProviderConnectionError, ProviderResponseError, UnknownProviderError):
            assert isinstance(cls("fail"), ProviderError)


class TestNormalizeSeriesName:
    """Test normalize_series_name function."""

    def test_lowercase_and_strip(self):
        assert normalize_series_name("  Berserk ") == "berserk"

    def test_leading_article_removed(self):
        assert normalize_series_name("The Promised Neverland") == "promised neverland"

    def test_punctuation_becomes_space(self):
        assert normalize_series_name("Re:Zero") == normalize_series_name("Re Zero")

    def test_suffix_removed(self):
        assert normalize_series_name("Berserk Manga") == "berserk"


class TestNameSimilarity:
    """Test name_similarity function."""

    def test_identical_after_normalization(self):
        assert name_similarity("The Foo", "foo") == 100

    def test_different_names(self):
        assert name_similarity("Foo", "Bar") < 50


class TestMatchSeriesMetadata:
    """Test MetadataProvider.match_series_metadata."""

    def test_exact_match_fetched(self):
        provider = FakeProvider(Provider.MAL, series={"Foo": make_provider_series(Provider.MAL, "Foo")})

        result = provider.match_series_metadata("Foo")

        assert result is not None
        assert result.id == "mal-Foo"
        assert provider.searched == ["Foo"]

    def test_below_threshold_returns_none(self):
        provider = FakeProvider(Provider.MAL, series={"Bar": make_provider_series(Provider.MAL, "Bar")})
        provider.get_series_metadata = MagicMock()

        assert provider.match_series_metadata("Foo") is None
        provider.get_series_metadata.assert_not_called()

    def test_first_result_above_threshold_wins(self):
        """Results are checked in the order the provider returns them."""
        provider = FakeProvider(
            Provider.MAL,
            series={
                "Bar": make_provider_series(Provider.MAL, "Bar"),
                "The Foo": make_provider_series(Provider.MAL, "The Foo"),
                "Foo": make_provider_series(Provider.MAL, "Foo"),
            },
        )

        assert provider.match_series_metadata("Foo").id == "mal-The Foo"

    def test_search_limit_applied(self):
        """Results beyond search_limit are not considered."""
        provider = FakeProvider(
            Provider.MAL,
            series={
                "Bar": make_provider_series(Provider.MAL, "Bar"),
                "Foo": make_provider_series(Provider.MAL, "Foo"),
            },
        )
        provider.search_limit = 1

        assert provider.match_series_metadata("Foo") is None

    def test_custom_threshold(self):
        provider = FakeProvider(Provider.MAL)
        provider.match_threshold = 50.0
        provider.search_series = MagicMock(
            return_value=[SeriesSearchResult(provider=Provider.MAL, result_id="x", title="Fooo")]
        )
        provider.get_series_metadata = MagicMock(return_value="fetched")

        assert provider.match_series_metadata("Foo") == "fetched"
        provider.get_series_metadata.assert_called_once_with("x")

    def test_provider_name_and_repr(self):
        provider = FakeProvider(Provider.ANILIST)
        assert provider.provider_name() == Provider.ANILIST
        assert repr(provider) == "FakeProvider(anilist)"
