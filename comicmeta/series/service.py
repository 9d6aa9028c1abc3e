"""
Series metadata matching service.

Matches catalog series with metadata providers, optionally aggregates the
other providers, and writes the result back to the catalog.
"""

import logging
from collections.abc import Mapping
from concurrent.futures import Executor
from typing import TYPE_CHECKING

from ..logging import log_error, log_success
from ..metadata.models import Provider, SeriesSearchResult
from ..metadata.provider import MetadataProvider, UnknownProviderError
from .aggregator import MetadataAggregator
from .models import CatalogSeries, SeriesAndBookMetadata
from .update import MetadataUpdateService

if TYPE_CHECKING:
    from ..komga import KomgaClient

logger = logging.getLogger(__name__)


class MetadataService:
    """
    Entry point for series metadata operations.

    Providers are tried in the order of the ``providers`` mapping: the first
    one matching a series is the primary match, and during aggregation earlier
    providers win when two of them have a value for the same field.

    Example:
        service = MetadataService(komga_client, providers, aggregator, updater, aggregate=True)
        service.match_series_metadata(series_id)
    """

    def __init__(
        self,
        catalog: "KomgaClient",
        providers: Mapping[Provider, MetadataProvider],
        aggregator: MetadataAggregator,
        update_service: MetadataUpdateService,
        aggregate: bool = False,
        library_id: str | None = None,
        owned_executor: Executor | None = None,
        owns_catalog: bool = False,
    ):
        """
        Initialize the service.

        Args:
            catalog: Catalog client
            providers: Configured providers, in priority order
            aggregator: Aggregator sharing the catalog client and executor
            update_service: Write-back service
            aggregate: Merge metadata from every provider instead of only the primary one
            library_id: Library scanned by match_library_metadata() when none is given
            owned_executor: Executor shut down by close()
            owns_catalog: Close the catalog client in close()
        """
        self._catalog = catalog
        self._providers = dict(providers)
        self._aggregator = aggregator
        self._update_service = update_service
        self.aggregate = aggregate
        self.library_id = library_id
        self._owned_executor = owned_executor
        self._owns_catalog = owns_catalog

    def close(self) -> None:
        """Shut down the executor and catalog client owned by this service."""
        if self._owned_executor is not None:
            self._owned_executor.shutdown(wait=True)
        if self._owns_catalog:
            self._catalog.close()

    def __enter__(self) -> "MetadataService":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def available_providers(self) -> set[Provider]:
        """Names of the configured providers."""
        return set(self._providers)

    def search_series_metadata(self, series_name: str) -> list[SeriesSearchResult]:
        """
        Search every provider for a series name.

        Args:
            series_name: Name to search

        Returns:
            Results of all providers, grouped by provider in priority order
        """
        results: list[SeriesSearchResult] = []
        for provider in self._providers.values():
            results.extend(provider.search_series(series_name))
        return results

    def _other_providers(self, provider: MetadataProvider) -> list[MetadataProvider]:
        return [p for p in self._providers.values() if p is not provider]

    def _finish(
        self,
        series: CatalogSeries,
        provider: MetadataProvider,
        metadata: SeriesAndBookMetadata,
        edition: str | None,
    ) -> None:
        if self.aggregate:
            metadata = self._aggregator.aggregate(series, metadata, self._other_providers(provider), edition)
        self._update_service.update_metadata(series, metadata)

    def set_series_metadata(
        self,
        series_id: str,
        provider_name: Provider,
        provider_series_id: str,
        edition: str | None = None,
    ) -> None:
        """
        Apply metadata of a specific provider series to a catalog series.

        Args:
            series_id: Catalog series ID
            provider_name: Provider to fetch from
            provider_series_id: Series ID on that provider
            edition: Optional edition hint, e.g. "Deluxe Edition"

        Raises:
            UnknownProviderError: If the provider is not configured
        """
        provider = self._providers.get(provider_name)
        if provider is None:
            raise UnknownProviderError(f"Provider not configured: {provider_name}", provider=provider_name)

        series = self._catalog.get_series(series_id)
        series_metadata = provider.get_series_metadata(provider_series_id)
        metadata = self._aggregator.resolve(series.id, provider, series_metadata, edition)

        self._finish(series, provider, metadata, edition)
        log_success(
            "Updated metadata of series '%s' from %s", series.name, provider.provider_name().value, logger=logger
        )

    def match_series_metadata(self, series_id: str) -> bool:
        """
        Match a catalog series by name and write its metadata.

        Args:
            series_id: Catalog series ID

        Returns:
            True if a provider matched the series
        """
        series = self._catalog.get_series(series_id)
        logger.info("Attempting to match series '%s' (%s)", series.name, series.id)

        for provider in self._providers.values():
            series_metadata = provider.match_series_metadata(series.name)
            if series_metadata is None:
                continue

            logger.info(
                "Found match: '%s' from %s (%s)",
                series_metadata.metadata.title,
                provider.provider_name().value,
                series_metadata.id,
            )
            metadata = self._aggregator.resolve(series.id, provider, series_metadata)
            self._finish(series, provider, metadata, None)
            log_success("Finished metadata update of series '%s' (%s)", series.name, series.id, logger=logger)
            return True

        logger.info("No match found for series '%s' (%s)", series.name, series.id)
        return False

    def match_library_metadata(self, library_id: str | None = None) -> int:
        """
        Match every series of a library.

        A failing series is logged and skipped; the scan continues.

        Args:
            library_id: Catalog library ID (defaults to the configured library)

        Returns:
            Number of series that failed

        Raises:
            ValueError: If no library ID is given or configured
        """
        library_id = library_id or self.library_id
        if not library_id:
            raise ValueError("No library ID given and none configured (KOMGA_LIBRARY_ID)")

        error_count = 0
        for series in self._catalog.get_library_series(library_id):
            try:
                self.match_series_metadata(series.id)
            except Exception as e:
                log_error("Failed to match series '%s': %s", series.name, e, logger=logger, exc_info=True)
                error_count += 1

        logger.info("Finished library scan. Encountered %d errors", error_count)
        return error_count
