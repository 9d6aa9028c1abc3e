"""
Comic series metadata matching for Komga.

Matches Komga series with external metadata providers, merges what several
providers know about a series and its books, and writes the result back.
"""

from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor

from .config import Settings
from .komga import KomgaClient
from .logging import configure_logging
from .metadata.models import Provider
from .metadata.provider import MetadataProvider
from .series import (
    MetadataAggregator,
    MetadataPostProcessor,
    MetadataService,
    MetadataUpdateService,
)

__version__ = "0.1.0"


def create_metadata_service(
    settings: Settings,
    providers: Mapping[Provider, MetadataProvider],
    komga_client: KomgaClient | None = None,
    executor: ThreadPoolExecutor | None = None,
    setup_logging: bool = True,
) -> MetadataService:
    """
    Build a MetadataService from settings.

    Providers get the configured match threshold and search limit. The
    client and executor created here are owned by the service and released by
    its close(); ones passed in are left to the caller.

    Args:
        settings: Application settings
        providers: Configured providers, in priority order
        komga_client: Client to use instead of one built from ``settings.komga``
        executor: Executor to use instead of one sized by ``settings.metadata.max_workers``
        setup_logging: Configure package logging from ``settings.logging``

    Returns:
        Ready to use MetadataService

    Example:
        with create_metadata_service(get_settings(), providers) as service:
            service.match_library_metadata()
    """
    if setup_logging:
        configure_logging(
            level="debug" if settings.debug else settings.logging.level,
            file_path=settings.logging.file_path,
            use_rich=settings.logging.use_rich,
        )

    for provider in providers.values():
        provider.match_threshold = settings.metadata.match_threshold
        provider.search_limit = settings.metadata.search_limit

    owns_catalog = komga_client is None
    if komga_client is None:
        komga_client = KomgaClient(
            host=settings.komga.host,
            api_key=settings.komga.api_key,
            timeout=settings.komga.timeout,
            rate_limit_delay=settings.komga.rate_limit_delay,
            allow_insecure_http=settings.komga.allow_insecure_http,
            tls_ca_bundle=settings.komga.tls_ca_bundle,
            insecure_tls=settings.komga.insecure_tls,
        )

    owned_executor = None
    if executor is None:
        executor = owned_executor = ThreadPoolExecutor(
            max_workers=settings.metadata.max_workers, thread_name_prefix="aggregation"
        )

    update_service = MetadataUpdateService(komga_client, MetadataPostProcessor(settings.post_processing))
    return MetadataService(
        catalog=komga_client,
        providers=providers,
        aggregator=MetadataAggregator(komga_client, executor),
        update_service=update_service,
        aggregate=settings.metadata.aggregate,
        library_id=settings.komga.library_id,
        owned_executor=owned_executor,
        owns_catalog=owns_catalog,
    )


__all__ = ["Settings", "create_metadata_service", "__version__"]
