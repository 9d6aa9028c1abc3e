"""
Series matching and metadata aggregation module.

Matches catalog series and books with provider records, merges metadata from
several providers and writes it back to Komga.
"""

from .aggregator import MetadataAggregator, merge_metadata
from .matcher import associate_book_metadata, edition_key
from .models import CatalogBook, CatalogSeries, MatchMap, SeriesAndBookMetadata
from .postprocess import MetadataPostProcessor
from .service import MetadataService
from .update import MetadataUpdateService

__all__ = [
    # Models
    "CatalogBook",
    "CatalogSeries",
    "MatchMap",
    "SeriesAndBookMetadata",
    # Matching
    "associate_book_metadata",
    "edition_key",
    "merge_metadata",
    # Services
    "MetadataAggregator",
    "MetadataPostProcessor",
    "MetadataService",
    "MetadataUpdateService",
]
