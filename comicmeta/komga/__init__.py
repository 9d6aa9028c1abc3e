"""
Komga API client module.
"""

from .client import KomgaAuthError, KomgaClient, KomgaConnectionError, KomgaError, KomgaNotFoundError
from .models import KomgaAuthor, KomgaBook, KomgaBookMetadata, KomgaSeries, KomgaSeriesMetadata

__all__ = [
    # Client
    "KomgaClient",
    # Exceptions
    "KomgaError",
    "KomgaAuthError",
    "KomgaConnectionError",
    "KomgaNotFoundError",
    # Models
    "KomgaAuthor",
    "KomgaBook",
    "KomgaBookMetadata",
    "KomgaSeries",
    "KomgaSeriesMetadata",
]
