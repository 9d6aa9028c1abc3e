"""
Field-level merging of metadata from two providers.

The first argument always takes precedence: its non-empty values are kept and
the second record only fills gaps.
"""

from collections.abc import Hashable, Iterable, Mapping
from typing import Callable, TypeVar

from .models import BookMetadata, SeriesMetadata, SeriesStatus

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


def _first(original, new):
    return original if original is not None else new


def _first_text(original: str | None, new: str | None) -> str | None:
    if original and original.strip():
        return original
    return new


def _first_list(original: list[T], new: list[T]) -> list[T]:
    return list(original) if original else list(new)


def _distinct(items: Iterable[T], key: Callable[[T], Hashable]) -> list[T]:
    seen: dict[Hashable, T] = {}
    for item in items:
        seen.setdefault(key(item), item)
    return list(seen.values())


def _merge_status(original: SeriesStatus | None, new: SeriesStatus | None) -> SeriesStatus | None:
    # ONGOING gives way to any status from the new record
    if new is not None and (original is None or original == SeriesStatus.ONGOING):
        return new
    return original


def merge_series_metadata(original: SeriesMetadata, new: SeriesMetadata) -> SeriesMetadata:
    """
    Merge two series records, keeping ``original`` values where present.

    Titles and links are unioned (original first).
    """
    return SeriesMetadata(
        status=_merge_status(original.status, new.status),
        title=_first_text(original.title, new.title),
        titles=_distinct([*original.titles, *new.titles], key=lambda t: t.name),
        summary=_first_text(original.summary, new.summary),
        publisher=_first_text(original.publisher, new.publisher),
        reading_direction=_first(original.reading_direction, new.reading_direction),
        age_rating=_first(original.age_rating, new.age_rating),
        language=_first_text(original.language, new.language),
        genres=_first_list(original.genres, new.genres),
        tags=_first_list(original.tags, new.tags),
        total_book_count=_first(original.total_book_count, new.total_book_count),
        authors=_first_list(original.authors, new.authors),
        links=_distinct([*original.links, *new.links], key=lambda link: link.url),
    )


def merge_single_book_metadata(original: BookMetadata, new: BookMetadata) -> BookMetadata:
    """Merge two records describing the same book."""
    return BookMetadata(
        title=_first_text(original.title, new.title),
        summary=_first_text(original.summary, new.summary),
        number=_first(original.number, new.number),
        number_sort=_first(original.number_sort, new.number_sort),
        release_date=_first_text(original.release_date, new.release_date),
        authors=_first_list(original.authors, new.authors),
        tags=_first_list(original.tags, new.tags),
        isbn=_first_text(original.isbn, new.isbn),
        links=_distinct([*original.links, *new.links], key=lambda link: link.url),
    )


def merge_book_metadata(
    original: Mapping[K, BookMetadata | None],
    new: Mapping[K, BookMetadata | None],
) -> dict[K, BookMetadata | None]:
    """
    Merge per-book metadata keyed by book id.

    The result has exactly the keys of ``original``. A key missing from ``new``
    (or mapped to None there) keeps the original value; an original None is
    filled from ``new``.
    """
    merged: dict[K, BookMetadata | None] = {}
    for book_id, original_metadata in original.items():
        new_metadata = new.get(book_id)
        if original_metadata is not None and new_metadata is not None:
            merged[book_id] = merge_single_book_metadata(original_metadata, new_metadata)
        else:
            merged[book_id] = original_metadata if original_metadata is not None else new_metadata
    return merged
