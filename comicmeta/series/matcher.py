"""
Book matching between catalog books and a provider's book list.

Providers rarely expose anything that cross-references local files, so books
are matched on volume number plus edition, both read from the file name.
"""

import logging
import re
from collections.abc import Iterable

from ..metadata import filename
from ..metadata.models import SeriesBook
from .models import CatalogBook, MatchMap

logger = logging.getLogger(__name__)

_EDITION_WORD = re.compile(r"\s?[EÉ]dition\s?", re.IGNORECASE)


def edition_key(edition: str) -> str:
    """
    Normalize an edition label for grouping.

    ``"Deluxe Edition"``, ``"Édition Deluxe"`` and ``"deluxe"`` all give ``"deluxe"``.
    """
    return _EDITION_WORD.sub("", edition).strip().lower()


def _group_by_edition(provider_books: Iterable[SeriesBook]) -> dict[str | None, list[SeriesBook]]:
    editions: dict[str | None, list[SeriesBook]] = {}
    for book in provider_books:
        key = edition_key(book.edition) if book.edition else None
        editions.setdefault(key, []).append(book)
    return editions


def _first_with_number(candidates: list[SeriesBook], number: float) -> SeriesBook | None:
    return next((b for b in candidates if b.number is not None and b.number == number), None)


def detect_edition(book: CatalogBook, known_editions: Iterable[str]) -> str | None:
    """Find the first known edition named in the book's bracketed file name annotations."""
    tokens = {edition_key(token) for token in filename.get_extra_data(book.name)}
    return next((edition for edition in known_editions if edition in tokens), None)


def associate_book_metadata(
    books: Iterable[CatalogBook],
    provider_books: Iterable[SeriesBook],
    edition: str | None = None,
) -> MatchMap:
    """
    Match catalog books to provider books.

    With an explicit ``edition`` every book is matched inside that edition,
    using its file name volume (or catalog number when the name has none).
    Without one, each book's edition is guessed from its file name annotations
    and books whose names carry no volume, or a multi-volume range, stay
    unmatched.

    Args:
        books: Catalog books of the series
        provider_books: Provider book list for the matched series
        edition: Optional edition hint, e.g. "Deluxe Edition"

    Returns:
        Mapping of every catalog book to its provider book, or None
    """
    editions = _group_by_edition(provider_books)
    if edition is not None:
        matches = _match_edition(books, editions.get(edition_key(edition), []))
    else:
        matches = _match_detected_editions(books, editions)

    logger.debug(
        "Matched %d/%d books (edition hint: %s)",
        sum(1 for m in matches.values() if m is not None),
        len(matches),
        edition,
    )
    return matches


def _match_edition(books: Iterable[CatalogBook], group: list[SeriesBook]) -> MatchMap:
    matches: MatchMap = {}
    for book in books:
        volumes = filename.get_volumes(book.name)
        number = volumes.start if volumes else book.number
        matches[book] = _first_with_number(group, number)
    return matches


def _match_detected_editions(books: Iterable[CatalogBook], editions: dict[str | None, list[SeriesBook]]) -> MatchMap:
    known_editions = [key for key in editions if key is not None]
    no_edition = editions.get(None, [])

    matches: MatchMap = {}
    for book in books:
        volumes = filename.get_volumes(book.name)
        if volumes is None or not volumes.is_single:
            matches[book] = None
            continue

        book_edition = detect_edition(book, known_editions)
        if book_edition is None:
            matches[book] = _first_with_number(no_edition, volumes.start)
        else:
            matches[book] = _first_with_number(editions[book_edition], volumes.start)
    return matches
