"""
Book filename parsing.

Extracts volume/chapter ranges and bracketed annotations from book file names
such as ``Foo v01-03 (Deluxe Edition) [Digital].cbz``.
"""

import re

from .models import NumberRange

_NUMBER = r"\d+(?:\.\d+)?"
# Not preceded by a letter, so "Part 2" or "Lost 3" are not read as t/v markers
_NOT_AFTER_LETTER = r"(?<![^\W\d_])"

VOLUME_PATTERNS = [
    re.compile(
        rf"{_NOT_AFTER_LETTER}(?:volume|vol|tome|v|t)\.?\s?(?P<start>{_NUMBER})(?:\s?-\s?(?P<end>{_NUMBER}))?",
        re.IGNORECASE,
    ),
    re.compile(rf"(?P<start>{_NUMBER})(?:\s?-\s?(?P<end>{_NUMBER}))?\s?巻"),
]

CHAPTER_PATTERNS = [
    re.compile(
        rf"{_NOT_AFTER_LETTER}(?:chapter|ch|c)\.?\s?(?P<start>{_NUMBER})(?:\s?-\s?(?P<end>{_NUMBER}))?",
        re.IGNORECASE,
    ),
    re.compile(rf"(?P<start>{_NUMBER})(?:\s?-\s?(?P<end>{_NUMBER}))?\s?話"),
]

EXTRA_DATA_PATTERN = re.compile(r"\[(?P<square>[^\]]*)\]|\((?P<round>[^)]*)\)")


def _match_range(name: str, patterns: list[re.Pattern[str]]) -> NumberRange | None:
    for pattern in patterns:
        match = pattern.search(name)
        if not match:
            continue
        start = float(match.group("start"))
        end = float(match.group("end")) if match.group("end") else start
        if end < start:
            continue
        return NumberRange(start=start, end=end)
    return None


def get_volumes(name: str) -> NumberRange | None:
    """
    Parse the volume range embedded in a book name.

    Args:
        name: Book file name (with or without extension)

    Returns:
        NumberRange of the volume(s), or None if no volume marker is found
    """
    return _match_range(name, VOLUME_PATTERNS)


def get_chapters(name: str) -> NumberRange | None:
    """Parse the chapter range embedded in a book name."""
    return _match_range(name, CHAPTER_PATTERNS)


def get_extra_data(name: str) -> list[str]:
    """
    Get bracketed and parenthesised annotations from a book name.

    ``Foo v01 (Deluxe Edition) [Digital]`` -> ``["Deluxe Edition", "Digital"]``.
    Text is returned verbatim apart from surrounding whitespace.
    """
    tokens = []
    for match in EXTRA_DATA_PATTERN.finditer(name):
        token = (match.group("square") or match.group("round") or "").strip()
        if token:
            tokens.append(token)
    return tokens
