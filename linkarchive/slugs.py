"""Slug generation and week-bucket dates."""

import re
import unicodedata
from datetime import date, timedelta
from typing import Optional, Set

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# articles.slug is VARCHAR(255); the rest is headroom for ensure_unique suffixes
MAX_SLUG_LENGTH = 200

# Characters removed outright (not turned into separators)
_REMOVE_CHARS = re.compile(r"[*+~.()'\"!:@]")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# Letters that NFKD does not decompose into an ASCII base
_TRANSLITERATIONS = {
    "ł": "l", "Ł": "L",
    "ø": "o", "Ø": "O",
    "đ": "d", "Đ": "D",
    "ß": "ss",
    "æ": "ae", "Æ": "AE",
    "œ": "oe", "Œ": "OE",
    "þ": "th", "Þ": "TH",
    "&": " and ",
}


def _to_ascii(text: str) -> str:
    for char, replacement in _TRANSLITERATIONS.items():
        text = text.replace(char, replacement)
    normalized = unicodedata.normalize("NFKD", text)
    return normalized.encode("ascii", "ignore").decode("ascii")


def slugify(title: str) -> str:
    """
    Turn a title into a URL-safe slug.

    Long slugs are cut to MAX_SLUG_LENGTH at the last word boundary.
    A slug that would look exactly like a week-bucket date (YYYY-MM-DD)
    gets an ``-article`` suffix so it cannot shadow a date route.
    """
    slug = _to_ascii(title).lower()
    slug = _REMOVE_CHARS.sub("", slug)
    slug = _NON_ALNUM.sub("-", slug).strip("-")

    if len(slug) > MAX_SLUG_LENGTH:
        head = slug[: MAX_SLUG_LENGTH + 1]
        boundary = head.rfind("-")
        slug = head[:boundary] if boundary > 0 else slug[:MAX_SLUG_LENGTH]
        slug = slug.strip("-")

    if not slug:
        slug = "untitled"

    if DATE_PATTERN.match(slug):
        slug = f"{slug}-article"

    return slug


def ensure_unique(slug: str, existing_slugs: Set[str]) -> str:
    """Append -1, -2, ... until the slug is not in existing_slugs."""
    unique_slug = slug
    counter = 1

    while unique_slug in existing_slugs:
        unique_slug = f"{slug}-{counter}"
        counter += 1

    return unique_slug


def week_start_date(today: Optional[date] = None) -> str:
    """Monday of the week containing `today` (default: now), as YYYY-MM-DD."""
    today = today or date.today()
    monday = today - timedelta(days=today.weekday())
    return monday.isoformat()


def is_date_format(value: str) -> bool:
    """Check if a string matches YYYY-MM-DD."""
    return bool(DATE_PATTERN.match(value))


def is_valid_monday(value: str) -> bool:
    """Check that a YYYY-MM-DD string is a real date falling on a Monday."""
    if not is_date_format(value):
        return False
    try:
        return date.fromisoformat(value).weekday() == 0
    except ValueError:
        return False
