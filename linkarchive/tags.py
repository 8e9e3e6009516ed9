"""Tag normalization."""

import logging
import re
from typing import Iterable, List

logger = logging.getLogger(__name__)

MAX_TAGS = 10
# Longer results are run-together model output, not tags (tags.name is VARCHAR(100))
MAX_TAG_LENGTH = 50

_INVALID_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def normalize_tag(tag: str) -> str:
    """Lowercase, keep [a-z0-9 -], join words with single hyphens."""
    tag = str(tag).lower().strip()
    tag = _INVALID_CHARS.sub("", tag)
    tag = _WHITESPACE.sub("-", tag.strip())
    tag = _HYPHENS.sub("-", tag)
    return tag.strip("-")


def sanitize_tags(tags: Iterable[str], max_tags: int = MAX_TAGS) -> List[str]:
    """
    Normalize, dedupe and cap a list of free-text tags.

    Order is preserved; the first occurrence of a duplicate wins. Tags that
    normalize to an empty string or to more than MAX_TAG_LENGTH characters
    are dropped.
    """
    result: List[str] = []
    seen = set()

    for tag in tags:
        if tag is None:
            continue
        normalized = normalize_tag(tag)
        if not normalized or normalized in seen:
            continue
        if len(normalized) > MAX_TAG_LENGTH:
            logger.warning(f"Dropping over-long tag ({len(normalized)} chars): {normalized[:40]}...")
            continue
        seen.add(normalized)
        result.append(normalized)

    return result[:max_tags]
