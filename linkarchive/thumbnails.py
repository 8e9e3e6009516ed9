"""Thumbnail selection heuristics for scraped HTML.

When a page has no Open Graph / Twitter card image, the best candidate is
picked from its ``<img>`` tags by an additive score:

    +10  width or height attribute present
    +50  declared width or height >= 200px (+20 more if >= 400px)
     +2  no dimensions at all (weak signal)
    +30  class looks like a featured/hero image
     +5  non-empty alt text
    +15  image follows an opening <article> or <main>

Images with declared dimensions all below 200px are dropped, as are icons,
logos, tracking pixels and anything nested in header/footer/nav/aside/menu.
Everything here works on the raw HTML string so it can be tested offline.
"""

import base64
import html as html_lib
import logging
import re
from bisect import bisect_right
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import urljoin

logger = logging.getLogger(__name__)

MIN_DIMENSION = 200
LARGE_DIMENSION = 400
MIN_ACCEPTED_SCORE = 10

NON_CONTENT_ELEMENTS = ("header", "footer", "nav", "aside", "menu")
CONTENT_ELEMENTS = ("article", "main")

_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_IMG_TAG = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
_ATTRIBUTE = re.compile(
    r"""([a-zA-Z_:][-a-zA-Z0-9_:.]*)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))"""
)
_LEADING_NUMBER = re.compile(r"^\s*(\d+)")

_EXCLUDED_SOURCE = re.compile(
    r"icon|logo|avatar|badge|sprite|pixel|tracking|spacer|1x1|emoji|gravatar"
    r"|banner|sidebar|widget|advert|doubleclick"
    r"|\.svg(?:$|[?#])"
    r"|[/_.-]ads?(?:[/_.-]|$)",
    re.IGNORECASE,
)
_SEMANTIC_CLASS = re.compile(
    r"featured|hero|main|cover|thumbnail|post-image|article-image",
    re.IGNORECASE,
)

# Lazy-loading attributes checked after src
_SOURCE_ATTRIBUTES = ("src", "data-src", "data-lazy-src", "data-original")


@dataclass
class ImageCandidate:
    """A scored <img> tag."""
    src: str
    score: int
    width: Optional[int]
    height: Optional[int]
    position: int


def _parse_attributes(tag: str) -> Dict[str, str]:
    attributes = {}
    for match in _ATTRIBUTE.finditer(tag):
        name = match.group(1).lower()
        value = next((g for g in match.groups()[1:] if g is not None), "")
        attributes.setdefault(name, html_lib.unescape(value))
    return attributes


def _parse_dimension(value: Optional[str]) -> Optional[int]:
    """Pixel value of a width/height attribute; None for missing or relative."""
    if value is None or "%" in value:
        return None
    match = _LEADING_NUMBER.match(value)
    return int(match.group(1)) if match else None


def _open_tag(name: str) -> re.Pattern:
    return re.compile(rf"<{name}(?=[\s>/])", re.IGNORECASE)


def _close_tag(name: str) -> re.Pattern:
    return re.compile(rf"</{name}\s*>", re.IGNORECASE)


_OPEN_TAGS = {name: _open_tag(name) for name in NON_CONTENT_ELEMENTS + CONTENT_ELEMENTS}
_CLOSE_TAGS = {name: _close_tag(name) for name in NON_CONTENT_ELEMENTS}


class TagOffsets:
    """
    End offsets of structural open/close tags, scanned once per document.

    A tag precedes a position when it ends at or before it.
    """

    def __init__(self, html: str):
        self.opened = {
            name: [m.end() for m in pattern.finditer(html)] for name, pattern in _OPEN_TAGS.items()
        }
        self.closed = {
            name: [m.end() for m in pattern.finditer(html)] for name, pattern in _CLOSE_TAGS.items()
        }

    def count_open(self, name: str, position: int) -> int:
        return bisect_right(self.opened[name], position)

    def count_closed(self, name: str, position: int) -> int:
        return bisect_right(self.closed[name], position)


def is_in_non_content_region(offsets: TagOffsets, position: int) -> bool:
    """True if more header/footer/nav/aside/menu tags are open than closed before position."""
    return any(
        offsets.count_open(name, position) > offsets.count_closed(name, position)
        for name in NON_CONTENT_ELEMENTS
    )


def is_after_content_opening(offsets: TagOffsets, position: int) -> bool:
    """True if an <article> or <main> opening tag precedes position."""
    return any(offsets.count_open(name, position) > 0 for name in CONTENT_ELEMENTS)


def is_excluded_source(src: str) -> bool:
    return bool(_EXCLUDED_SOURCE.search(src))


def score_image(tag: str, offsets: TagOffsets, position: int) -> Optional[ImageCandidate]:
    """
    Score one <img> tag found at `position` in a document with the given tag offsets.

    Returns None when the image is not a viable thumbnail at all.
    """
    attributes = _parse_attributes(tag)

    src = next(
        (attributes[name].strip() for name in _SOURCE_ATTRIBUTES if attributes.get(name, "").strip()),
        "",
    )
    if not src or src.startswith("data:"):
        return None

    if is_excluded_source(src):
        return None

    if is_in_non_content_region(offsets, position):
        return None

    width = _parse_dimension(attributes.get("width"))
    height = _parse_dimension(attributes.get("height"))
    has_dimensions = "width" in attributes or "height" in attributes

    score = 0
    if has_dimensions:
        score += 10
        known = [d for d in (width, height) if d is not None]
        if known:
            largest = max(known)
            if largest < MIN_DIMENSION:
                return None
            score += 50
            if largest >= LARGE_DIMENSION:
                score += 20
    else:
        score += 2

    if _SEMANTIC_CLASS.search(attributes.get("class", "")):
        score += 30

    if attributes.get("alt", "").strip():
        score += 5

    if is_after_content_opening(offsets, position):
        score += 15

    return ImageCandidate(
        src=src, score=score, width=width, height=height, position=position
    )


def collect_candidates(html: str) -> List[ImageCandidate]:
    """Score every viable <img> in document order (comments stripped)."""
    html = _COMMENT.sub("", html)
    offsets = TagOffsets(html)
    candidates = []
    for match in _IMG_TAG.finditer(html):
        candidate = score_image(match.group(0), offsets, match.start())
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def select_thumbnail(html: str, base_url: str) -> Optional[str]:
    """
    Pick the best thumbnail from the page's <img> tags.

    Returns an absolute URL, or None when no candidate is convincing enough.
    """
    best: Optional[ImageCandidate] = None
    for candidate in collect_candidates(html):
        # strict > keeps the first-seen candidate on ties
        if best is None or candidate.score > best.score:
            best = candidate

    if best is None:
        return None

    has_both_dimensions = bool(best.width and best.height)
    if best.score < MIN_ACCEPTED_SCORE and not has_both_dimensions:
        logger.debug(f"Best image candidate too weak (score {best.score}): {best.src}")
        return None

    logger.debug(f"Selected thumbnail (score {best.score}): {best.src}")
    return urljoin(base_url, best.src)


def _title_hash(title: str) -> int:
    """Signed 32-bit ``hash * 31 + char`` string hash."""
    value = 0
    for char in title:
        value = (value << 5) - value + ord(char)
        value = (value + 2**31) % 2**32 - 2**31
    return value


def generate_placeholder(title: str, width: int = 1200, height: int = 630) -> str:
    """
    Build a deterministic gradient SVG with the title's initial, as a data URI.

    Same title always yields the same image.
    """
    hue = abs(_title_hash(title)) % 360
    second_hue = (hue + 60) % 360

    stripped = (title or "").strip()
    letter = html_lib.escape(stripped[0].upper()) if stripped else "?"
    font_size = int(min(width, height) * 0.4)

    svg = (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">'
        '<defs><linearGradient id="g" x1="0%" y1="0%" x2="100%" y2="100%">'
        f'<stop offset="0%" stop-color="hsl({hue}, 70%, 55%)"/>'
        f'<stop offset="100%" stop-color="hsl({second_hue}, 70%, 45%)"/>'
        "</linearGradient></defs>"
        '<rect width="100%" height="100%" fill="url(#g)"/>'
        '<text x="50%" y="50%" dominant-baseline="central" text-anchor="middle" '
        f'font-family="sans-serif" font-size="{font_size}" font-weight="bold" '
        f'fill="#ffffff">{letter}</text>'
        "</svg>"
    )
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"
