"""Web content scraper: rendered HTML -> Markdown + metadata."""

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from markdownify import ATX, MarkdownConverter

from linkarchive.errors import ExtractionError
from linkarchive.renderers import Renderer
from linkarchive.thumbnails import generate_placeholder, select_thumbnail

logger = logging.getLogger(__name__)

# Elements that never carry readable content
_NON_CONTENT_TAGS = ["script", "style", "noscript", "template", "iframe"]

_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")

_converter = MarkdownConverter(heading_style=ATX, bullets="-")


@dataclass
class ScrapedContent:
    """Scraped web page content."""
    title: str
    markdown: str
    thumbnail_url: Optional[str]
    description: Optional[str]
    url: str


def html_to_markdown(html: str) -> str:
    """Convert page HTML to Markdown (ATX headings, fenced code blocks)."""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(_NON_CONTENT_TAGS):
        tag.decompose()

    root = soup.body or soup
    markdown = _converter.convert_soup(root)
    return _EXCESS_BLANK_LINES.sub("\n\n", markdown).strip()


def title_from_url(url: str) -> str:
    """Hostname without a leading www., used when the page has no <title>."""
    hostname = urlparse(url).hostname or ""
    if hostname.startswith("www."):
        hostname = hostname[4:]
    return hostname or "Untitled"


def extract_title(soup: BeautifulSoup, url: str) -> str:
    title_tag = soup.find("title")
    if title_tag:
        title = title_tag.get_text(strip=True)
        if title:
            return title
    return title_from_url(url)


def _meta_content(soup: BeautifulSoup, *selectors: dict) -> Optional[str]:
    for attrs in selectors:
        tag = soup.find("meta", attrs=attrs)
        if tag and tag.get("content", "").strip():
            return tag["content"].strip()
    return None


def extract_meta_image(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    """Open Graph image, then Twitter card image, resolved against base_url."""
    image = _meta_content(
        soup,
        {"property": "og:image"},
        {"name": "og:image"},
        {"property": "og:image:url"},
    ) or _meta_content(
        soup,
        {"name": "twitter:image"},
        {"property": "twitter:image"},
        {"name": "twitter:image:src"},
    )
    return urljoin(base_url, image) if image else None


def extract_description(soup: BeautifulSoup) -> Optional[str]:
    return _meta_content(soup, {"name": "description"})


class WebScraper:
    """Web extraction strategy: one render call, then offline parsing."""

    def __init__(self, renderer: Renderer):
        self.renderer = renderer

    async def scrape(self, url: str) -> ScrapedContent:
        """
        Render a URL and extract title, Markdown, thumbnail and description.

        Raises:
            ExtractionError: renderer failed, or the page has no readable content
        """
        html = await self.renderer.render(url)
        if not html or not html.strip():
            raise ExtractionError("Renderer returned empty content")

        markdown = html_to_markdown(html)
        if not markdown:
            raise ExtractionError("No content extracted from URL")

        soup = BeautifulSoup(html, "lxml")
        title = extract_title(soup, url)

        thumbnail_url = extract_meta_image(soup, url)
        if not thumbnail_url:
            thumbnail_url = select_thumbnail(html, url)
        if not thumbnail_url:
            logger.info(f"No usable image on {url}, generating placeholder")
            thumbnail_url = generate_placeholder(title)

        return ScrapedContent(
            title=title,
            markdown=markdown,
            thumbnail_url=thumbnail_url,
            description=extract_description(soup),
            url=url,
        )
