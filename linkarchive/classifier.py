"""URL content-type classification."""

from enum import Enum


class ContentType(str, Enum):
    """Kind of archived content, decides the extraction strategy."""
    ARTICLE = "article"
    VIDEO = "video"
    BLOG_POST = "blog_post"
    OTHER = "other"


VIDEO_MARKERS = ("youtube.com", "youtu.be")

BLOG_MARKERS = (
    "blog",
    "medium.com",
    "dev.to",
    "substack.com",
    "wordpress.com",
    "hashnode.dev",
    "ghost.io",
)


def classify_url(url: str) -> ContentType:
    """
    Map a URL to a content type. First matching rule wins:

    - YouTube host -> video
    - blog marker or known publishing platform -> blog_post
    - anything else -> article
    """
    url_lower = url.lower()

    if any(marker in url_lower for marker in VIDEO_MARKERS):
        return ContentType.VIDEO

    if any(marker in url_lower for marker in BLOG_MARKERS):
        return ContentType.BLOG_POST

    return ContentType.ARTICLE
