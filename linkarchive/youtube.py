"""YouTube extraction: video ID parsing, metadata and transcripts.

Metadata comes from an ordered list of sources; the first one that succeeds
wins and every failure is logged and skipped. With YOUTUBE_API_KEY set the
Data API (which has the full description) is tried before the public oEmbed
endpoint.

Missing captions are a normal outcome, not an error: the summarization input
falls back from transcript to description to a literal placeholder.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

import httpx
from youtube_transcript_api import CouldNotRetrieveTranscript, YouTubeTranscriptApi

from linkarchive.config import Settings, settings
from linkarchive.errors import ExtractionError, InvalidUrlError

logger = logging.getLogger(__name__)

VIDEO_PLACEHOLDER_TEXT = "Video content"

OEMBED_URL = "https://www.youtube.com/oembed"
DATA_API_URL = "https://www.googleapis.com/youtube/v3/videos"

# Best first
THUMBNAIL_QUALITIES = ("maxres", "standard", "high", "medium", "default")

_VIDEO_ID_PATTERNS = [
    re.compile(r"youtube(?:-nocookie)?\.com/watch\?(?:[^#]*&)?v=([^&?#/\s]+)"),
    re.compile(r"youtu\.be/([^&?#/\s]+)"),
    re.compile(r"youtube(?:-nocookie)?\.com/(?:embed|shorts|live)/([^&?#/\s]+)"),
]


def is_youtube_url(url: str) -> bool:
    """Check if URL is a YouTube URL."""
    return "youtube.com" in url.lower() or "youtu.be" in url.lower()


def extract_video_id(url: str) -> str:
    """
    Extract the video ID from watch?v=, youtu.be/, embed/, shorts/ or live/ URLs.

    Raises:
        InvalidUrlError: no known URL shape matched
    """
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    raise InvalidUrlError(f"Invalid YouTube URL: {url}")


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def default_thumbnail_url(video_id: str) -> str:
    return f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"


@dataclass
class VideoMetadata:
    """Basic video metadata from a metadata source."""
    title: str
    description: str
    thumbnail_url: str


@dataclass
class VideoContent:
    """Everything the pipeline needs from a video."""
    video_id: str
    title: str
    thumbnail_url: str
    description: str
    transcript: Optional[str] = None

    def summary_source(self) -> str:
        """Transcript, else description, else a fixed placeholder."""
        if self.transcript and self.transcript.strip():
            return self.transcript
        if self.description and self.description.strip():
            return self.description
        return VIDEO_PLACEHOLDER_TEXT


class VideoMetadataSource(Protocol):
    name: str

    async def get_metadata(self, video_id: str) -> VideoMetadata:
        ...


class TranscriptSource(Protocol):
    async def get_transcript(self, video_id: str) -> Optional[str]:
        ...


async def _get_json(
    client: Optional[httpx.AsyncClient], url: str, params: dict, timeout: float
) -> dict:
    if client is not None:
        response = await client.get(url, params=params)
    else:
        async with httpx.AsyncClient(timeout=timeout) as owned_client:
            response = await owned_client.get(url, params=params)
    response.raise_for_status()
    return response.json()


class YouTubeDataApiSource:
    """Authenticated YouTube Data API v3 (videos.list, part=snippet)."""

    name = "youtube-data-api"

    def __init__(
        self,
        api_key: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self._client = client
        self._timeout = timeout

    async def get_metadata(self, video_id: str) -> VideoMetadata:
        data = await _get_json(
            self._client,
            DATA_API_URL,
            {"id": video_id, "part": "snippet", "key": self.api_key},
            self._timeout,
        )
        items = data.get("items") or []
        if not items:
            raise ExtractionError(f"Video not found via Data API: {video_id}")

        snippet = items[0].get("snippet", {})
        thumbnails = snippet.get("thumbnails", {})
        thumbnail_url = next(
            (
                thumbnails[quality]["url"]
                for quality in THUMBNAIL_QUALITIES
                if thumbnails.get(quality, {}).get("url")
            ),
            default_thumbnail_url(video_id),
        )

        return VideoMetadata(
            title=snippet.get("title") or "Untitled Video",
            description=snippet.get("description") or "",
            thumbnail_url=thumbnail_url,
        )


class OEmbedSource:
    """Public oEmbed endpoint: no key needed, but no description either."""

    name = "oembed"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0):
        self._client = client
        self._timeout = timeout

    async def get_metadata(self, video_id: str) -> VideoMetadata:
        data = await _get_json(
            self._client,
            OEMBED_URL,
            {"url": watch_url(video_id), "format": "json"},
            self._timeout,
        )
        return VideoMetadata(
            title=data.get("title") or "Untitled Video",
            description=data.get("description") or "",
            thumbnail_url=default_thumbnail_url(video_id),
        )


async def fetch_metadata(
    sources: Sequence[VideoMetadataSource], video_id: str
) -> VideoMetadata:
    """
    Try each metadata source in order; first success wins.

    Raises:
        ExtractionError: every source failed
    """
    errors = []
    for source in sources:
        try:
            metadata = await source.get_metadata(video_id)
            logger.debug(f"Metadata for {video_id} from {source.name}")
            return metadata
        except (httpx.HTTPError, ValueError, KeyError, ExtractionError) as e:
            logger.warning(f"Metadata source {source.name} failed for {video_id}: {e}")
            errors.append(f"{source.name}: {e}")

    raise ExtractionError(
        f"Failed to fetch YouTube metadata for {video_id}: " + "; ".join(errors)
    )


class CaptionTranscriptSource:
    """Caption track text via youtube-transcript-api."""

    def __init__(self, languages: Optional[List[str]] = None):
        self.languages = languages or ["en"]
        self._api = YouTubeTranscriptApi()

    def _fetch(self, video_id: str) -> str:
        fetched = self._api.fetch(video_id, languages=self.languages)
        return " ".join(
            snippet.text.strip() for snippet in fetched if snippet.text.strip()
        )

    async def get_transcript(self, video_id: str) -> Optional[str]:
        """Return the transcript text, or None if captions cannot be retrieved."""
        loop = asyncio.get_running_loop()
        try:
            text = await loop.run_in_executor(None, self._fetch, video_id)
        except CouldNotRetrieveTranscript as e:
            logger.info(f"No transcript for {video_id}: {type(e).__name__}")
            return None
        except Exception as e:
            logger.warning(f"Transcript retrieval failed for {video_id}: {e}")
            return None

        return text or None


class VideoExtractor:
    """Video extraction strategy."""

    def __init__(
        self,
        metadata_sources: Sequence[VideoMetadataSource],
        transcript_source: TranscriptSource,
    ):
        self.metadata_sources = list(metadata_sources)
        self.transcript_source = transcript_source

    async def extract_video(self, url: str) -> VideoContent:
        """
        Resolve a YouTube URL into metadata plus (optional) transcript.

        Raises:
            InvalidUrlError: no video ID in the URL
            ExtractionError: no metadata source succeeded
        """
        video_id = extract_video_id(url)

        metadata = await fetch_metadata(self.metadata_sources, video_id)

        logger.info(f"Fetching transcript for {video_id}")
        transcript = await self.transcript_source.get_transcript(video_id)

        return VideoContent(
            video_id=video_id,
            title=metadata.title,
            thumbnail_url=metadata.thumbnail_url,
            description=metadata.description,
            transcript=transcript,
        )


def build_video_extractor(
    config: Settings = settings, client: Optional[httpx.AsyncClient] = None
) -> VideoExtractor:
    """Data API first when a key is configured, oEmbed always as the fallback."""
    sources: List[VideoMetadataSource] = []
    if config.YOUTUBE_API_KEY:
        sources.append(
            YouTubeDataApiSource(config.YOUTUBE_API_KEY, client=client, timeout=config.HTTP_TIMEOUT)
        )
    sources.append(OEmbedSource(client=client, timeout=config.HTTP_TIMEOUT))

    return VideoExtractor(
        metadata_sources=sources,
        transcript_source=CaptionTranscriptSource(config.TRANSCRIPT_LANGUAGES),
    )
