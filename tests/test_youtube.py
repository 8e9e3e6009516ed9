"""Tests for YouTube URL parsing, metadata fallback and transcripts."""

from types import SimpleNamespace

import httpx
import pytest
from youtube_transcript_api import TranscriptsDisabled

from linkarchive.config import Settings
from linkarchive.errors import ExtractionError, InvalidUrlError
from linkarchive.youtube import (
    VIDEO_PLACEHOLDER_TEXT,
    CaptionTranscriptSource,
    OEmbedSource,
    VideoContent,
    VideoExtractor,
    VideoMetadata,
    YouTubeDataApiSource,
    build_video_extractor,
    extract_video_id,
    fetch_metadata,
    is_youtube_url,
)


class TestExtractVideoId:
    @pytest.mark.parametrize(
        "url",
        [
            "https://youtu.be/abc123",
            "https://www.youtube.com/watch?v=abc123",
            "https://www.youtube.com/watch?feature=share&v=abc123&t=42",
            "https://www.youtube.com/embed/abc123?start=10",
            "https://youtube.com/shorts/abc123",
            "https://www.youtube.com/live/abc123#chat",
            "https://youtu.be/abc123?si=tracking",
        ],
    )
    def test_supported_shapes(self, url):
        assert extract_video_id(url) == "abc123"

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/channel/UC123",
            "https://www.youtube.com/watch?list=PL1",
            "https://example.com/watch?v=abc123",
        ],
    )
    def test_unsupported_shapes_raise(self, url):
        with pytest.raises(InvalidUrlError):
            extract_video_id(url)


def test_is_youtube_url():
    assert is_youtube_url("https://YOUTU.BE/x")
    assert not is_youtube_url("https://vimeo.com/1")


class TestSummarySource:
    def _video(self, transcript=None, description=""):
        return VideoContent(
            video_id="abc123",
            title="T",
            thumbnail_url="https://img.youtube.com/vi/abc123/maxresdefault.jpg",
            description=description,
            transcript=transcript,
        )

    def test_transcript_preferred(self):
        assert self._video("spoken words", "desc").summary_source() == "spoken words"

    def test_description_when_no_transcript(self):
        assert self._video(None, "desc").summary_source() == "desc"
        assert self._video("   ", "desc").summary_source() == "desc"

    def test_placeholder_when_nothing(self):
        assert self._video().summary_source() == VIDEO_PLACEHOLDER_TEXT


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestMetadataSources:
    async def test_data_api_picks_best_thumbnail(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "snippet": {
                                "title": "Async Python",
                                "description": "All about asyncio.",
                                "thumbnails": {
                                    "default": {"url": "https://i.ytimg.com/d.jpg"},
                                    "high": {"url": "https://i.ytimg.com/h.jpg"},
                                },
                            }
                        }
                    ]
                },
            )

        source = YouTubeDataApiSource("key-1", client=_client(handler))
        metadata = await source.get_metadata("abc123")

        assert metadata == VideoMetadata(
            title="Async Python",
            description="All about asyncio.",
            thumbnail_url="https://i.ytimg.com/h.jpg",
        )
        assert seen["params"] == {"id": "abc123", "part": "snippet", "key": "key-1"}

    async def test_data_api_no_items_raises(self):
        source = YouTubeDataApiSource("k", client=_client(lambda r: httpx.Response(200, json={"items": []})))
        with pytest.raises(ExtractionError):
            await source.get_metadata("abc123")

    async def test_oembed(self):
        def handler(request):
            assert request.url.params["url"] == "https://www.youtube.com/watch?v=abc123"
            return httpx.Response(200, json={"title": "Via oEmbed", "author_name": "Someone"})

        metadata = await OEmbedSource(client=_client(handler)).get_metadata("abc123")
        assert metadata.title == "Via oEmbed"
        assert metadata.description == ""
        assert metadata.thumbnail_url == "https://img.youtube.com/vi/abc123/maxresdefault.jpg"

    async def test_fetch_metadata_falls_through_to_next_source(self):
        def handler(request):
            if "googleapis" in request.url.host:
                return httpx.Response(403, json={"error": "quota"})
            return httpx.Response(200, json={"title": "Fallback title"})

        client = _client(handler)
        sources = [YouTubeDataApiSource("k", client=client), OEmbedSource(client=client)]
        metadata = await fetch_metadata(sources, "abc123")
        assert metadata.title == "Fallback title"

    async def test_fetch_metadata_all_fail(self):
        client = _client(lambda r: httpx.Response(500))
        with pytest.raises(ExtractionError, match="oembed"):
            await fetch_metadata([OEmbedSource(client=client)], "abc123")


class TestCaptionTranscriptSource:
    async def test_joins_snippets(self):
        source = CaptionTranscriptSource(["en"])
        calls = []

        def fetch(video_id, languages):
            calls.append((video_id, languages))
            return [
                SimpleNamespace(text="Hello "),
                SimpleNamespace(text=""),
                SimpleNamespace(text="world"),
            ]

        source._api = SimpleNamespace(fetch=fetch)
        assert await source.get_transcript("abc123") == "Hello world"
        assert calls == [("abc123", ["en"])]

    async def test_unavailable_captions_return_none(self):
        source = CaptionTranscriptSource()

        def fetch(video_id, languages):
            raise TranscriptsDisabled(video_id)

        source._api = SimpleNamespace(fetch=fetch)
        assert await source.get_transcript("abc123") is None

    async def test_unexpected_failure_returns_none(self):
        source = CaptionTranscriptSource()

        def fetch(video_id, languages):
            raise RuntimeError("network unreachable")

        source._api = SimpleNamespace(fetch=fetch)
        assert await source.get_transcript("abc123") is None


class _StaticMetadata:
    name = "static"

    async def get_metadata(self, video_id):
        return VideoMetadata(title=f"Video {video_id}", description="", thumbnail_url="thumb")


class _NoTranscript:
    async def get_transcript(self, video_id):
        return None


class TestVideoExtractor:
    async def test_extract_video(self):
        extractor = VideoExtractor([_StaticMetadata()], _NoTranscript())
        video = await extractor.extract_video("https://youtu.be/abc123")

        assert video.video_id == "abc123"
        assert video.title == "Video abc123"
        assert video.transcript is None
        assert video.summary_source() == VIDEO_PLACEHOLDER_TEXT

    async def test_invalid_url(self):
        extractor = VideoExtractor([_StaticMetadata()], _NoTranscript())
        with pytest.raises(InvalidUrlError):
            await extractor.extract_video("https://www.youtube.com/feed/trending")


def test_build_video_extractor_source_order():
    config = Settings()
    config.YOUTUBE_API_KEY = ""
    assert [s.name for s in build_video_extractor(config).metadata_sources] == ["oembed"]

    config.YOUTUBE_API_KEY = "key"
    assert [s.name for s in build_video_extractor(config).metadata_sources] == [
        "youtube-data-api",
        "oembed",
    ]
