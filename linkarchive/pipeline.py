"""Ingestion orchestrator.

URLs are processed one at a time, in input order. Each URL moves through

    PENDING -> CLASSIFIED -> EXTRACTED -> SUMMARIZED -> TAGGED -> PERSISTED

and any exception moves it to FAILED: the error is recorded in that URL's
result and the batch continues with the next URL. Nothing is retried.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Iterable, List, Optional, Set

from linkarchive.classifier import ContentType, classify_url
from linkarchive.db.gateway import ArchiveGateway, ArchiveRecord
from linkarchive.errors import ExtractionError, LinkArchiveError
from linkarchive.slugs import ensure_unique, slugify, week_start_date
from linkarchive.summarizer import Summarizer
from linkarchive.tags import MAX_TAGS, sanitize_tags
from linkarchive.web_scraper import WebScraper
from linkarchive.youtube import VideoExtractor

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    PENDING = "pending"
    CLASSIFIED = "classified"
    EXTRACTED = "extracted"
    SUMMARIZED = "summarized"
    TAGGED = "tagged"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass
class IngestResult:
    """Outcome for one URL."""
    url: str
    success: bool
    stage: Stage = Stage.PENDING
    slug: Optional[str] = None
    updated: bool = False
    tags: List[str] = field(default_factory=list)
    error: Optional[str] = None
    # Stage reached before failing
    failed_at: Optional[Stage] = None


@dataclass
class BatchReport:
    """End-of-batch summary."""
    results: List[IngestResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def failures(self) -> List[IngestResult]:
        return [r for r in self.results if not r.success]

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0

    def format(self) -> str:
        lines = ["=== Summary ===", f"Successfully processed: {self.succeeded}"]
        if self.failed:
            lines.append(f"Failed: {self.failed}")
            for result in self.failures:
                lines.append(f"  - {result.url}: {result.error}")
        return "\n".join(lines)


@dataclass
class BatchContext:
    """State owned by one batch run: the slug snapshot."""
    existing_slugs: Set[str] = field(default_factory=set)

    def claim_slug(self, title: str) -> str:
        """Unique slug for a new item, reserved for the rest of the batch."""
        slug = ensure_unique(slugify(title), self.existing_slugs)
        self.existing_slugs.add(slug)
        return slug


@dataclass
class ExtractedItem:
    """Output of the extraction stage, whatever the strategy."""
    title: str
    thumbnail_url: Optional[str]
    summary_input: str
    raw_markdown: Optional[str] = None
    transcript: Optional[str] = None


class IngestionPipeline:
    """Classify, extract, summarize, tag and persist a list of URLs."""

    def __init__(
        self,
        scraper: WebScraper,
        video_extractor: VideoExtractor,
        summarizer: Summarizer,
        gateway: ArchiveGateway,
        today: Callable[[], date] = date.today,
        max_tags: int = MAX_TAGS,
    ):
        self.scraper = scraper
        self.video_extractor = video_extractor
        self.summarizer = summarizer
        self.gateway = gateway
        self.today = today
        self.max_tags = max_tags

    async def run(self, urls: Iterable[str]) -> BatchReport:
        """Process every URL sequentially; one failure never stops the batch."""
        logger.info("Loading existing slugs...")
        context = BatchContext(existing_slugs=set(await self.gateway.list_all_slugs()))

        report = BatchReport()
        for url in urls:
            report.results.append(await self.ingest_url(url, context))

        logger.info(f"Batch finished: {report.succeeded} succeeded, {report.failed} failed")
        return report

    async def ingest_url(self, url: str, context: BatchContext) -> IngestResult:
        """Run the whole pipeline for one URL, converting errors into a failed result."""
        logger.info(f"Processing: {url}")
        result = IngestResult(url=url, success=False)

        try:
            await self._process(url, context, result)
        except LinkArchiveError as e:
            self._fail(result, str(e))
            logger.error(f"  ✗ Error processing {url} ({result.failed_at.value}): {e}")
        except Exception as e:
            self._fail(result, f"{type(e).__name__}: {e}")
            logger.exception(f"  ✗ Unexpected error processing {url}")

        return result

    @staticmethod
    def _fail(result: IngestResult, error: str) -> None:
        result.failed_at = result.stage
        result.stage = Stage.FAILED
        result.success = False
        result.error = error

    async def _process(self, url: str, context: BatchContext, result: IngestResult) -> None:
        content_type = classify_url(url)
        result.stage = Stage.CLASSIFIED
        logger.info(f"  Content type: {content_type.value}")

        item = await self._extract(url, content_type)
        result.stage = Stage.EXTRACTED

        logger.info("  Generating summaries...")
        summaries = await self.summarizer.summarize(item.summary_input)
        result.stage = Stage.SUMMARIZED

        logger.info("  Generating tags from content...")
        raw_tags = await self.summarizer.extract_tags(item.summary_input)
        tags = sanitize_tags(raw_tags, self.max_tags)
        result.tags = tags
        result.stage = Stage.TAGGED
        logger.info(f"  Generated {len(tags)} tag(s): {', '.join(tags)}")

        existing = await self.gateway.find_by_source_url(url)
        if existing is not None:
            slug = existing.slug
            logger.info(f"  Updating existing article: {slug}")
        else:
            slug = context.claim_slug(item.title)
            logger.info(f"  Generated slug: {slug}")

        week_bucket = week_start_date(self.today())
        logger.info(f"  Week start date: {week_bucket}")

        record = ArchiveRecord(
            slug=slug,
            title=item.title,
            source_url=url,
            thumbnail_url=item.thumbnail_url,
            content_type=content_type.value,
            short_summary=summaries.short,
            extended_summary=summaries.extended,
            raw_markdown=item.raw_markdown,
            transcript=item.transcript,
            week_bucket=week_bucket,
        )
        article_id = await self.gateway.upsert(record)

        logger.info(f"  Linking {len(tags)} tag(s)...")
        tag_ids = await asyncio.gather(
            *(self.gateway.get_or_create_tag(tag) for tag in tags)
        )
        await self.gateway.relink_tags(article_id, list(tag_ids))

        result.slug = slug
        result.updated = existing is not None
        result.stage = Stage.PERSISTED
        result.success = True

        if result.updated:
            logger.info(f"  ✓ Successfully updated: {slug}")
        else:
            logger.info(f"  ✓ Successfully archived: {slug}")

    async def _extract(self, url: str, content_type: ContentType) -> ExtractedItem:
        if content_type == ContentType.VIDEO:
            logger.info("  Fetching YouTube metadata...")
            video = await self.video_extractor.extract_video(url)
            if video.transcript:
                logger.info("  Using transcript for summary")
            else:
                logger.info("  Using video description for summary (transcript unavailable)")
            return ExtractedItem(
                title=video.title,
                thumbnail_url=video.thumbnail_url,
                summary_input=video.summary_source(),
                transcript=video.transcript,
            )

        logger.info("  Scraping content...")
        scraped = await self.scraper.scrape(url)
        if not scraped.markdown.strip():
            raise ExtractionError("No content extracted from URL")
        return ExtractedItem(
            title=scraped.title,
            thumbnail_url=scraped.thumbnail_url,
            summary_input=scraped.markdown,
            raw_markdown=scraped.markdown,
        )
