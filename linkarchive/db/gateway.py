"""Persistence gateway used by the ingestion pipeline.

Every operation runs in its own session and commits on its own, so each URL
is persisted independently and concurrent tag lookups never share a session.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Set

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from linkarchive.db.connection import get_session
from linkarchive.db.repositories import ArticleRepository, TagRepository
from linkarchive.errors import PersistenceError

logger = logging.getLogger(__name__)


@dataclass
class ArchiveRecord:
    """Normalized item ready to be written."""
    slug: str
    title: str
    source_url: str
    thumbnail_url: Optional[str]
    content_type: str
    short_summary: str
    extended_summary: str
    raw_markdown: Optional[str]
    transcript: Optional[str]
    week_bucket: str


@dataclass
class StoredArticle:
    """Identity of an already-archived item."""
    id: int
    slug: str
    source_url: str


class ArchiveGateway(Protocol):
    async def find_by_source_url(self, url: str) -> Optional[StoredArticle]:
        ...

    async def upsert(self, record: ArchiveRecord) -> int:
        ...

    async def get_or_create_tag(self, name: str) -> int:
        ...

    async def relink_tags(self, article_id: int, tag_ids: Sequence[int]) -> None:
        ...

    async def list_all_slugs(self) -> Set[str]:
        ...


class DatabaseArchiveGateway:
    """ArchiveGateway backed by the SQLAlchemy repositories."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_by_source_url(self, url: str) -> Optional[StoredArticle]:
        try:
            async with get_session(self.session_factory) as session:
                article = await ArticleRepository(session).get_by_url(url)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Lookup by URL failed: {e}") from e

        if article is None:
            return None
        return StoredArticle(id=article.id, slug=article.slug, source_url=article.url)

    async def upsert(self, record: ArchiveRecord) -> int:
        """
        Insert, or update in place when the URL is already archived.

        The stored slug is never changed by an update.
        """
        fields = dict(
            title=record.title,
            thumbnail_url=record.thumbnail_url,
            content_type=record.content_type,
            short_summary=record.short_summary,
            extended_summary=record.extended_summary,
            markdown_content=record.raw_markdown,
            transcription=record.transcript,
            week_start_date=record.week_bucket,
        )
        try:
            async with get_session(self.session_factory) as session:
                repo = ArticleRepository(session)
                existing = await repo.get_by_url(record.source_url)
                if existing is not None:
                    article = await repo.update(existing, **fields)
                else:
                    article = await repo.create(
                        slug=record.slug, url=record.source_url, **fields
                    )
                article_id = article.id
        except SQLAlchemyError as e:
            raise PersistenceError(f"Saving article failed: {e}") from e

        return article_id

    async def get_or_create_tag(self, name: str) -> int:
        try:
            async with get_session(self.session_factory) as session:
                tag = await TagRepository(session).get_or_create(name)
                tag_id = tag.id
        except IntegrityError:
            # Created concurrently by another writer; read the winner
            logger.debug(f"Tag '{name}' created concurrently, re-reading")
            try:
                async with get_session(self.session_factory) as session:
                    tag = await TagRepository(session).get_by_name(name)
            except SQLAlchemyError as e:
                raise PersistenceError(f"Tag lookup failed for '{name}': {e}") from e
            if tag is None:
                raise PersistenceError(f"Tag '{name}' could not be created")
            tag_id = tag.id
        except SQLAlchemyError as e:
            raise PersistenceError(f"Tag lookup failed for '{name}': {e}") from e

        return tag_id

    async def relink_tags(self, article_id: int, tag_ids: Sequence[int]) -> None:
        try:
            async with get_session(self.session_factory) as session:
                await ArticleRepository(session).replace_tags(article_id, tag_ids)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Linking tags failed: {e}") from e

    async def list_all_slugs(self) -> Set[str]:
        try:
            async with get_session(self.session_factory) as session:
                return await ArticleRepository(session).get_all_slugs()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Loading slugs failed: {e}") from e
