"""Repository for archived articles."""

from typing import List, Optional, Sequence, Set

from sqlalchemy import delete, desc, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from linkarchive.db.models import Article, Tag, article_tags
from linkarchive.db.repositories.base import BaseRepository


class ArticleRepository(BaseRepository[Article]):
    """Repository for article operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Article)

    async def get_by_url(self, url: str) -> Optional[Article]:
        """Get article by source URL (natural key for re-ingestion)."""
        return await self.get_one_by(url=url)

    async def get_by_slug(self, slug: str) -> Optional[Article]:
        """Get article by slug, tags loaded."""
        return await self.get_one_by(slug=slug)

    async def get_all_slugs(self) -> Set[str]:
        """Every slug currently in use."""
        result = await self.session.execute(select(Article.slug))
        return set(result.scalars().all())

    async def get_by_week(self, week_start_date: str) -> List[Article]:
        """Articles archived in the given week, newest first."""
        stmt = (
            select(Article)
            .where(Article.week_start_date == week_start_date)
            .order_by(desc(Article.created_at), desc(Article.id))
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_tag(
        self, tag_name: str, week_start_date: Optional[str] = None
    ) -> List[Article]:
        """Articles carrying a tag, optionally limited to one week."""
        stmt = (
            select(Article)
            .join(article_tags, article_tags.c.article_id == Article.id)
            .join(Tag, Tag.id == article_tags.c.tag_id)
            .where(Tag.name == tag_name)
        )
        if week_start_date:
            stmt = stmt.where(Article.week_start_date == week_start_date)
        stmt = stmt.order_by(desc(Article.created_at), desc(Article.id))
        result = await self.session.execute(stmt)
        return list(result.scalars().unique().all())

    async def get_week_start_dates(self) -> List[str]:
        """Distinct week buckets, most recent first (for navigation)."""
        stmt = (
            select(Article.week_start_date)
            .distinct()
            .order_by(desc(Article.week_start_date))
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def replace_tags(self, article_id: int, tag_ids: Sequence[int]) -> None:
        """Delete all tag links of an article and insert the new ones in order."""
        await self.session.execute(
            delete(article_tags).where(article_tags.c.article_id == article_id)
        )
        if tag_ids:
            await self.session.execute(
                insert(article_tags),
                [
                    {"article_id": article_id, "tag_id": tag_id, "position": position}
                    for position, tag_id in enumerate(tag_ids)
                ],
            )
        await self.session.flush()
