"""Repository for tags."""

from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from linkarchive.db.models import Tag, article_tags
from linkarchive.db.repositories.base import BaseRepository


class TagRepository(BaseRepository[Tag]):
    """Repository for tag operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Tag)

    async def get_by_name(self, name: str) -> Optional[Tag]:
        return await self.get_one_by(name=name)

    async def get_or_create(self, name: str) -> Tag:
        """Get tag by name, creating it if missing."""
        tag = await self.get_by_name(name)
        if tag is None:
            tag = await self.create(name=name)
        return tag

    async def get_all_ordered(self) -> List[Tag]:
        """All tags by name."""
        result = await self.session.execute(select(Tag).order_by(Tag.name))
        return list(result.scalars().all())

    async def get_counts(self) -> List[Tuple[str, int]]:
        """(tag name, number of linked articles), most used first."""
        stmt = (
            select(Tag.name, func.count(article_tags.c.article_id))
            .join(article_tags, article_tags.c.tag_id == Tag.id)
            .group_by(Tag.name)
            .order_by(func.count(article_tags.c.article_id).desc(), Tag.name)
        )
        result = await self.session.execute(stmt)
        return [(name, count) for name, count in result.all()]
