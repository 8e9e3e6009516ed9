"""SQLAlchemy ORM models for Link Archive."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# Join table; position keeps the tag order produced by the summarizer
article_tags = Table(
    "article_tags",
    Base.metadata,
    Column(
        "article_id",
        Integer,
        ForeignKey("articles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("position", Integer, nullable=False, server_default="0"),
    Index("ix_article_tags_tag_id", "tag_id"),
)


class Article(Base):
    """Archived item (article, blog post or video)."""
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(String(2000), unique=True, nullable=False)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(Text)
    content_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="article", index=True
    )
    short_summary: Mapped[str] = mapped_column(String(200), nullable=False)
    extended_summary: Mapped[Optional[str]] = mapped_column(Text)
    markdown_content: Mapped[Optional[str]] = mapped_column(Text)
    transcription: Mapped[Optional[str]] = mapped_column(Text)
    # Monday of the ingestion week, YYYY-MM-DD
    week_start_date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
    )

    # Relationships (written through ArticleRepository.replace_tags)
    tags: Mapped[List["Tag"]] = relationship(
        secondary=article_tags,
        order_by=article_tags.c.position,
        lazy="selectin",
        viewonly=True,
    )

    @property
    def tag_names(self) -> List[str]:
        return [tag.name for tag in self.tags]


class Tag(Base):
    """Normalized tag, unique by name."""
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )

    articles: Mapped[List["Article"]] = relationship(
        secondary=article_tags,
        viewonly=True,
    )
