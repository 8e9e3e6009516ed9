"""Repository module for database operations."""

from .base import BaseRepository
from .articles import ArticleRepository
from .tags import TagRepository

__all__ = [
    "BaseRepository",
    "ArticleRepository",
    "TagRepository",
]
