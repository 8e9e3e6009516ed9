"""Database module for Link Archive."""

from .connection import close_db, create_engine, create_session_factory, get_session, init_db
from .gateway import ArchiveGateway, ArchiveRecord, DatabaseArchiveGateway, StoredArticle
from .models import Article, Base, Tag, article_tags

__all__ = [
    "close_db",
    "create_engine",
    "create_session_factory",
    "get_session",
    "init_db",
    "ArchiveGateway",
    "ArchiveRecord",
    "DatabaseArchiveGateway",
    "StoredArticle",
    "Article",
    "Base",
    "Tag",
    "article_tags",
]
