"""Command line entry point.

Usage:
    python -m linkarchive ingest URL [URL ...]
    python -m linkarchive init-db

Exit status is 1 if any URL failed, 0 otherwise.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from linkarchive import __version__
from linkarchive.config import Settings, settings
from linkarchive.db import (
    DatabaseArchiveGateway,
    close_db,
    create_engine,
    create_session_factory,
    init_db,
)
from linkarchive.errors import PersistenceError
from linkarchive.pipeline import BatchReport, IngestionPipeline
from linkarchive.renderers import build_renderer
from linkarchive.summarizer import Summarizer
from linkarchive.text_generation import build_text_generator
from linkarchive.web_scraper import WebScraper
from linkarchive.youtube import build_video_extractor

logger = logging.getLogger("linkarchive")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def ingest(urls: List[str], config: Settings = settings, create_tables: bool = False) -> BatchReport:
    """Wire the backends from configuration and run one batch."""
    engine = create_engine(config.DATABASE_URL)
    generator = build_text_generator(config)
    try:
        if create_tables:
            await init_db(engine)

        pipeline = IngestionPipeline(
            scraper=WebScraper(build_renderer(config)),
            video_extractor=build_video_extractor(config),
            summarizer=Summarizer(generator, max_content_length=config.SUMMARY_MAX_INPUT_CHARS),
            gateway=DatabaseArchiveGateway(create_session_factory(engine)),
        )
        return await pipeline.run(urls)
    finally:
        await generator.close()
        await close_db(engine)


async def create_tables(config: Settings = settings) -> None:
    engine = create_engine(config.DATABASE_URL)
    try:
        await init_db(engine)
    finally:
        await close_db(engine)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkarchive",
        description="Ingest URLs into the link archive",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest_parser = subparsers.add_parser("ingest", help="Ingest one or more URLs")
    ingest_parser.add_argument("urls", nargs="+", metavar="URL", help="URLs to ingest")
    ingest_parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create missing tables before ingesting",
    )

    subparsers.add_parser("init-db", help="Create database tables")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.LOG_LEVEL)

    if args.command == "init-db":
        asyncio.run(create_tables())
        return 0

    problems = settings.validate()
    if problems:
        logger.error("Invalid configuration:")
        for problem in problems:
            logger.error(f"  - {problem}")
        return 1

    try:
        report = asyncio.run(ingest(args.urls, create_tables=args.init_db))
    except PersistenceError as e:
        logger.error(f"Archive database unavailable: {e}")
        return 1

    print(report.format())
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
