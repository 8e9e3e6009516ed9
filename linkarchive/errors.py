"""Exceptions raised by the ingestion pipeline.

Each of these is fatal for a single URL only: the orchestrator catches them
at the per-URL boundary and records a failure without stopping the batch.
"""


class LinkArchiveError(Exception):
    """Base class for per-item ingestion failures."""


class InvalidUrlError(LinkArchiveError):
    """URL cannot be parsed into what the extractor needs (e.g. a video ID)."""


class ExtractionError(LinkArchiveError):
    """Renderer or metadata backend failed, or extraction produced no content."""


class SummarizationError(LinkArchiveError):
    """Text-generation backend failed."""


class PersistenceError(LinkArchiveError):
    """Archive database write or lookup failed."""
