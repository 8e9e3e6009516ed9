"""Link Archive: ingest URLs into a summarized, tagged content archive."""

__version__ = "1.0.0"
