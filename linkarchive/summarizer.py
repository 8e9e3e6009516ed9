"""Summaries and tags from extracted content via a text-generation backend."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import List

from linkarchive import prompts
from linkarchive.errors import SummarizationError
from linkarchive.text_generation import TextGenerator

logger = logging.getLogger(__name__)

SHORT_SUMMARY_MAX_LENGTH = 200


@dataclass
class Summaries:
    """Short and extended summary of one item."""
    short: str
    extended: str


def truncate_short_summary(text: str, max_length: int = SHORT_SUMMARY_MAX_LENGTH) -> str:
    """Hard cap: anything longer becomes max_length - 3 chars plus '...'."""
    text = text.strip()
    if len(text) > max_length:
        return text[: max_length - 3] + "..."
    return text


def parse_tag_list(text: str) -> List[str]:
    """Split a comma-separated backend answer into trimmed, non-empty tags."""
    return [tag.strip() for tag in text.split(",") if tag.strip()]


class Summarizer:
    """Short/extended summaries and tag extraction over one TextGenerator."""

    def __init__(self, generator: TextGenerator, max_content_length: int = 12000):
        self.generator = generator
        self.max_content_length = max_content_length

    def _prepare(self, content: str) -> str:
        if len(content) > self.max_content_length:
            logger.info(
                f"Truncated content from {len(content)} to {self.max_content_length} chars"
            )
            return content[: self.max_content_length] + "..."
        return content

    async def _generate(self, prompt: str, label: str) -> str:
        try:
            return await self.generator.generate_text(prompt, label=label)
        except SummarizationError:
            raise
        except Exception as e:
            raise SummarizationError(f"{label} generation failed: {e}") from e

    async def generate_short_summary(self, content: str) -> str:
        text = await self._generate(prompts.short_summary_prompt(content), "short-summary")
        return truncate_short_summary(text)

    async def generate_extended_summary(self, content: str) -> str:
        text = await self._generate(prompts.extended_summary_prompt(content), "extended-summary")
        return text.strip()

    async def summarize(self, content: str) -> Summaries:
        """
        Generate both summaries concurrently.

        Raises:
            SummarizationError: empty input or backend failure (not retried)
        """
        if not content or not content.strip():
            raise SummarizationError("No content to summarize")

        content = self._prepare(content)
        start_time = time.time()

        short, extended = await asyncio.gather(
            self.generate_short_summary(content),
            self.generate_extended_summary(content),
        )

        logger.info(f"  Summaries generated in {time.time() - start_time:.1f}s")
        return Summaries(short=short, extended=extended)

    async def extract_tags(self, content: str) -> List[str]:
        """Raw tag candidates; normalization is done by tags.sanitize_tags()."""
        if not content or not content.strip():
            return []

        text = await self._generate(prompts.tags_prompt(self._prepare(content)), "tags")
        return parse_tag_list(text)
