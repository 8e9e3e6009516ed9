"""OpenAI API client factory for hosted text generation."""

import logging
from typing import Optional

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)


def create_client(
    api_key: str,
    base_url: Optional[str] = None,
    timeout: float = 120.0,
) -> AsyncOpenAI:
    """Create an AsyncOpenAI client.

    SDK retries are disabled: a failed generation fails the item and the
    pipeline never retries.
    """
    if not api_key:
        raise ValueError(
            "OPENAI_API_KEY is required when LLM_PROVIDER=openai. "
            "Set it in environment variables."
        )

    client = AsyncOpenAI(
        api_key=api_key,
        base_url=base_url or None,
        timeout=timeout,
        max_retries=0,
    )
    logger.debug("Created OpenAI client")
    return client
