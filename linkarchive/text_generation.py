"""Pluggable text-generation backends.

The summarizer only knows the TextGenerator capability; which backend runs
is decided once at startup by build_text_generator().
"""

import json
import logging
import time
from pathlib import Path
from typing import Optional, Protocol

from openai import AsyncOpenAI, OpenAIError

from linkarchive.config import Settings, settings
from linkarchive.errors import SummarizationError
from linkarchive.ollama_client import OllamaClient
from linkarchive import openai_client

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Generate text for a prompt. Raises SummarizationError on failure."""

    model: str

    async def generate_text(self, prompt: str, label: Optional[str] = None) -> str:
        ...

    async def close(self) -> None:
        ...


def dump_debug(
    debug_dir: Optional[Path], label: Optional[str], model: str, prompt: str, response: str
) -> None:
    """Write prompt/response to debug-genai-<label>.json when debugging is on."""
    if debug_dir is None or not label:
        return
    debug_dir.mkdir(parents=True, exist_ok=True)
    path = debug_dir / f"debug-genai-{label}.json"
    path.write_text(
        json.dumps(
            {"model": model, "prompt": prompt, "response": response},
            ensure_ascii=False,
            indent=2,
        ),
        encoding="utf-8",
    )
    logger.debug(f"Wrote {path}")


class OllamaTextGenerator:
    """Local backend: Ollama /api/generate."""

    def __init__(
        self,
        client: OllamaClient,
        model: str,
        keep_alive: Optional[str] = None,
        timeout: float = 180.0,
        debug_dir: Optional[Path] = None,
    ):
        self.client = client
        self.model = model
        self.keep_alive = keep_alive
        self.timeout = timeout
        self.debug_dir = debug_dir

    async def generate_text(self, prompt: str, label: Optional[str] = None) -> str:
        start_time = time.time()
        response, error = await self.client.post_generate(
            model=self.model,
            prompt=prompt,
            options={"temperature": 0.3},
            timeout=self.timeout,
            keep_alive=self.keep_alive,
        )
        if error:
            raise SummarizationError(f"LLM error ({self.model}): {error}")

        logger.debug(f"{label or 'generation'} with {self.model} took {time.time() - start_time:.1f}s")
        text = response.strip()
        dump_debug(self.debug_dir, label, self.model, prompt, text)
        return text

    async def close(self) -> None:
        await self.client.close()


class OpenAITextGenerator:
    """Hosted backend: OpenAI chat completions (or a compatible endpoint)."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        debug_dir: Optional[Path] = None,
    ):
        self.client = client
        self.model = model
        self.debug_dir = debug_dir

    async def generate_text(self, prompt: str, label: Optional[str] = None) -> str:
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.3,
            )
        except OpenAIError as e:
            raise SummarizationError(f"LLM error ({self.model}): {e}") from e

        if not completion.choices:
            raise SummarizationError(f"LLM error ({self.model}): no choices returned")

        text = (completion.choices[0].message.content or "").strip()
        dump_debug(self.debug_dir, label, self.model, prompt, text)
        return text

    async def close(self) -> None:
        await self.client.close()


def build_text_generator(config: Settings = settings) -> TextGenerator:
    """Construct the backend selected by LLM_PROVIDER."""
    if config.LLM_PROVIDER == "ollama":
        return OllamaTextGenerator(
            client=OllamaClient(config.OLLAMA_BASE_URL),
            model=config.OLLAMA_MODEL,
            keep_alive=config.TEXT_MODEL_KEEP_ALIVE,
            debug_dir=config.GENAI_DEBUG_DIR,
        )
    if config.LLM_PROVIDER == "openai":
        return OpenAITextGenerator(
            client=openai_client.create_client(
                config.OPENAI_API_KEY, config.OPENAI_BASE_URL, timeout=config.HTTP_TIMEOUT * 2
            ),
            model=config.OPENAI_MODEL,
            debug_dir=config.GENAI_DEBUG_DIR,
        )
    raise ValueError(f"Unknown LLM_PROVIDER: {config.LLM_PROVIDER}")
