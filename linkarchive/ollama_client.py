"""Ollama HTTP client with connection pooling.

One httpx.AsyncClient is reused for every generate call made during a batch
run instead of opening a new connection per prompt.
"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class OllamaClient:
    """Thin async client for a local Ollama server."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def get_client(self) -> httpx.AsyncClient:
        """Get or create the pooled HTTP client.

        Uses connection pooling with:
        - max_connections=10: Allow concurrent requests
        - max_keepalive_connections=5: Keep connections warm
        - keepalive_expiry=30s: Close idle connections after 30s
        """
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(
                    connect=10.0,
                    read=300.0,  # Long reads for model inference
                    write=30.0,
                    pool=10.0,
                ),
                limits=httpx.Limits(
                    max_connections=10,
                    max_keepalive_connections=5,
                    keepalive_expiry=30.0,
                ),
                transport=self._transport,
            )
            logger.debug("Created new Ollama HTTP client with connection pooling")

        return self._client

    async def close(self) -> None:
        """Close the pooled client (call at the end of a run)."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed Ollama HTTP client")

    async def post_generate(
        self,
        model: str,
        prompt: str,
        options: Optional[dict] = None,
        timeout: float = 180.0,
        keep_alive: Optional[str] = None,
    ) -> tuple[str, Optional[str]]:
        """Call Ollama /api/generate endpoint (non-streaming).

        Returns:
            Tuple of (response text, error message or None)
        """
        client = await self.get_client()

        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
        }

        if options:
            payload["options"] = options

        if keep_alive:
            payload["keep_alive"] = keep_alive

        try:
            response = await client.post(
                "/api/generate",
                json=payload,
                timeout=timeout,
            )
            response.raise_for_status()
            result = response.json()
        except httpx.TimeoutException:
            return "", f"Timeout after {timeout}s"
        except httpx.HTTPStatusError as e:
            return "", f"Ollama API error: {e.response.status_code} {e.response.reason_phrase}"
        except httpx.HTTPError as e:
            return "", f"HTTP error: {e}"
        except ValueError as e:
            return "", f"Invalid JSON from Ollama: {e}"

        if "response" not in result:
            return "", "Ollama API response missing 'response' field"

        return result["response"], None
