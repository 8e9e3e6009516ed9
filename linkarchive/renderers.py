"""Page renderers: turn a URL into HTML.

Two interchangeable backends:
- BrowserRenderingRenderer: Cloudflare Browser Rendering API (runs JavaScript)
- HttpRenderer: plain GET with httpx (static pages only)
"""

import logging
from typing import Optional, Protocol
from urllib.parse import urljoin

import httpx

from linkarchive.config import Settings, settings
from linkarchive.errors import ExtractionError
from linkarchive.url_validator import validate_url

logger = logging.getLogger(__name__)

CLOUDFLARE_API_BASE = "https://api.cloudflare.com/client/v4/accounts"
MAX_REDIRECTS = 5


class Renderer(Protocol):
    """Anything that can render a URL to HTML."""

    async def render(self, url: str) -> str:
        ...


class BrowserRenderingRenderer:
    """Render pages through Cloudflare's Browser Rendering REST API."""

    def __init__(
        self,
        api_token: str,
        account_id: str = "",
        api_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 60.0,
    ):
        self.api_token = api_token
        self.api_url = (
            api_url or f"{CLOUDFLARE_API_BASE}/{account_id}/browser-rendering"
        ).rstrip("/")
        self._client = client
        self._timeout = timeout

    async def render(self, url: str) -> str:
        """POST the URL to the /content endpoint and return the rendered HTML."""
        payload = {
            "url": url,
            "gotoOptions": {"waitUntil": "networkidle0"},
        }
        headers = {"Authorization": f"Bearer {self.api_token}"}

        try:
            if self._client is not None:
                response = await self._client.post(
                    f"{self.api_url}/content", json=payload, headers=headers
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(
                        f"{self.api_url}/content", json=payload, headers=headers
                    )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ExtractionError(
                f"Browser Rendering API error: {e.response.status_code} {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise ExtractionError(f"Browser Rendering API request failed: {e}") from e
        except ValueError as e:
            raise ExtractionError(f"Browser Rendering API returned invalid JSON: {e}") from e

        if isinstance(data, dict) and data.get("success") is False:
            raise ExtractionError(f"Browser Rendering API error: {data.get('errors')}")

        result = data.get("result") if isinstance(data, dict) else None
        if isinstance(result, dict):
            html = result.get("html") or ""
        elif isinstance(result, str):
            html = result
        else:
            html = data.get("html", "") if isinstance(data, dict) else ""

        return html


class HttpRenderer:
    """Fetch raw HTML with a plain GET (no JavaScript execution)."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        user_agent: str = settings.USER_AGENT,
        validate: bool = True,
    ):
        self._client = client
        self._timeout = timeout
        self._validate = validate
        self._headers = {
            "User-Agent": user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }

    async def render(self, url: str) -> str:
        """GET the page, validating the URL and every redirect target first."""
        if self._client is not None:
            return await self._fetch(self._client, url)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._fetch(client, url)

    async def _fetch(self, client: httpx.AsyncClient, url: str) -> str:
        for _ in range(MAX_REDIRECTS + 1):
            if self._validate:
                try:
                    await validate_url(url)
                except ValueError as e:
                    raise ExtractionError(str(e)) from e

            try:
                response = await client.get(url, headers=self._headers, follow_redirects=False)
            except httpx.HTTPError as e:
                raise ExtractionError(f"HTTP error: {e}") from e

            if response.is_redirect:
                url = urljoin(url, response.headers["Location"])
                logger.debug(f"Redirected to {url}")
                continue

            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ExtractionError(f"HTTP error: {e}") from e
            return response.text

        raise ExtractionError(f"Too many redirects (more than {MAX_REDIRECTS})")


def build_renderer(config: Settings = settings) -> Renderer:
    """Construct the renderer selected by RENDERER."""
    if config.RENDERER == "cloudflare":
        return BrowserRenderingRenderer(
            api_token=config.CLOUDFLARE_API_TOKEN,
            account_id=config.CLOUDFLARE_ACCOUNT_ID,
            api_url=config.CLOUDFLARE_BROWSER_RENDERING_API_URL or None,
            timeout=config.HTTP_TIMEOUT,
        )
    if config.RENDERER == "http":
        return HttpRenderer(timeout=config.HTTP_TIMEOUT, user_agent=config.USER_AGENT)
    raise ValueError(f"Unknown RENDERER: {config.RENDERER}")
