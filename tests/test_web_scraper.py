"""Tests for page rendering and HTML extraction."""

import base64
import json

import httpx
import pytest

from linkarchive.config import Settings
from linkarchive.errors import ExtractionError
from linkarchive.renderers import (
    BrowserRenderingRenderer,
    HttpRenderer,
    build_renderer,
)
from linkarchive.web_scraper import WebScraper, html_to_markdown, title_from_url
from tests.fakes import FakeRenderer

URL = "https://www.example.com/posts/hello"

ARTICLE_HTML = """
<html>
<head>
  <title>Hello World</title>
  <meta name="description" content="A friendly greeting.">
  {meta}
  <script>var tracking = "should not appear";</script>
  <style>body {{ color: red; }}</style>
</head>
<body>
  <nav><img src="/nav-hero.jpg" width="900" height="500"></nav>
  <article>
    <h1>Hello World</h1>
    <p>This is the <strong>first</strong> paragraph.</p>
    {images}
    <ul><li>One</li><li>Two</li></ul>
    <pre><code>print("hi")</code></pre>
  </article>
</body>
</html>
"""


def _html(meta: str = "", images: str = "") -> str:
    return ARTICLE_HTML.format(meta=meta, images=images)


class TestHtmlToMarkdown:
    def test_converts_structure(self):
        markdown = html_to_markdown(_html())
        assert "# Hello World" in markdown
        assert "**first**" in markdown
        assert "- One" in markdown
        assert 'print("hi")' in markdown

    def test_drops_scripts_and_styles(self):
        markdown = html_to_markdown(_html())
        assert "tracking" not in markdown
        assert "color: red" not in markdown

    def test_collapses_blank_lines(self):
        markdown = html_to_markdown("<p>a</p><p></p><div></div><p></p><p>b</p>")
        assert "\n\n\n" not in markdown


def test_title_from_url():
    assert title_from_url("https://www.example.com/x") == "example.com"
    assert title_from_url("https://blog.example.org") == "blog.example.org"


class TestWebScraper:
    async def test_open_graph_image_wins(self):
        html = _html(
            meta='<meta property="og:image" content="/og.png">'
            '<meta name="twitter:image" content="https://cdn.example.com/tw.png">',
            images='<img src="/body.jpg" width="800" height="400">',
        )
        renderer = FakeRenderer(html)
        content = await WebScraper(renderer).scrape(URL)

        assert renderer.calls == [URL]
        assert content.title == "Hello World"
        assert content.description == "A friendly greeting."
        assert content.thumbnail_url == "https://www.example.com/og.png"
        assert content.url == URL
        assert "# Hello World" in content.markdown

    async def test_twitter_image_used_without_open_graph(self):
        html = _html(meta='<meta name="twitter:image" content="https://cdn.example.com/tw.png">')
        content = await WebScraper(FakeRenderer(html)).scrape(URL)
        assert content.thumbnail_url == "https://cdn.example.com/tw.png"

    async def test_falls_back_to_best_body_image(self):
        html = _html(images='<img src="/photos/hero.jpg" width="800" height="400" class="hero">')
        content = await WebScraper(FakeRenderer(html)).scrape(URL)
        assert content.thumbnail_url == "https://www.example.com/photos/hero.jpg"

    async def test_falls_back_to_placeholder(self):
        content = await WebScraper(FakeRenderer(_html())).scrape(URL)
        prefix = "data:image/svg+xml;base64,"
        assert content.thumbnail_url.startswith(prefix)
        svg = base64.b64decode(content.thumbnail_url[len(prefix):]).decode("utf-8")
        assert ">H</text>" in svg

    async def test_title_falls_back_to_hostname(self):
        html = "<html><body><p>Just text.</p></body></html>"
        content = await WebScraper(FakeRenderer(html)).scrape(URL)
        assert content.title == "example.com"
        assert content.description is None

    @pytest.mark.parametrize("html", ["", "   \n"])
    async def test_empty_render_raises(self, html):
        with pytest.raises(ExtractionError):
            await WebScraper(FakeRenderer(html)).scrape(URL)

    async def test_page_without_readable_content_raises(self):
        html = "<html><body><script>app()</script></body></html>"
        with pytest.raises(ExtractionError, match="No content"):
            await WebScraper(FakeRenderer(html)).scrape(URL)


class TestBrowserRenderingRenderer:
    def _renderer(self, handler):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return BrowserRenderingRenderer(
            api_token="secret",
            api_url="https://render.test/browser-rendering/",
            client=client,
        )

    async def test_posts_url_and_returns_html(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "result": "<html>ok</html>"})

        html = await self._renderer(handler).render(URL)

        assert html == "<html>ok</html>"
        assert seen["url"] == "https://render.test/browser-rendering/content"
        assert seen["auth"] == "Bearer secret"
        assert seen["body"]["url"] == URL
        assert seen["body"]["gotoOptions"] == {"waitUntil": "networkidle0"}

    async def test_accepts_html_inside_result_object(self):
        def handler(request):
            return httpx.Response(200, json={"success": True, "result": {"html": "<p>x</p>"}})

        assert await self._renderer(handler).render(URL) == "<p>x</p>"

    async def test_http_error_becomes_extraction_error(self):
        def handler(request):
            return httpx.Response(429, text="rate limited")

        with pytest.raises(ExtractionError, match="429"):
            await self._renderer(handler).render(URL)

    async def test_unsuccessful_response_raises(self):
        def handler(request):
            return httpx.Response(200, json={"success": False, "errors": [{"message": "boom"}]})

        with pytest.raises(ExtractionError, match="boom"):
            await self._renderer(handler).render(URL)

    async def test_invalid_json_raises(self):
        def handler(request):
            return httpx.Response(200, text="<not json>")

        with pytest.raises(ExtractionError):
            await self._renderer(handler).render(URL)


class TestHttpRenderer:
    async def test_returns_body(self):
        def handler(request):
            assert "LinkArchive" in request.headers["User-Agent"]
            return httpx.Response(200, text="<html><body>Hi</body></html>")

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        renderer = HttpRenderer(client=client, user_agent="LinkArchive-test", validate=False)
        assert await renderer.render(URL) == "<html><body>Hi</body></html>"

    async def test_error_status_raises(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500)))
        renderer = HttpRenderer(client=client, validate=False)
        with pytest.raises(ExtractionError):
            await renderer.render(URL)

    async def test_private_address_rejected(self):
        renderer = HttpRenderer(client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))))
        with pytest.raises(ExtractionError, match="internal"):
            await renderer.render("http://127.0.0.1/admin")

    async def test_follows_relative_redirect(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            if request.url.path == "/start":
                return httpx.Response(302, headers={"Location": "/final"})
            return httpx.Response(200, text="<html>done</html>")

        renderer = HttpRenderer(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        assert await renderer.render("http://93.184.216.34/start") == "<html>done</html>"
        assert seen == ["http://93.184.216.34/start", "http://93.184.216.34/final"]

    async def test_redirect_to_internal_address_rejected(self):
        requested = []

        def handler(request):
            requested.append(request.url.host)
            return httpx.Response(301, headers={"Location": "http://127.0.0.1/admin"})

        renderer = HttpRenderer(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        with pytest.raises(ExtractionError, match="internal"):
            await renderer.render("http://93.184.216.34/start")
        assert requested == ["93.184.216.34"]

    async def test_redirect_loop_gives_up(self):
        def handler(request):
            return httpx.Response(302, headers={"Location": "/again"})

        renderer = HttpRenderer(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)), validate=False)
        with pytest.raises(ExtractionError, match="Too many redirects"):
            await renderer.render(URL)


def test_build_renderer():
    config = Settings()
    config.RENDERER = "http"
    assert isinstance(build_renderer(config), HttpRenderer)

    config.RENDERER = "cloudflare"
    config.CLOUDFLARE_API_TOKEN = "token"
    config.CLOUDFLARE_ACCOUNT_ID = "acct"
    config.CLOUDFLARE_BROWSER_RENDERING_API_URL = ""
    renderer = build_renderer(config)
    assert isinstance(renderer, BrowserRenderingRenderer)
    assert renderer.api_url.endswith("/acct/browser-rendering")

    config.RENDERER = "carrier-pigeon"
    with pytest.raises(ValueError):
        build_renderer(config)
