import httpx
import pytest
from fastapi.testclient import TestClient

from config.settings import Settings
from main import create_app
from utils.http_client import PageFetcher

_ARTICLE_HTML = """
<html>
  <head>
    <title>Fallback Title</title>
    <meta name="description" content="Fallback description">
    <meta property="og:title" content="Open Graph Title">
    <meta property="og:image" content="https://example.com/cover.png">
    <meta property="og:site_name" content="Example">
    <meta property="og:type" content="article">
    <meta name="twitter:card" content="summary_large_image">
    <meta name="twitter:title" content="Twitter Title">
  </head>
  <body><p>Hello</p></body>
</html>
"""


@pytest.fixture
def settings():
    return Settings(rate_limit_max=5, rate_limit_window_seconds=60)


@pytest.fixture
def pages():
    """Map of URL to (status, html) served by the fake transport"""
    return {}


@pytest.fixture
def transport(pages):
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url not in pages:
            raise httpx.ConnectError("[Errno -2] Name or service not known", request=request)
        status, html = pages[url]
        return httpx.Response(status, html=html)

    return httpx.MockTransport(handler)


@pytest.fixture
def app(settings, transport):
    app = create_app(settings)
    app.state.fetcher = PageFetcher(settings, transport=transport)
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def article_html():
    return _ARTICLE_HTML
