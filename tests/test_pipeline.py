"""Tests for the intermediary URL to article text pipeline."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from news_brief.config import AppConfig
from news_brief.core.errors import ExtractionEmpty, FetchFailure, InputError
from news_brief.resolve.pipeline import ContentResolutionPipeline

INTERMEDIARY = "https://news.google.com/rss/articles/CBMiabc"
ARTICLE = "https://publisher.example/2025/08/14/story-title"
LOREM = ("Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 9).strip()
ARTICLE_HTML = f"<html><body><nav>Sections</nav><article><p>{LOREM}</p></article></body></html>"


def _run(handler, url: str, cfg: AppConfig | None = None):
    async def run():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport, follow_redirects=True) as client:
            pipeline = ContentResolutionPipeline(client, cfg or AppConfig())
            return await pipeline.resolve_content(url)

    return asyncio.run(run())


def test_redirect_probe_then_main_content():
    def handler(request):
        if request.url.host == "news.google.com":
            return httpx.Response(302, headers={"location": ARTICLE})
        if str(request.url) == ARTICLE:
            return httpx.Response(200, text=ARTICLE_HTML)
        return httpx.Response(404)

    content = _run(handler, INTERMEDIARY)

    assert len(LOREM) >= 500
    assert content.text == LOREM
    assert content.method == "main_content"
    assert content.source_url == ARTICLE


def test_inline_json_candidate_is_fetched():
    intermediary_html = (
        "<html><head><title>Story</title></head><body>"
        '<script>window.__DATA = {"url": "https://publisher.example/news/abc"};</script>'
        "</body></html>"
    )
    requested = []

    def handler(request):
        requested.append(str(request.url))
        if request.url.host == "news.google.com":
            return httpx.Response(200, text=intermediary_html)
        if str(request.url) == "https://publisher.example/news/abc":
            return httpx.Response(200, text=ARTICLE_HTML)
        return httpx.Response(404)

    content = _run(handler, INTERMEDIARY)

    assert content.source_url == "https://publisher.example/news/abc"
    assert content.text == LOREM
    assert "https://publisher.example/news/abc" in requested


def test_failed_candidates_are_skipped():
    intermediary_html = (
        '<a href="https://gone.example/news/1">one</a>'
        '<a href="https://empty.example/news/2">two</a>'
        '<a href="https://publisher.example/news/3">three</a>'
    )

    def handler(request):
        host = request.url.host
        if host == "news.google.com":
            return httpx.Response(200, text=intermediary_html)
        if host == "gone.example":
            return httpx.Response(404)
        if host == "empty.example":
            return httpx.Response(200, text="<html><body></body></html>")
        return httpx.Response(200, text=ARTICLE_HTML)

    content = _run(handler, INTERMEDIARY)

    assert content.source_url == "https://publisher.example/news/3"


def test_candidate_limit_is_respected():
    links = "".join(f'<a href="https://site{i}.example/news/{i}">{i}</a>' for i in range(10))
    requested_hosts = []

    def handler(request):
        requested_hosts.append(request.url.host)
        if request.url.host == "news.google.com":
            return httpx.Response(200, text=f"<html><body>{links}</body></html>")
        return httpx.Response(500)

    cfg = AppConfig()
    cfg.resolve.max_candidates = 3
    _run(handler, INTERMEDIARY, cfg)

    candidate_hosts = {h for h in requested_hosts if h != "news.google.com"}
    assert candidate_hosts == {"site0.example", "site1.example", "site2.example"}


def test_falls_back_to_intermediary_metadata():
    description = "The central bank held rates steady on Wednesday while signaling that cuts may follow later this year. Markets were little changed."
    intermediary_html = (
        "<html><head><title>Rates on hold</title>"
        f'<meta name="description" content="{description}">'
        "</head><body></body></html>"
    )

    def handler(request):
        return httpx.Response(200, text=intermediary_html)

    content = _run(handler, INTERMEDIARY)

    assert content.source_url == INTERMEDIARY
    assert content.method == "metadata"
    assert content.text == f"Rates on hold. {description}"


def test_direct_article_url_is_extracted_in_place():
    requested = []

    def handler(request):
        requested.append(str(request.url))
        return httpx.Response(200, text=ARTICLE_HTML)

    content = _run(handler, ARTICLE)

    assert content.text == LOREM
    assert content.source_url == ARTICLE
    assert set(requested) == {ARTICLE}


def test_resolution_is_idempotent():
    def handler(request):
        if request.url.host == "news.google.com":
            return httpx.Response(302, headers={"location": ARTICLE})
        return httpx.Response(200, text=ARTICLE_HTML)

    assert _run(handler, INTERMEDIARY) == _run(handler, INTERMEDIARY)


def test_intermediary_fetch_failure_raises():
    def handler(request):
        return httpx.Response(503)

    with pytest.raises(FetchFailure, match="Failed to fetch"):
        _run(handler, INTERMEDIARY)


def test_empty_pages_raise_extraction_empty():
    def handler(request):
        return httpx.Response(200, text="<html><body></body></html>")

    with pytest.raises(ExtractionEmpty, match="Could not extract content"):
        _run(handler, INTERMEDIARY)


@pytest.mark.parametrize("url", ["", "   ", "ftp://publisher.example/news/abc", "not a url"])
def test_rejects_missing_or_invalid_urls(url):
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(InputError):
        _run(handler, url)


def test_unparseable_candidate_is_skipped():
    intermediary_html = (
        '<a href="https://publisher.example:badport/news/first-story">one</a>'
        '<a href="https://publisher.example/news/second-story">two</a>'
    )

    def handler(request):
        if request.url.host == "news.google.com":
            return httpx.Response(200, text=intermediary_html)
        if request.url.path == "/news/second-story":
            return httpx.Response(200, text=ARTICLE_HTML)
        return httpx.Response(404)

    content = _run(handler, INTERMEDIARY)

    assert content.source_url == "https://publisher.example/news/second-story"
    assert content.text == LOREM


def test_unparseable_input_url_is_rejected():
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(InputError, match="Not an http"):
        _run(handler, "https://publisher.example:badport/news/first-story")
