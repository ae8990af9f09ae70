"""Tests for the caller-facing service operations."""

from __future__ import annotations

import asyncio

import httpx

from news_brief.config import AppConfig, SummarizerSettings
from news_brief.core.errors import ProviderError
from news_brief.core.types import SummaryRequest
from news_brief.llm.providers.base import SummaryProvider
from news_brief.service import NewsBriefService

INTERMEDIARY = "https://news.google.com/rss/articles/CBMiabc"
ARTICLE = "https://publisher.example/2025/08/14/story-title"
LOREM = ("Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 9).strip()
ARTICLE_HTML = f"<html><body><article><p>{LOREM}</p></article></body></html>"
SETTINGS = SummarizerSettings(model_id="gpt-5-nano", api_key="sk-test-key", system_prompt="Be brief.")


class StubProvider(SummaryProvider):
    def __init__(self, reply: str = "A one-line summary.", delay: float = 0.0, error: Exception | None = None):
        self.reply = reply
        self.delay = delay
        self.error = error
        self.requests: list[SummaryRequest] = []

    async def complete(self, request: SummaryRequest) -> str:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


def _site(request: httpx.Request) -> httpx.Response:
    if request.url.host == "news.google.com":
        return httpx.Response(302, headers={"location": ARTICLE})
    if str(request.url) == ARTICLE:
        return httpx.Response(200, text=ARTICLE_HTML)
    return httpx.Response(404)


def _call(method: str, arg: str, provider: SummaryProvider, handler=_site, cfg: AppConfig | None = None,
          settings: SummarizerSettings = SETTINGS):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True) as client:
            service = NewsBriefService(cfg or AppConfig(), client=client, provider=provider)
            return await getattr(service, method)(arg, settings)

    return asyncio.run(run())


def test_resolve_and_summarize_success():
    provider = StubProvider("  Markets   rallied.\n")

    outcome = _call("resolve_and_summarize", INTERMEDIARY, provider)

    assert outcome.ok
    assert outcome.summary == "Markets rallied."
    assert outcome.error is None
    assert outcome.source_url == ARTICLE
    assert LOREM[:50] in provider.requests[0].user_text


def test_resolve_and_summarize_reports_fetch_failure():
    def handler(request):
        return httpx.Response(500)

    outcome = _call("resolve_and_summarize", INTERMEDIARY, StubProvider(), handler=handler)

    assert not outcome.ok
    assert outcome.summary is None
    assert outcome.error.startswith("Failed to fetch")


def test_resolve_and_summarize_reports_missing_url():
    outcome = _call("resolve_and_summarize", "", StubProvider())

    assert outcome.error == "Missing URL"


def test_visible_text_path_skips_resolution():
    requested = []

    def handler(request):
        requested.append(str(request.url))
        return httpx.Response(200, text="<html><body><h1>Google News</h1><p>Headline text here.</p></body></html>")

    provider = StubProvider()
    settings = SummarizerSettings(model_id="gpt-5-nano", api_key="sk-test-key", deep_fetch=False)

    outcome = _call("resolve_and_summarize", INTERMEDIARY, provider, handler=handler, settings=settings)

    assert outcome.ok
    assert requested == [INTERMEDIARY]
    assert "Google News Headline text here." in provider.requests[0].user_text


def test_summarize_text_success_and_empty_input():
    assert _call("summarize_text", "Some article text.", StubProvider("Short.")).summary == "Short."

    outcome = _call("summarize_text", "  ", StubProvider())

    assert outcome.error == "No text to summarize"


def test_missing_api_key_is_reported():
    settings = SummarizerSettings(model_id="gpt-5-nano", api_key=None)

    outcome = _call("summarize_text", "Some article text.", StubProvider(), settings=settings)

    assert outcome.error == "API key not set"


def test_provider_error_is_single_line_and_scrubbed():
    provider = StubProvider(error=ProviderError("OpenAI error (401):\nbad key sk-test-key"))

    outcome = _call("summarize_text", "Some article text.", provider)

    assert outcome.error == "OpenAI error (401): bad key [REDACTED]"


def test_overall_deadline_is_enforced():
    cfg = AppConfig()
    cfg.summary.deadline_seconds = 0.05
    provider = StubProvider(delay=5.0)

    outcome = _call("summarize_text", "Some article text.", provider, cfg=cfg)

    assert outcome.error == "Timed out after 0.05 seconds"


def test_resolve_returns_content_without_model_call():
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(_site), follow_redirects=True) as client:
            provider = StubProvider()
            service = NewsBriefService(AppConfig(), client=client, provider=provider)
            return await service.resolve(INTERMEDIARY), provider

    content, provider = asyncio.run(run())

    assert content.source_url == ARTICLE
    assert content.text == LOREM
    assert provider.requests == []


def test_unparseable_candidate_does_not_escape_the_outcome():
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

    outcome = _call("resolve_and_summarize", INTERMEDIARY, StubProvider(), handler=handler)

    assert outcome.ok
    assert outcome.source_url == "https://publisher.example/news/second-story"


def test_unparseable_url_is_reported_as_error():
    provider = StubProvider()

    outcome = _call("resolve_and_summarize", "https://publisher.example:badport/news/first-story", provider)

    assert not outcome.ok
    assert outcome.error.startswith("Not an http(s) URL")
    assert provider.requests == []
