"""
Caller-facing operations.

``NewsBriefService`` exposes the two inbound operations:
- ``resolve_and_summarize(url)``: intermediary link to one-line summary
- ``summarize_text(text)``: supplied text to one-line summary

Both return a ``SummaryOutcome`` holding either the summary or a
one-line error message. Every call is bounded by
``SummaryConfig.deadline_seconds`` covering resolution, fetching and the
model call together.
"""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
import logging
from typing import Awaitable

import httpx

from .config import AppConfig, SummarizerSettings
from .core.errors import FetchFailure, InputError, NewsBriefError
from .core.types import ExtractedContent, SummaryOutcome
from .fetch.fetcher import build_client, fetch_html
from .fetch.normalizer import html_to_text
from .llm.providers.base import SummaryProvider
from .resolve.navigation import BrowsingContext, PlaywrightBrowsingContext, RenderedNavigator, playwright_available
from .resolve.pipeline import ContentResolutionPipeline
from .resolve.scanner import is_http_url
from .summarizer import SummarizationEngine
from .utils.logging import log_event, redact_secret

logger = logging.getLogger(__name__)


class NewsBriefService:
    """Resolve intermediary links and summarize articles.

    Args:
        cfg: Application configuration
        client: HTTP client to use; a fresh one is built per call when None
        provider: Summary provider; built from ``cfg.provider`` when None
        browsing_context: Rendered-navigation backend. When None and
            ``cfg.resolve.render_fallback`` is set, Playwright is used if
            it is installed
        llm_logger: Optional JSONL logger for provider responses
    """

    def __init__(
        self,
        cfg: AppConfig,
        client: httpx.AsyncClient | None = None,
        provider: SummaryProvider | None = None,
        browsing_context: BrowsingContext | None = None,
        llm_logger: logging.Logger | None = None,
    ):
        self.cfg = cfg
        self.client = client
        self.provider = provider
        self.browsing_context = browsing_context
        self.llm_logger = llm_logger

    async def resolve_and_summarize(
        self,
        intermediary_url: str,
        settings: SummarizerSettings | None = None,
    ) -> SummaryOutcome:
        settings = settings or self.cfg.summarizer_settings()
        return await self._bounded(self._resolve_and_summarize(intermediary_url, settings), settings)

    async def summarize_text(self, text: str, settings: SummarizerSettings | None = None) -> SummaryOutcome:
        settings = settings or self.cfg.summarizer_settings()
        return await self._bounded(self._summarize_text(text, settings), settings)

    async def resolve(self, intermediary_url: str) -> ExtractedContent:
        """Resolve a link to article text without calling the model."""
        async with AsyncExitStack() as stack:
            client = await self._client(stack)
            pipeline = ContentResolutionPipeline(client, self.cfg, await self._navigator(stack))
            return await asyncio.wait_for(
                pipeline.resolve_content(intermediary_url),
                timeout=self.cfg.summary.deadline_seconds,
            )

    async def _resolve_and_summarize(self, intermediary_url: str, settings: SummarizerSettings) -> SummaryOutcome:
        async with AsyncExitStack() as stack:
            client = await self._client(stack)
            if settings.deep_fetch:
                pipeline = ContentResolutionPipeline(client, self.cfg, await self._navigator(stack))
                content = await pipeline.resolve_content(intermediary_url)
            else:
                content = await self._visible_text(client, intermediary_url)
            engine = SummarizationEngine(client, self.cfg, self.provider, self.llm_logger)
            summary = await engine.summarize(content.text, settings)
            return SummaryOutcome(summary=summary, source_url=content.source_url)

    async def _summarize_text(self, text: str, settings: SummarizerSettings) -> SummaryOutcome:
        async with AsyncExitStack() as stack:
            client = await self._client(stack)
            engine = SummarizationEngine(client, self.cfg, self.provider, self.llm_logger)
            summary = await engine.summarize(text, settings)
            return SummaryOutcome(summary=summary)

    async def _visible_text(self, client: httpx.AsyncClient, url: str) -> ExtractedContent:
        url = (url or "").strip()
        if not url:
            raise InputError("Missing URL")
        if not is_http_url(url):
            raise InputError(f"Not an http(s) URL: {url}")
        page = await fetch_html(client, url, self.cfg.fetch)
        if not page.ok:
            raise FetchFailure(url, page.error)
        text = html_to_text(page.text or "")
        if not text:
            raise InputError("No text to summarize")
        return ExtractedContent(text=text, source_url=page.url, method="normalizer")

    async def _bounded(self, call: Awaitable[SummaryOutcome], settings: SummarizerSettings) -> SummaryOutcome:
        deadline = self.cfg.summary.deadline_seconds
        try:
            return await asyncio.wait_for(call, timeout=deadline)
        except asyncio.TimeoutError:
            message = f"Timed out after {deadline:g} seconds"
            log_event(logger, message, level=logging.WARNING, event="deadline_exceeded")
            return SummaryOutcome(error=message)
        except NewsBriefError as exc:
            message = _one_line(redact_secret(str(exc), settings.api_key))
            log_event(
                logger,
                "Summarization failed",
                level=logging.WARNING,
                event="summarize_failed",
                error_type=type(exc).__name__,
                error=message,
            )
            return SummaryOutcome(error=message)

    async def _client(self, stack: AsyncExitStack) -> httpx.AsyncClient:
        if self.client is not None:
            return self.client
        return await stack.enter_async_context(build_client(self.cfg.fetch))

    async def _navigator(self, stack: AsyncExitStack) -> RenderedNavigator | None:
        context = self.browsing_context
        if context is None:
            if not self.cfg.resolve.render_fallback:
                return None
            if not playwright_available():
                log_event(
                    logger,
                    "Rendered navigation requested but Playwright is not installed",
                    level=logging.WARNING,
                    event="render_unavailable",
                )
                return None
            try:
                context = await stack.enter_async_context(
                    PlaywrightBrowsingContext(headless=self.cfg.resolve.headless, user_agent=self.cfg.fetch.user_agent)
                )
            except Exception as exc:  # noqa: BLE001
                log_event(
                    logger,
                    "Could not start the rendering browser",
                    level=logging.WARNING,
                    event="render_unavailable",
                    error=f"{type(exc).__name__}: {exc}",
                )
                return None
        return RenderedNavigator(context, self.cfg.resolve)


def _one_line(message: str) -> str:
    return " ".join(message.split()) or "Unknown error"
