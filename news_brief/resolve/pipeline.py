"""
Intermediary URL to article text.

Order of operations for one call:
1. Resolve the publisher URL (probe, then rendered navigation)
2. If resolved: fetch it and extract; short results fall back to the
   normalizer
3. Otherwise fetch the intermediary page, scan it for candidate article
   URLs and try them in order
4. As a last resort, extract from the intermediary page itself (body
   text, then title and description metadata)

Per-URL failures never abort the call; only exhausting every strategy
raises.
"""

from __future__ import annotations

import logging

import httpx

from ..config import AppConfig
from ..core.errors import ExtractionEmpty, FetchFailure, InputError
from ..core.types import ArticleReference, ExtractedContent
from ..fetch.extractor import extract_content, page_metadata_text
from ..fetch.fetcher import fetch_html
from ..llm.tracing import record_span_error, set_span_output, start_span
from ..utils.logging import log_event
from .navigation import RenderedNavigator
from .redirect import RedirectResolver
from .scanner import CandidateUrlScanner, UrlPolicy, is_http_url

logger = logging.getLogger(__name__)


class ContentResolutionPipeline:
    """Turn an intermediary URL into clean article text.

    Args:
        client: Async HTTP client shared by every request of this pipeline
        cfg: Application configuration
        navigator: Rendered-navigation fallback; None disables it
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        cfg: AppConfig,
        navigator: RenderedNavigator | None = None,
    ):
        self.client = client
        self.cfg = cfg
        self.policy = UrlPolicy(cfg.resolve.intermediary_hosts, cfg.resolve.blocked_hosts)
        self.scanner = CandidateUrlScanner(self.policy)
        self.resolver = RedirectResolver(client, cfg.fetch, self.policy, navigator)

    async def resolve_text(self, intermediary_url: str) -> str:
        content = await self.resolve_content(intermediary_url)
        return content.text

    async def resolve_content(self, intermediary_url: str) -> ExtractedContent:
        url = (intermediary_url or "").strip()
        if not url:
            raise InputError("Missing URL")
        if not is_http_url(url):
            raise InputError(f"Not an http(s) URL: {url}")

        with start_span("news_brief.resolve", kind="chain", input_value=url) as span:
            try:
                content = await self._resolve(ArticleReference(url))
            except Exception as exc:
                record_span_error(span, exc)
                raise
            set_span_output(span, {"source_url": content.source_url, "method": content.method,
                                   "length": content.length})
        return content

    async def _resolve(self, reference: ArticleReference) -> ExtractedContent:
        url = reference.intermediary_url
        is_intermediary = self.policy.is_intermediary(url)

        resolved = await self.resolver.resolve(url, allow_rendered=is_intermediary)
        if resolved and resolved != url:
            reference.resolve_to(resolved)
            content = await self._fetch_and_extract(resolved)
            if content is not None:
                return self._done(reference, content)

        page = await fetch_html(self.client, url, self.cfg.fetch)
        if not page.ok:
            log_event(logger, "Intermediary fetch failed", level=logging.WARNING,
                      event="fetch_failed", url=url, error=page.error)
            raise FetchFailure(url, page.error)

        if is_intermediary:
            content = await self._try_candidates(page.text or "")
            if content is not None:
                return self._done(reference, content)

        content = extract_content(page.text or "", url, self.cfg.extract)
        if content is None or content.length < self.cfg.extract.min_chars:
            metadata = page_metadata_text(page.text or "")
            if metadata and (content is None or len(metadata) > content.length):
                content = ExtractedContent(text=metadata, source_url=url, method="metadata")
        if content is None:
            raise ExtractionEmpty()
        return self._done(reference, content)

    async def _try_candidates(self, html: str) -> ExtractedContent | None:
        candidates = self.scanner.scan(html)
        attempts = [c for c in candidates if self.policy.looks_like_article(c)]
        for candidate in attempts[: self.cfg.resolve.max_candidates]:
            content = await self._fetch_and_extract(candidate)
            if content is not None:
                return content
        return None

    async def _fetch_and_extract(self, url: str) -> ExtractedContent | None:
        page = await fetch_html(self.client, url, self.cfg.fetch)
        if not page.ok:
            log_event(logger, "Fetch failed", level=logging.DEBUG, event="fetch_failed",
                      url=url, status_code=page.status_code, error=page.error)
            return None
        return extract_content(page.text or "", url, self.cfg.extract)

    def _done(self, reference: ArticleReference, content: ExtractedContent) -> ExtractedContent:
        log_event(
            logger,
            "Content resolved",
            event="content_resolved",
            intermediary_url=reference.intermediary_url,
            resolved_url=reference.resolved_url,
            source_url=content.source_url,
            method=content.method,
            length=content.length,
        )
        return content
