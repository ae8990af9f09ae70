"""
One-line summarization of article text.

The engine builds a bounded prompt, hands it to the configured provider
and normalizes whatever comes back into a single line of at most
``max_output_chars`` characters.
"""

from __future__ import annotations

import logging

import httpx

from .config import AppConfig, SummarizerSettings
from .core.errors import InputError, ProviderEmptyResult
from .core.types import SummaryRequest, SummaryResult
from .llm.prompts import build_summary_prompt
from .llm.providers.base import SummaryProvider
from .llm.providers.factory import create_provider
from .llm.providers.openai import check_api_key
from .utils.logging import log_event

logger = logging.getLogger(__name__)

ELLIPSIS = "…"


def sanitize_one_line(text: str | None, max_chars: int = 200) -> str:
    """Collapse all whitespace to single spaces and bound the length.

    Longer results are cut and end with a single ellipsis character; the
    ellipsis counts toward ``max_chars``.
    """
    line = " ".join((text or "").split())
    if len(line) <= max_chars:
        return line
    return line[: max_chars - 1].rstrip() + ELLIPSIS


class SummarizationEngine:
    """Turn article text into a one-line summary.

    Args:
        client: Async HTTP client used for provider calls
        cfg: Application configuration (provider, summary bounds, logging)
        provider: Pre-built provider; built from ``cfg.provider`` when None
        llm_logger: Optional JSONL logger for provider responses
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        cfg: AppConfig,
        provider: SummaryProvider | None = None,
        llm_logger: logging.Logger | None = None,
    ):
        self.cfg = cfg
        self.provider = provider or create_provider(cfg.provider, client, cfg.logging, llm_logger)

    async def summarize(self, text: str, settings: SummarizerSettings) -> str:
        result = await self.summarize_result(text, settings)
        return result.text

    async def summarize_result(self, text: str, settings: SummarizerSettings) -> SummaryResult:
        if not text or not text.strip():
            raise InputError("No text to summarize")
        api_key = check_api_key(settings.api_key)

        prompt = build_summary_prompt(text, settings.system_prompt, self.cfg.summary)
        request = SummaryRequest(
            system_prompt=prompt.system,
            user_text=prompt.user,
            model_id=settings.model_id,
            api_key=api_key,
        )
        log_event(
            logger,
            "Summarizing",
            level=logging.DEBUG,
            event="summarize_start",
            input_chars=len(text),
            **settings.describe(),
        )
        raw = await self.provider.complete(request)
        summary = sanitize_one_line(raw, self.cfg.summary.max_output_chars)
        if not summary:
            raise ProviderEmptyResult("No summary returned by the model")
        log_event(logger, "Summary ready", event="summary_ready", model_id=settings.model_id, chars=len(summary))
        return SummaryResult(summary)
