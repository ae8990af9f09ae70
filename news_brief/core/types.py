"""
Core data types for news_brief.

This module defines the data structures passed between the resolution
and summarization stages:
- ArticleReference: An intermediary link and the publisher URL behind it
- ExtractedContent: Article text produced by an extractor
- CandidateUrlSet: Ordered, de-duplicated URLs mined from markup
- SummaryRequest: A bounded prompt ready to send to a provider
- SummaryResult: The sanitized one-line summary
- SummaryOutcome: What callers receive, a summary or an error message
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator


@dataclass
class ArticleReference:
    """An intermediary URL and, once known, the publisher URL it points to.

    Attributes:
        intermediary_url: The redirector link the caller started from
        resolved_url: The publisher-owned article URL, or None if unresolved
    """

    intermediary_url: str
    resolved_url: str | None = None

    def resolve_to(self, url: str) -> None:
        """Record the resolved URL. It may only be set once."""
        if self.resolved_url is not None:
            raise ValueError("resolved_url is already set")
        self.resolved_url = url

    @property
    def is_resolved(self) -> bool:
        return self.resolved_url is not None and self.resolved_url != self.intermediary_url


@dataclass(frozen=True)
class ExtractedContent:
    """Article text with the URL it was extracted from.

    Attributes:
        text: The extracted plain text, already truncated to its method's cap
        source_url: The page the text came from
        method: Name of the extractor that produced the text
    """

    text: str
    source_url: str
    method: str = "normalizer"

    @property
    def length(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class CandidateUrlSet:
    """URLs discovered in a page, in discovery order, de-duplicated exactly."""

    urls: tuple[str, ...] = ()

    @classmethod
    def from_iterable(cls, urls: Iterable[str]) -> "CandidateUrlSet":
        return cls(tuple(dict.fromkeys(urls)))

    def __iter__(self) -> Iterator[str]:
        return iter(self.urls)

    def __len__(self) -> int:
        return len(self.urls)

    def __contains__(self, url: object) -> bool:
        return url in self.urls

    def as_list(self) -> list[str]:
        return list(self.urls)


@dataclass(frozen=True)
class SummaryRequest:
    """A fully built provider request. The API key is hidden from repr."""

    system_prompt: str
    user_text: str
    model_id: str
    api_key: str = field(repr=False)


@dataclass(frozen=True)
class SummaryResult:
    """A sanitized one-line summary."""

    text: str


@dataclass
class SummaryOutcome:
    """Result returned to callers.

    Either summary will be populated (success) or error will be populated
    (failure), but never both.

    Attributes:
        summary: The one-line summary, or None on failure
        error: Human-readable one-line error message, or None on success
        source_url: The URL whose content was summarized, when known
    """

    summary: str | None = None
    error: str | None = None
    source_url: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.summary is not None
