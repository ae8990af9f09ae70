"""
HTML content extraction with multiple fallback strategies.

This module provides a chain of extraction methods:
1. main_content: DOM scoring of candidate blocks (default)
2. normalizer: regex tag stripping, never fails (default fallback)
3. trafilatura: purpose-built article extraction (optional)
4. readability: Mozilla's readability algorithm (optional)

Each method's output is capped independently; a result shorter than the
configured floor falls through to the next method.
"""

from __future__ import annotations

import logging
from typing import Callable

from bs4 import BeautifulSoup
import trafilatura
from readability import Document

from ..config import ExtractConfig
from ..core.types import ExtractedContent
from .main_content import MAX_TEXT_CHARS as MAIN_CONTENT_MAX_CHARS, MainContentExtractor
from .normalizer import MAX_TEXT_CHARS as NORMALIZER_MAX_CHARS, collapse_whitespace, html_to_text

logger = logging.getLogger(__name__)

Extractor = Callable[[str], str]


def extract_content(html: str, source_url: str, cfg: ExtractConfig) -> ExtractedContent | None:
    """Extract article text from HTML using the configured chain.

    The primary method runs first; if its text is shorter than
    ``cfg.min_chars`` the fallbacks run in order. The last method with any
    text wins when none reaches the floor.

    Args:
        html: The HTML content to extract text from
        source_url: The URL the HTML was fetched from
        cfg: Extraction settings naming the primary and fallback methods

    Returns:
        ExtractedContent, or None if every method produced empty text

    Examples:
        >>> extract_content(html, "https://publisher.example/story", ExtractConfig())
        ExtractedContent(text="Article content here...", ...)
    """
    order = [cfg.primary] + [name for name in cfg.fallback if name != cfg.primary]
    best: ExtractedContent | None = None
    for method in order:
        extractor = get_extractor(method, cfg)
        if extractor is None:
            logger.warning("Unknown extraction method: %s", method)
            continue
        text = extractor(html)
        if not text:
            continue
        best = ExtractedContent(text=text, source_url=source_url, method=method)
        if len(text) >= cfg.min_chars:
            return best
        logger.debug("Extractor %s returned %d chars, below floor", method, len(text))
    return best


def get_extractor(name: str, cfg: ExtractConfig | None = None) -> Extractor | None:
    """Get the extractor function for a given method name.

    Args:
        name: The name of the extraction method
        cfg: Extraction settings (used for the parser name)

    Returns:
        The corresponding extractor function, or None if name is unrecognized
    """
    if name == "main_content":
        parser = cfg.parser if cfg is not None else "html.parser"
        return MainContentExtractor(parser=parser).extract
    if name == "normalizer":
        return html_to_text
    if name == "trafilatura":
        return _extract_trafilatura
    if name == "readability":
        return _extract_readability
    return None


def available_extractors() -> list[str]:
    return ["main_content", "normalizer", "readability", "trafilatura"]


def _extract_trafilatura(html: str) -> str:
    """Extract article content using trafilatura."""
    text = trafilatura.extract(html) or ""
    return collapse_whitespace(text)[:MAIN_CONTENT_MAX_CHARS]


def _extract_readability(html: str) -> str:
    """Extract article content using Mozilla's readability algorithm.

    Readability returns simplified HTML, which is flattened with the
    regex normalizer.
    """
    try:
        content_html = Document(html).summary()
    except Exception as exc:  # noqa: BLE001
        logger.debug("Readability failed: %s", exc)
        return ""
    return html_to_text(content_html, max_chars=MAIN_CONTENT_MAX_CHARS)


_MIN_DESCRIPTION_CHARS = 100


def page_metadata_text(html: str) -> str:
    """Build a short text from a page's title and description meta tags.

    Used when a page has no extractable body, e.g. a redirector page that
    only carries the headline and a blurb.
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    title = collapse_whitespace(soup.title.get_text(" ")) if soup.title else ""
    descriptions = []
    for attrs in ({"name": "description"}, {"property": "og:description"}):
        tag = soup.find("meta", attrs=attrs)
        if tag is not None and tag.get("content"):
            descriptions.append(collapse_whitespace(str(tag["content"])))

    for description in descriptions:
        if len(description) >= _MIN_DESCRIPTION_CHARS:
            if title and title not in description:
                return f"{title}. {description}"
            return description

    parts = [title] + descriptions
    return ". ".join(part for part in parts if part)[:NORMALIZER_MAX_CHARS]
