"""
DOM-scoring main content extraction.

The extractor parses the page with BeautifulSoup, drops non-content
elements, and scores candidate blocks by how much non-link text and how
many paragraphs they hold. The densest block wins.
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, FeatureNotFound
from bs4.element import Tag

from .normalizer import collapse_whitespace

logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 30000
MIN_CANDIDATE_CHARS = 200
PARAGRAPH_WEIGHT = 50

NON_CONTENT_TAGS = [
    "script",
    "style",
    "nav",
    "header",
    "footer",
    "iframe",
    "form",
    "svg",
    "canvas",
    "noscript",
]

CONTENT_HINTS = [
    ".article-body",
    ".articleBody",
    ".post-content",
    ".entry-content",
    ".story-body",
    ".content__article-body",
    ".c-article-content",
    "#content",
    "#main",
    ".content",
    ".story",
    ".StoryBodyCompanionColumn",
]

CLUTTER_SELECTOR = (
    "aside, button, figure, figcaption, ul.share, div.share, div.ad, div.ads, "
    "div[class*='ad-'], div[id*='ad-']"
)


class MainContentExtractor:
    """Find the densest non-boilerplate block of a page.

    Args:
        parser: BeautifulSoup tree builder name. When the builder is not
            installed, extraction returns "" so callers fall back to the
            regex normalizer.
    """

    def __init__(self, parser: str = "html.parser", max_chars: int = MAX_TEXT_CHARS):
        self.parser = parser
        self.max_chars = max_chars

    @property
    def available(self) -> bool:
        try:
            BeautifulSoup("", self.parser)
        except FeatureNotFound:
            return False
        return True

    def extract(self, html: str | None) -> str:
        if not html or not self.available:
            return ""
        try:
            return self._extract(html)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Main content extraction failed: %s", exc)
            return ""

    def _extract(self, html: str) -> str:
        soup = BeautifulSoup(html, self.parser)
        for tag in soup(NON_CONTENT_TAGS):
            tag.decompose()

        best = _pick_best(_preferred_candidates(soup))
        if best is None:
            best = _pick_best(soup.find_all(["article", "main", "section", "div"]))
        if best is None:
            return ""

        for node in best.select(CLUTTER_SELECTOR):
            node.decompose()
        return _visible_text(best)[: self.max_chars].rstrip()


def score_element(el: Tag) -> int:
    """Score a block as non-link text length plus a bonus per paragraph.

    Blocks with fewer than ``MIN_CANDIDATE_CHARS`` characters score 0.
    """
    length = len(_visible_text(el))
    if length < MIN_CANDIDATE_CHARS:
        return 0
    link_len = sum(len(_visible_text(a)) for a in el.find_all("a"))
    paragraphs = len(el.find_all("p"))
    return (length - link_len) + paragraphs * PARAGRAPH_WEIGHT


def _preferred_candidates(soup: BeautifulSoup) -> list[Tag]:
    candidates: list[Tag] = []

    def push(el: Tag | None) -> None:
        if el is not None and not any(el is seen for seen in candidates):
            candidates.append(el)

    push(soup.find("article"))
    push(soup.find("main"))
    for el in soup.select('[role="main"]'):
        push(el)
    for selector in CONTENT_HINTS:
        for el in soup.select(selector):
            push(el)
    return candidates


def _pick_best(elements: list[Tag]) -> Tag | None:
    # Strict comparison keeps the first-discovered element on ties.
    best = None
    best_score = 0
    for el in elements:
        s = score_element(el)
        if s > best_score:
            best = el
            best_score = s
    return best


def _visible_text(el: Tag) -> str:
    return collapse_whitespace(el.get_text(" "))
