"""
Regex-based HTML to plain text conversion.

This is the last-resort extractor: it needs no document parser and never
raises, so it always produces something from any markup.
"""

from __future__ import annotations

import re

MAX_TEXT_CHARS = 20000

_SCRIPT_RE = re.compile(r"<script[\s\S]*?</script\s*>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[\s\S]*?</style\s*>", re.IGNORECASE)
_BLOCK_CLOSE_RE = re.compile(
    r"</(?:p|div|h[1-6]|li|ul|ol|section|article|header|footer|br)\s*>|<br\s*/?>",
    re.IGNORECASE,
)
_TAG_RE = re.compile(r"<[^>]+>")
_ENTITIES = {
    "&nbsp;": " ",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&apos;": "'",
}
_ENTITY_RE = re.compile("|".join(re.escape(name) for name in _ENTITIES), re.IGNORECASE)
_WS_RE = re.compile(r"\s+")


def html_to_text(html: str | None, max_chars: int = MAX_TEXT_CHARS) -> str:
    """Convert raw HTML into a single run of plain text.

    Script and style blocks are dropped with their content, block-level
    closing tags become line breaks, remaining tags are stripped, a fixed
    set of entities is decoded, whitespace is collapsed to single spaces
    and the result is truncated to ``max_chars``.

    Decoded ``&lt;``/``&gt;`` never survive as markup: any angle bracket
    left after tag stripping is dropped, so the output is free of ``<``
    and ``>``.

    Args:
        html: Raw markup (None and non-strings yield "")
        max_chars: Output length cap

    Returns:
        Plain text, possibly empty
    """
    if not html or not isinstance(html, str):
        return ""
    text = _SCRIPT_RE.sub(" ", html)
    text = _STYLE_RE.sub(" ", text)
    text = _BLOCK_CLOSE_RE.sub("\n", text)
    text = _TAG_RE.sub(" ", text)
    text = _ENTITY_RE.sub(lambda m: _ENTITIES.get(m.group(0).lower(), m.group(0)), text)
    text = text.replace("<", " ").replace(">", " ")
    text = _WS_RE.sub(" ", text).strip()
    return text[:max_chars].rstrip()


def collapse_whitespace(text: str | None) -> str:
    """Collapse every whitespace run (newlines included) into one space."""
    if not text:
        return ""
    return _WS_RE.sub(" ", text).strip()
