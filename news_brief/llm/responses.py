"""
Parsing of structured-response API payloads.

Providers return summary text in one of several shapes:
- FlatText: a top-level ``output_text`` string
- ItemList: an ``output`` list of typed items, each holding content parts
- ContentList: a top-level ``content`` list of parts

``classify_response`` tags every shape present in a payload and
``extract_response_text`` tries them in that order, returning the first
non-empty text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

_TEXT_PART_TYPES = {"output_text", "summary_text", "text"}


@dataclass(frozen=True)
class FlatText:
    text: str


@dataclass(frozen=True)
class ItemList:
    items: tuple[Any, ...]


@dataclass(frozen=True)
class ContentList:
    parts: tuple[Any, ...]


ProviderResponse = Union[FlatText, ItemList, ContentList]


def classify_response(data: Any) -> list[ProviderResponse]:
    if not isinstance(data, dict):
        return []
    shapes: list[ProviderResponse] = []
    if isinstance(data.get("output_text"), str):
        shapes.append(FlatText(data["output_text"]))
    if isinstance(data.get("output"), list):
        shapes.append(ItemList(tuple(data["output"])))
    if isinstance(data.get("content"), list):
        shapes.append(ContentList(tuple(data["content"])))
    return shapes


def response_text(shape: ProviderResponse) -> str | None:
    if isinstance(shape, FlatText):
        return shape.text
    if isinstance(shape, ItemList):
        return _item_list_text(shape)
    if isinstance(shape, ContentList):
        return _first_part_text(shape.parts)
    raise TypeError(f"Unknown response shape: {type(shape).__name__}")


def extract_response_text(data: Any) -> str | None:
    for shape in classify_response(data):
        text = response_text(shape)
        if text and text.strip():
            return text
    return None


def is_incomplete(data: Any) -> bool:
    return isinstance(data, dict) and str(data.get("status", "")).lower() == "incomplete"


def chat_message_text(data: Any) -> str | None:
    """Message content of the first choice of a chat-shape response."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return _first_part_text(content)
    return None


def _item_list_text(shape: ItemList) -> str | None:
    for item in shape.items:
        if isinstance(item, dict) and item.get("type") == "message" and isinstance(item.get("content"), list):
            text = _first_part_text(item["content"])
            if text:
                return text
    # Reasoning-only or unusual items: join every text part found.
    parts = []
    for item in shape.items:
        if isinstance(item, dict) and isinstance(item.get("content"), list):
            for part in item["content"]:
                text = _part_text(part)
                if text:
                    parts.append(text)
    return " ".join(parts) if parts else None


def _first_part_text(parts: Any) -> str | None:
    for part in parts:
        if not isinstance(part, dict):
            continue
        if part.get("type") in _TEXT_PART_TYPES or isinstance(part.get("text"), str):
            text = _part_text(part)
            if text:
                return text
    return None


def _part_text(part: Any) -> str | None:
    if not isinstance(part, dict):
        return None
    for key in ("text", "value", "content"):
        value = part.get(key)
        if isinstance(value, str) and value:
            return value
    return None
