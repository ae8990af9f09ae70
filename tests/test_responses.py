"""Tests for structured-response payload parsing."""

from __future__ import annotations

import pytest

from news_brief.llm.responses import (
    ContentList,
    FlatText,
    ItemList,
    chat_message_text,
    classify_response,
    extract_response_text,
    is_incomplete,
    response_text,
)


def test_flat_output_text():
    assert extract_response_text({"output_text": "Markets rallied."}) == "Markets rallied."


def test_item_list_prefers_message_item():
    data = {
        "output": [
            {"type": "reasoning", "content": [{"type": "reasoning_text", "text": "thinking"}]},
            {"type": "message", "content": [{"type": "output_text", "text": "Markets rallied."}]},
        ]
    }

    assert extract_response_text(data) == "Markets rallied."


def test_item_list_joins_parts_without_message_item():
    data = {"output": [{"type": "custom", "content": [{"text": "Part one."}, {"value": "Part two."}]}]}

    assert extract_response_text(data) == "Part one. Part two."


def test_generic_content_list():
    assert extract_response_text({"content": [{"type": "text", "text": "Hello."}]}) == "Hello."


def test_empty_flat_text_falls_through_to_next_shape():
    data = {
        "output_text": "",
        "output": [{"type": "message", "content": [{"type": "output_text", "text": "From items."}]}],
    }

    assert [type(shape) for shape in classify_response(data)] == [FlatText, ItemList]
    assert extract_response_text(data) == "From items."


def test_no_known_shape():
    assert classify_response({"id": "resp_1"}) == []
    assert extract_response_text({"id": "resp_1"}) is None
    assert extract_response_text(None) is None
    assert extract_response_text(["not", "a", "dict"]) is None


def test_response_text_rejects_unknown_shape():
    with pytest.raises(TypeError):
        response_text("plain string")  # type: ignore[arg-type]


def test_response_text_dispatch():
    assert response_text(FlatText("a")) == "a"
    assert response_text(ContentList(({"text": "b"},))) == "b"
    assert response_text(ItemList(())) is None


def test_is_incomplete():
    assert is_incomplete({"status": "incomplete"})
    assert not is_incomplete({"status": "completed"})
    assert not is_incomplete(None)


def test_chat_message_text():
    assert chat_message_text({"choices": [{"message": {"content": "Hi."}}]}) == "Hi."
    assert chat_message_text({"choices": [{"message": {"content": [{"type": "text", "text": "Parts."}]}}]}) == "Parts."
    assert chat_message_text({"choices": []}) is None
    assert chat_message_text({}) is None
