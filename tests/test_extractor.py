"""Tests for the extractor chain and metadata fallback."""

from __future__ import annotations

from news_brief.config import ExtractConfig
from news_brief.fetch import extractor
from news_brief.fetch.extractor import available_extractors, extract_content, get_extractor, page_metadata_text

LOREM = ("Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 9).strip()


def test_extract_content_uses_main_content_when_long_enough():
    html = f"<html><body><nav>Menu</nav><article><p>{LOREM}</p></article></body></html>"

    content = extract_content(html, "https://publisher.example/a", ExtractConfig())

    assert content is not None
    assert content.method == "main_content"
    assert content.text == LOREM
    assert content.source_url == "https://publisher.example/a"


def test_extract_content_falls_back_to_normalizer_for_short_main_content():
    html = "<html><body><div><p>Only a short note on this page.</p></div><span>extra words</span></body></html>"

    content = extract_content(html, "https://publisher.example/b", ExtractConfig())

    assert content is not None
    assert content.method == "normalizer"
    assert content.text == "Only a short note on this page. extra words"


def test_extract_content_returns_none_when_everything_is_empty():
    assert extract_content("<html><body></body></html>", "https://x.example/", ExtractConfig()) is None


def test_extract_content_skips_unknown_methods():
    cfg = ExtractConfig(primary="bogus", fallback=["normalizer"], min_chars=1)

    content = extract_content("<p>hello world</p>", "https://x.example/", cfg)

    assert content is not None
    assert content.method == "normalizer"


def test_extract_content_keeps_first_result_reaching_floor(monkeypatch):
    calls = []

    def fake_trafilatura(html):
        calls.append("trafilatura")
        return "t" * 500

    monkeypatch.setattr(extractor, "_extract_trafilatura", fake_trafilatura)
    cfg = ExtractConfig(primary="trafilatura", fallback=["normalizer"])

    content = extract_content("<p>ignored</p>", "https://x.example/", cfg)

    assert content.method == "trafilatura"
    assert calls == ["trafilatura"]


def test_get_extractor_registry():
    assert set(available_extractors()) == {"main_content", "normalizer", "readability", "trafilatura"}
    for name in available_extractors():
        assert callable(get_extractor(name, ExtractConfig()))
    assert get_extractor("nope") is None


def test_page_metadata_text_prefers_long_description():
    description = "A detailed description of the story that is comfortably longer than one hundred characters in total length."
    html = (
        "<html><head><title>Markets rally</title>"
        f'<meta name="description" content="{description}"></head><body></body></html>'
    )

    assert page_metadata_text(html) == f"Markets rally. {description}"


def test_page_metadata_text_joins_short_parts():
    html = (
        "<html><head><title>Markets rally</title>"
        '<meta property="og:description" content="Stocks up."></head></html>'
    )

    assert page_metadata_text(html) == "Markets rally. Stocks up."


def test_page_metadata_text_empty():
    assert page_metadata_text("") == ""
    assert page_metadata_text("<html><body></body></html>") == ""
