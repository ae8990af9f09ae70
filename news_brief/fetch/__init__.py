"""
Article fetching and extraction.

This package handles HTTP fetching and turning fetched HTML into
article text.
"""

from .extractor import available_extractors, extract_content, get_extractor, page_metadata_text
from .fetcher import FetchResult, build_client, fetch_html
from .main_content import MainContentExtractor
from .normalizer import collapse_whitespace, html_to_text

__all__ = [
    "FetchResult",
    "build_client",
    "fetch_html",
    "extract_content",
    "get_extractor",
    "available_extractors",
    "page_metadata_text",
    "MainContentExtractor",
    "html_to_text",
    "collapse_whitespace",
]
