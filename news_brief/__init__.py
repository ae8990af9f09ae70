"""
News Brief - one-line summaries of news articles behind redirector links.

This package resolves aggregator links (such as news.google.com article
links) to the publisher's page, extracts the article text and asks a
language model for a single-sentence summary.

Main entry point is the CLI via `news-brief summarize` command.

Example:
    $ news-brief summarize "https://news.google.com/rss/articles/CBMi..."
"""

__all__ = ["__version__", "AppConfig", "load_config", "NewsBriefService", "SummaryOutcome"]
__version__ = "0.1.0"

from .config import AppConfig, load_config
from .core.types import SummaryOutcome
from .service import NewsBriefService
