"""
Intermediary link resolution.

This package finds the publisher article behind a redirector link and
turns it into text.
"""

from .navigation import (
    BrowsingContext,
    NavigationResult,
    NavigationStatus,
    NavigationSurface,
    PlaywrightBrowsingContext,
    RenderedNavigator,
    playwright_available,
    watch_navigation,
)
from .pipeline import ContentResolutionPipeline
from .redirect import RedirectResolver
from .scanner import CandidateUrlScanner, UrlPolicy, scan_candidates

__all__ = [
    "BrowsingContext",
    "CandidateUrlScanner",
    "ContentResolutionPipeline",
    "NavigationResult",
    "NavigationStatus",
    "NavigationSurface",
    "PlaywrightBrowsingContext",
    "RedirectResolver",
    "RenderedNavigator",
    "UrlPolicy",
    "playwright_available",
    "scan_candidates",
    "watch_navigation",
]
