"""
Resolution of intermediary links to publisher URLs.

Two strategies are tried in order:
1. HTTP probe: request the link with redirects disabled and read the
   Location header (retried once with the intermediary referrer)
2. Rendered navigation: open the link in a browsing context and watch
   for a client-side redirect (only when a context is available)

``None`` means "no publisher URL found; use the intermediary content
directly". It is not an error.
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin

import httpx

from ..config import FetchConfig
from ..fetch.fetcher import page_headers
from ..utils.logging import log_event
from .navigation import NavigationResult, NavigationStatus, RenderedNavigator
from .scanner import UrlPolicy, host_of, is_http_url

logger = logging.getLogger(__name__)


class RedirectResolver:
    """Find the publisher URL behind an intermediary link.

    Args:
        client: Shared async HTTP client
        fetch_cfg: Header and referrer settings
        policy: Article admission rules
        navigator: Rendered-navigation fallback, or None when no browsing
            context is available
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        fetch_cfg: FetchConfig,
        policy: UrlPolicy,
        navigator: RenderedNavigator | None = None,
    ):
        self.client = client
        self.fetch_cfg = fetch_cfg
        self.policy = policy
        self.navigator = navigator

    async def resolve(self, intermediary_url: str, allow_rendered: bool = True) -> str | None:
        resolved = await self.probe(intermediary_url)
        if resolved:
            log_event(logger, "Redirect resolved by probe", event="redirect_probe", url=resolved)
            return resolved

        if not allow_rendered or self.navigator is None:
            return None

        result = await self.navigate(intermediary_url)
        if result.redirected:
            log_event(logger, "Redirect resolved by navigation", event="redirect_navigation", url=result.url)
            return result.url
        # No redirect and a timeout both mean "use the intermediary page".
        log_event(
            logger,
            "No redirect detected",
            level=logging.DEBUG,
            event="redirect_none",
            status=result.status.value,
        )
        return None

    async def probe(self, intermediary_url: str) -> str | None:
        """Read the Location header of a non-following request.

        The first attempt uses default headers; the second adds the
        intermediary referrer. A location is only accepted when it looks
        like an article URL.
        """
        for with_referrer in (False, True):
            location = await self._probe_once(intermediary_url, with_referrer)
            if location and self.policy.looks_like_article(location) and location != intermediary_url:
                return location
            if location:
                log_event(
                    logger,
                    "Probe location rejected",
                    level=logging.DEBUG,
                    event="redirect_rejected",
                    url=location,
                )
        return None

    async def navigate(self, intermediary_url: str) -> NavigationResult:
        if self.navigator is None:
            return NavigationResult(NavigationStatus.NO_REDIRECT)
        return await self.navigator.follow(
            intermediary_url,
            lambda current: self.left_intermediary(intermediary_url, current),
        )

    def left_intermediary(self, intermediary_url: str, current_url: str | None) -> bool:
        """True once a surface URL differs from the link and is off the intermediary site."""
        if not current_url or current_url == intermediary_url or not is_http_url(current_url):
            return False
        host = host_of(current_url)
        if host is None or self.policy.is_intermediary(current_url):
            return False
        if _site_of(host) == _site_of(host_of(intermediary_url) or ""):
            return False
        return not self.policy.is_blocked_host(host)

    async def _probe_once(self, url: str, with_referrer: bool) -> str | None:
        try:
            resp = await self.client.get(
                url,
                headers=page_headers(self.fetch_cfg, with_referrer=with_referrer),
                follow_redirects=False,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("Redirect probe failed for %s: %s", url, exc)
            return None
        if not 300 <= resp.status_code < 400:
            return None
        location = resp.headers.get("location")
        if not location:
            return None
        return urljoin(url, location)


def _site_of(host: str) -> str:
    # Last two labels: news.google.com -> google.com
    return ".".join(host.split(".")[-2:])
