"""
HTTP page fetching for the resolution pipeline.

Pages are fetched with a shared ``httpx.AsyncClient``. Each URL gets a
default request first and, when that fails, one retry carrying a Referer
header that simulates arrival from the intermediary site. Failures are
reported in the returned FetchResult rather than raised.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import httpx

from ..config import FetchConfig
from ..utils.logging import log_event

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


def build_client(cfg: FetchConfig) -> httpx.AsyncClient:
    """Create the async HTTP client shared by one pipeline invocation."""
    return httpx.AsyncClient(
        timeout=cfg.timeout_seconds,
        headers={"User-Agent": cfg.user_agent},
        follow_redirects=True,
        trust_env=cfg.trust_env,
    )


def page_headers(cfg: FetchConfig, with_referrer: bool = False) -> dict[str, str]:
    headers = {"Accept": cfg.accept}
    if with_referrer:
        headers["Referer"] = cfg.referrer
    return headers


async def fetch_html(client: httpx.AsyncClient, url: str, cfg: FetchConfig) -> FetchResult:
    """Fetch a page's HTML, retrying once with the intermediary referrer.

    Network errors and non-2xx statuses are treated alike. When both
    attempts fail, the first attempt's error is reported.

    Args:
        client: The async HTTP client to use
        url: The URL to fetch
        cfg: Fetch settings (headers, referrer)

    Returns:
        FetchResult with text on success or error message on failure
    """
    first = await _fetch_once(client, url, page_headers(cfg))
    if first.ok:
        return first
    log_event(
        logger,
        "Fetch failed, retrying with referrer",
        level=logging.DEBUG,
        event="fetch_retry",
        url=url,
        error=first.error,
    )
    second = await _fetch_once(client, url, page_headers(cfg, with_referrer=True))
    if second.ok:
        return second
    return first


async def _fetch_once(client: httpx.AsyncClient, url: str, headers: dict[str, str]) -> FetchResult:
    try:
        resp = await client.get(url, headers=headers, follow_redirects=True)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        return FetchResult(url=url, status_code=None, text=None, error=f"{type(exc).__name__}: {exc}")
    if not resp.is_success:
        return FetchResult(
            url=url,
            status_code=resp.status_code,
            text=None,
            error=f"Fetch failed ({resp.status_code})",
        )
    return FetchResult(url=str(resp.url), status_code=resp.status_code, text=resp.text, error=None)
