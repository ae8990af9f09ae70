"""
Rendered-navigation redirect detection.

Some redirector links only forward the reader through client-side
script, so no Location header is ever sent. When a browsing context is
available the link is opened in an isolated, inactive surface and its
URL is polled until it leaves the intermediary site.

The surface is always closed before returning. Running out of the wait
budget is a normal outcome (``TIMED_OUT``), not an error.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from dataclasses import dataclass
from enum import Enum
import importlib.util
import logging
import time
from typing import Any, Awaitable, Callable

from ..config import ResolveConfig
from ..utils.logging import log_event

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[Any]]


class NavigationStatus(str, Enum):
    REDIRECTED = "redirected"
    NO_REDIRECT = "no_redirect"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class NavigationResult:
    status: NavigationStatus
    url: str | None = None

    @property
    def redirected(self) -> bool:
        return self.status is NavigationStatus.REDIRECTED


class NavigationSurface(ABC):
    """A single opened page whose navigation state can be polled."""

    @abstractmethod
    async def current_url(self) -> str:
        raise NotImplementedError

    @abstractmethod
    async def ready_state(self) -> str:
        """Return "loading" or "complete"."""
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        raise NotImplementedError


class BrowsingContext(ABC):
    """Something that can open URLs in isolated, inactive surfaces."""

    @abstractmethod
    async def open(self, url: str) -> NavigationSurface:
        raise NotImplementedError


async def watch_navigation(
    surface: NavigationSurface,
    qualifies: Callable[[str], bool],
    cfg: ResolveConfig,
    clock: Clock = time.monotonic,
    sleep: Sleep = asyncio.sleep,
) -> NavigationResult:
    """Poll a surface until its URL qualifies, the page settles, or time runs out.

    After ``initial_delay_seconds`` the URL is checked every
    ``poll_interval_seconds`` while the page is loading. Once the page
    reports "complete", one extended ``settle_seconds`` wait catches
    delayed client-side redirects before the final check.
    """
    deadline = clock() + cfg.navigation_budget_seconds
    await sleep(cfg.initial_delay_seconds)
    while True:
        url = await surface.current_url()
        if qualifies(url):
            return NavigationResult(NavigationStatus.REDIRECTED, url)
        if await surface.ready_state() == "complete":
            await sleep(min(cfg.settle_seconds, max(0.0, deadline - clock())))
            url = await surface.current_url()
            if qualifies(url):
                return NavigationResult(NavigationStatus.REDIRECTED, url)
            return NavigationResult(NavigationStatus.NO_REDIRECT)
        if clock() + cfg.poll_interval_seconds > deadline:
            return NavigationResult(NavigationStatus.TIMED_OUT)
        await sleep(cfg.poll_interval_seconds)


class RenderedNavigator:
    """Open a URL in a browsing context and watch where it ends up."""

    def __init__(
        self,
        context: BrowsingContext,
        cfg: ResolveConfig,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        self.context = context
        self.cfg = cfg
        self.clock = clock
        self.sleep = sleep

    async def follow(self, url: str, qualifies: Callable[[str], bool]) -> NavigationResult:
        try:
            surface = await self.context.open(url)
        except Exception as exc:  # noqa: BLE001
            log_event(logger, "Could not open navigation surface", level=logging.WARNING,
                      event="navigation_open_failed", error=f"{type(exc).__name__}: {exc}")
            return NavigationResult(NavigationStatus.NO_REDIRECT)

        try:
            result = await watch_navigation(surface, qualifies, self.cfg, self.clock, self.sleep)
        except Exception as exc:  # noqa: BLE001
            log_event(logger, "Navigation polling failed", level=logging.WARNING,
                      event="navigation_failed", error=f"{type(exc).__name__}: {exc}")
            result = NavigationResult(NavigationStatus.NO_REDIRECT)
        finally:
            await _close_quietly(surface)

        log_event(logger, "Rendered navigation finished", level=logging.DEBUG,
                  event="navigation_done", status=result.status.value)
        return result


async def _close_quietly(surface: NavigationSurface) -> None:
    try:
        await surface.close()
    except Exception as exc:  # noqa: BLE001
        logger.debug("Closing navigation surface failed: %s", exc)


def playwright_available() -> bool:
    return importlib.util.find_spec("playwright") is not None


class PlaywrightSurface(NavigationSurface):
    def __init__(self, context: Any, page: Any):
        self._context = context
        self._page = page

    async def current_url(self) -> str:
        return self._page.url

    async def ready_state(self) -> str:
        try:
            state = await self._page.evaluate("document.readyState")
        except Exception:  # noqa: BLE001
            # The execution context is torn down mid-navigation.
            return "loading"
        return "complete" if state == "complete" else "loading"

    async def close(self) -> None:
        await self._context.close()


class PlaywrightBrowsingContext(BrowsingContext):
    """Chromium via Playwright. Use as an async context manager.

    Each ``open`` call gets a fresh browser context, so surfaces share no
    cookies or storage.
    """

    def __init__(self, headless: bool = True, user_agent: str | None = None):
        self.headless = headless
        self.user_agent = user_agent
        self._playwright = None
        self._browser = None

    async def __aenter__(self) -> "PlaywrightBrowsingContext":
        from playwright.async_api import async_playwright

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless)
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def open(self, url: str) -> NavigationSurface:
        if self._browser is None:
            raise RuntimeError("Browsing context is not started")
        context = await self._browser.new_context(user_agent=self.user_agent)
        try:
            page = await context.new_page()
            await page.goto(url, wait_until="commit")
        except Exception:
            await context.close()
            raise
        return PlaywrightSurface(context, page)
