"""
Candidate article URL mining from raw markup.

Redirector pages often hide the publisher link in attributes, inline
scripts or JSON blobs. The scanner runs an ordered list of independent
strategies (each ``html -> Iterable[str]``) and admits every URL that
passes a host and path block list. Results keep discovery order and are
de-duplicated by exact string.

This is a heuristic: non-article pages can slip through and real article
links can be missed.
"""

from __future__ import annotations

import html as html_lib
import json
import logging
import re
from typing import Any, Callable, Iterable, Iterator, Sequence
from urllib.parse import urlsplit

from bs4 import BeautifulSoup
import httpx

from ..core.types import CandidateUrlSet
from ..utils.logging import log_event

logger = logging.getLogger(__name__)

Strategy = Callable[[str], Iterable[str]]

DISALLOWED_HOSTS = frozenset(
    {
        # Intermediary and its infrastructure
        "news.google.com",
        "google.com",
        "gstatic.com",
        "googleusercontent.com",
        "googleapis.com",
        "ampproject.org",
        # Analytics, ads and tracking
        "doubleclick.net",
        "googletagmanager.com",
        "google-analytics.com",
        "googlesyndication.com",
        "scorecardresearch.com",
        "facebook.net",
        # Social platforms
        "youtube.com",
        "twitter.com",
        "x.com",
        "t.co",
        "facebook.com",
        "instagram.com",
        "linkedin.com",
        "tiktok.com",
        "snapchat.com",
        "pinterest.com",
        "tumblr.com",
        "reddit.com",
        # Standards and specifications
        "w3.org",
        "schema.org",
        "ogp.me",
        "opengraphprotocol.org",
        "xml.org",
        "ietf.org",
        "rfc-editor.org",
        "whatwg.org",
        "ecma-international.org",
        "iso.org",
        # Documentation and developer tools
        "developer.mozilla.org",
        "docs.microsoft.com",
        "github.com",
        "gitlab.com",
        "stackoverflow.com",
        "stackexchange.com",
        "npmjs.com",
        "nodejs.org",
        "angular.dev",
        "angular.io",
        "react.dev",
        "reactjs.org",
        "vuejs.org",
        # CDNs
        "jsdelivr.net",
        "unpkg.com",
        "cdnjs.cloudflare.com",
        "bootcdn.net",
        # Browser and vendor support sites
        "addons.mozilla.org",
        "microsoftedge.microsoft.com",
        "support.apple.com",
        "support.microsoft.com",
    }
)

# google.de, google.co.uk, ...
_GOOGLE_TLD_RE = re.compile(r"(?:^|\.)google\.[a-z]{2,3}(?:\.[a-z]{2})?$")

BLOCKED_PATH_SEGMENTS = frozenset(
    {
        # Legal and policy
        "privacy",
        "terms",
        "policy",
        "policies",
        "legal",
        "license",
        "licenses",
        "disclaimer",
        "copyright",
        "trademark",
        "cookies",
        "privacy-policy",
        "cookie-policy",
        "terms-of-service",
        "terms-of-use",
        "terms-and-conditions",
        # Auth and account
        "sign-in",
        "sign-up",
        "log-in",
        "my-account",
        "login",
        "logout",
        "signin",
        "signout",
        "signup",
        "register",
        "account",
        "accounts",
        "profile",
        "settings",
        "preferences",
        "oauth",
        "auth",
        # Admin
        "admin",
        "wp-admin",
        "wp-login",
        "dashboard",
        # Documentation
        "docs",
        "documentation",
        "manual",
        "reference",
        "specification",
        "faq",
        "help",
        "support",
        # Assets and static files
        "static",
        "assets",
        "cdn",
        "fonts",
        "icons",
        "favicon",
        "sitemap",
        "robots",
        "wp-content",
        "wp-includes",
    }
)

ASSET_EXTENSION_RE = re.compile(
    r"\.(?:js|mjs|css|png|jpe?g|gif|webp|avif|svg|ico|json|xml|woff2?|ttf|eot|otf|map|mp4|webm|mp3)$",
    re.IGNORECASE,
)

ARTICLE_PATH_PATTERNS = [
    re.compile(r"/\d{4}/\d{2}/\d{2}/"),
    re.compile(r"/(?:article|articles|story|stories|news|post|posts|blog)/"),
    re.compile(r"/[a-z]{2,}/\d{4}/"),
    re.compile(r"/[a-z]{2,}/[a-z]{2,}/"),
]

MIN_ARTICLE_PATH_CHARS = 5

_SEGMENT_SUFFIX_RE = re.compile(r"\.(?:html?|php|aspx?)$", re.IGNORECASE)


def host_of(url: str) -> str | None:
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return host.lower().rstrip(".") if host else None


def host_matches(host: str, domain: str) -> bool:
    """True when host equals domain or is a subdomain of it."""
    domain = domain.lower()
    return host == domain or host.endswith("." + domain)


class UrlPolicy:
    """Admission rules for candidate article URLs.

    Args:
        intermediary_hosts: Redirector domains (always blocked)
        blocked_hosts: Extra hosts to block on top of ``DISALLOWED_HOSTS``
    """

    def __init__(self, intermediary_hosts: Sequence[str] = (), blocked_hosts: Sequence[str] = ()):
        self.intermediary_hosts = tuple(h.lower() for h in intermediary_hosts)
        self.blocked = DISALLOWED_HOSTS.union(h.lower() for h in blocked_hosts).union(
            self.intermediary_hosts
        )

    def is_blocked_host(self, host: str | None) -> bool:
        if not host:
            return True
        if _GOOGLE_TLD_RE.search(host):
            return True
        return any(host_matches(host, domain) for domain in self.blocked)

    def is_intermediary(self, url: str) -> bool:
        host = host_of(url)
        if not host:
            return False
        return any(host_matches(host, domain) for domain in self.intermediary_hosts)

    @staticmethod
    def is_blocked_path(path: str) -> bool:
        if ASSET_EXTENSION_RE.search(path):
            return True
        for segment in path.lower().split("/"):
            if _SEGMENT_SUFFIX_RE.sub("", segment) in BLOCKED_PATH_SEGMENTS:
                return True
        return False

    def admits(self, url: str) -> bool:
        """Two-stage admission: host block list, then path block list."""
        if not is_http_url(url):
            return False
        if self.is_blocked_host(host_of(url)):
            return False
        try:
            path = urlsplit(url).path or ""
        except ValueError:
            return False
        return not self.is_blocked_path(path)

    def looks_like_article(self, url: str) -> bool:
        """Admission plus a path heuristic for article pages.

        Date or section-style paths qualify; otherwise the path must be
        longer than ``MIN_ARTICLE_PATH_CHARS`` and contain letters.
        """
        if not self.admits(url):
            return False
        path = urlsplit(url).path or ""
        if any(pattern.search(path) for pattern in ARTICLE_PATH_PATTERNS):
            return True
        return len(path) > MIN_ARTICLE_PATH_CHARS and bool(re.search(r"[a-zA-Z]", path))


def is_http_url(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return False
    # Ports, hosts and characters httpx cannot send.
    try:
        httpx.URL(url)
    except httpx.InvalidURL:
        return False
    return True


# Strategies ---------------------------------------------------------------

_ATTRIBUTE_RE = re.compile(
    r"""\b(?:href|data-url|data-href|data-link)\s*=\s*(["'])(.*?)\1""",
    re.IGNORECASE | re.DOTALL,
)
_LITERAL_URL_RE = re.compile(r"""https?://[^\s"'<>\\`]+""", re.IGNORECASE)
_TRAILING_PUNCT = ".,;:!?)]}"
_JSON_PAIR_RE = re.compile(r'"(?:url|href|link)"\s*:\s*"((?:[^"\\]|\\.)*)"', re.IGNORECASE)
_LD_JSON_RE = re.compile(
    r"""<script[^>]*type\s*=\s*["']application/ld\+json["'][^>]*>([\s\S]*?)</script\s*>""",
    re.IGNORECASE,
)
_JSON_URL_KEYS = {"url", "href", "link"}
_EXTERNAL_ATTR_RE = re.compile(r"""\bdata-external-url\s*=\s*(["'])(.*?)\1""", re.IGNORECASE)
_SCRIPT_NAV_RE = re.compile(
    r"""(?:window\.open|location\.(?:href|replace|assign))\s*(?:=|\()\s*["'`](https?://[^"'`]+)["'`]""",
    re.IGNORECASE,
)
_REFRESH_URL_RE = re.compile(r"url\s*=\s*['\"]?([^'\";]+)", re.IGNORECASE)


def attribute_urls(html: str) -> Iterator[str]:
    """Values of href/data-url/data-href/data-link attributes."""
    for match in _ATTRIBUTE_RE.finditer(html):
        yield html_lib.unescape(match.group(2)).strip()


def literal_urls(html: str) -> Iterator[str]:
    """Any absolute http(s) URL literal anywhere in the markup."""
    for match in _LITERAL_URL_RE.finditer(html):
        yield html_lib.unescape(match.group(0)).rstrip(_TRAILING_PUNCT)


def json_urls(html: str) -> Iterator[str]:
    """JSON-shaped url/href/link pairs, including JSON-LD script blocks."""
    for match in _JSON_PAIR_RE.finditer(html):
        value = _json_unescape(match.group(1))
        if value:
            yield value
    for match in _LD_JSON_RE.finditer(html):
        try:
            data = json.loads(match.group(1))
        except ValueError:
            continue
        yield from _walk_json_urls(data)


def meta_urls(html: str) -> Iterator[str]:
    """``<link rel="canonical">`` and ``<meta property="og:url">`` values."""
    soup = BeautifulSoup(html, "html.parser")
    for link in soup.find_all("link", href=True):
        if "canonical" in _rel_values(link):
            yield str(link["href"]).strip()
    for meta in soup.find_all("meta", attrs={"property": "og:url"}):
        if meta.get("content"):
            yield str(meta["content"]).strip()


def redirect_hint_urls(html: str) -> Iterator[str]:
    """Meta refresh targets and AMP alternates."""
    soup = BeautifulSoup(html, "html.parser")
    for meta in soup.find_all("meta", attrs={"http-equiv": re.compile("^refresh$", re.I)}):
        match = _REFRESH_URL_RE.search(str(meta.get("content") or ""))
        if match:
            yield match.group(1).strip()
    for link in soup.find_all("link", href=True):
        if "amphtml" in _rel_values(link):
            yield str(link["href"]).strip()


def script_navigation_urls(html: str) -> Iterator[str]:
    """``data-external-url`` attributes and ``window.open``/``location`` targets."""
    for match in _EXTERNAL_ATTR_RE.finditer(html):
        yield html_lib.unescape(match.group(2)).strip()
    for match in _SCRIPT_NAV_RE.finditer(html):
        yield html_lib.unescape(match.group(1)).strip()


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    attribute_urls,
    literal_urls,
    json_urls,
    meta_urls,
    redirect_hint_urls,
    script_navigation_urls,
)


class CandidateUrlScanner:
    """Run the strategy battery over raw markup and admit plausible URLs."""

    def __init__(
        self,
        policy: UrlPolicy | None = None,
        strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    ):
        self.policy = policy or UrlPolicy()
        self.strategies = tuple(strategies)

    def scan(self, html: str | None) -> CandidateUrlSet:
        if not html:
            return CandidateUrlSet()
        found: dict[str, None] = {}
        for strategy in self.strategies:
            try:
                urls = list(strategy(html))
            except Exception as exc:  # noqa: BLE001
                logger.debug("Strategy %s failed: %s", strategy.__name__, exc)
                continue
            for url in urls:
                if url and url not in found and self.policy.admits(url):
                    found[url] = None
        candidates = CandidateUrlSet(tuple(found))
        log_event(
            logger,
            "Candidate URLs scanned",
            level=logging.DEBUG,
            event="candidates_scanned",
            count=len(candidates),
        )
        return candidates


def scan_candidates(html: str, policy: UrlPolicy | None = None) -> CandidateUrlSet:
    return CandidateUrlScanner(policy).scan(html)


def _rel_values(tag: Any) -> list[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [str(value).lower() for value in rel]


def _json_unescape(raw: str) -> str:
    try:
        return str(json.loads(f'"{raw}"')).strip()
    except ValueError:
        return raw.replace("\\/", "/").strip()


def _walk_json_urls(data: Any) -> Iterator[str]:
    if isinstance(data, dict):
        for key, value in data.items():
            if key.lower() in _JSON_URL_KEYS and isinstance(value, str):
                yield value.strip()
            else:
                yield from _walk_json_urls(value)
    elif isinstance(data, list):
        for item in data:
            yield from _walk_json_urls(item)
