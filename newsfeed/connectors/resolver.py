"""Resolve Google News redirect links to the publisher's article URL.

Stages, in order:
  1. article metadata page (timestamp + signature) then the batchexecute RPC
  2. headless browser navigation until the location leaves news.google.com
  3. the original link unchanged (method ``fallback``)

Every stage is bounded by its own timeout and failures never propagate.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Awaitable, Callable, Optional
from urllib.parse import quote, urlsplit

import httpx

from newsfeed.models.domain import ResolveResult

logger = logging.getLogger(__name__)

GOOGLE_NEWS_HOSTNAMES = frozenset({"news.google.com", "www.news.google.com"})
BATCHEXECUTE_ENDPOINT = "https://news.google.com/_/DotsSplashUi/data/batchexecute?rpcids=Fbv4je"
ARTICLE_META_ENDPOINT = "https://news.google.com/articles/"

BATCHEXECUTE_TIMEOUT_SECONDS = 2.0
ARTICLE_META_TIMEOUT_SECONDS = 5.0
BROWSER_NAVIGATION_TIMEOUT_MS = 20_000
BROWSER_REDIRECT_TIMEOUT_MS = 7_000

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/119.0 Safari/537.36"
)
_TIMESTAMP_RE = re.compile(r'data-n-a-ts="(\d+)"')
_SIGNATURE_RE = re.compile(r'data-n-a-sg="([^"]+)"')
_XSSI_PREFIX_RE = re.compile(r"^\)\]\}'\s*")
_HTTP_URL_RE = re.compile(r"^https?://")

BrowserResolver = Callable[[str], Awaitable[Optional[str]]]


def is_aggregator_url(url: str) -> bool:
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return False
    return bool(host) and host.lower() in GOOGLE_NEWS_HOSTNAMES


def extract_token(url: str) -> Optional[str]:
    """Last non-empty path segment of an aggregator URL."""
    if not is_aggregator_url(url):
        return None
    segments = [segment.strip() for segment in urlsplit(url).path.split("/") if segment.strip()]
    return segments[-1] if segments else None


def build_batchexecute_body(token: str, timestamp: Optional[str], signature: Optional[str]) -> str:
    locale_bundle = ["ja", "JP", ["WEB_TEST_1_0_0"], None, None, 1, 1, "JP:ja"]
    base_payload = [locale_bundle, "ja", "JP", 1, [2, 3, 4, 8], 1, 0, "655000234", 0, 0, None, 0]
    inner = ["garturlreq", base_payload, token]
    if timestamp and signature:
        inner.extend([timestamp, signature])
    outer = [["Fbv4je", json.dumps(inner, separators=(",", ":")), None, "generic"]]
    return "f.req=" + quote(json.dumps([outer], separators=(",", ":")), safe="")


def parse_batchexecute_response(raw: str) -> Optional[str]:
    """Find ``["wrb.fr", "Fbv4je", payload]`` and return the ``garturlres`` URL."""
    try:
        parsed = json.loads(_XSSI_PREFIX_RE.sub("", raw, count=1))
    except ValueError:
        return None
    if not isinstance(parsed, list):
        return None
    for entry in parsed:
        if not isinstance(entry, list) or len(entry) < 3:
            continue
        kind, identifier, payload = entry[0], entry[1], entry[2]
        if kind != "wrb.fr" or identifier != "Fbv4je" or payload is None:
            continue
        content = payload
        if isinstance(payload, str):
            try:
                content = json.loads(payload)
            except ValueError:
                continue
        if not isinstance(content, list) or len(content) < 2 or content[0] != "garturlres":
            continue
        target = content[1]
        if isinstance(target, str) and _HTTP_URL_RE.match(target):
            return target
    return None


async def resolve_with_browser(url: str) -> Optional[str]:
    """Navigate with headless Chromium and report where the redirect lands."""
    from playwright.async_api import TimeoutError as PlaywrightTimeoutError
    from playwright.async_api import async_playwright

    async def _block_heavy(route) -> None:  # noqa: ANN001
        if route.request.resource_type in ("image", "media", "font"):
            await route.abort()
        else:
            await route.continue_()

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        try:
            context = await browser.new_context(
                locale="ja-JP",
                timezone_id="Asia/Tokyo",
                user_agent=BROWSER_USER_AGENT,
                extra_http_headers={"Accept-Language": "ja,en;q=0.9", "Referer": "https://news.google.com/"},
            )
            page = await context.new_page()
            await page.route("**/*", _block_heavy)
            await page.goto(url, wait_until="domcontentloaded", timeout=BROWSER_NAVIGATION_TIMEOUT_MS)
            try:
                await page.wait_for_url(
                    lambda current: not is_aggregator_url(current),
                    timeout=BROWSER_REDIRECT_TIMEOUT_MS,
                )
            except PlaywrightTimeoutError:
                pass  # keep whatever location the page reached
            final_url = page.url
            await context.close()
        finally:
            await browser.close()

    if _HTTP_URL_RE.match(final_url) and not is_aggregator_url(final_url):
        return final_url
    return None


class GoogleNewsUrlResolver:
    """Callable resolver; ``await resolver(url)`` returns a ``ResolveResult``."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        browser_resolver: Optional[BrowserResolver] = resolve_with_browser,
    ) -> None:
        self._client = client
        self._browser_resolver = browser_resolver

    async def __call__(self, url: str) -> ResolveResult:
        return await self.resolve(url)

    async def resolve(self, url: str) -> ResolveResult:
        if not is_aggregator_url(url):
            return ResolveResult(url=url, method="fallback")

        token = extract_token(url)
        if token:
            try:
                resolved = await self._resolve_via_batchexecute(token)
            except Exception as exc:  # resolution degrades, never fails
                logger.debug("ingest.resolve.batchexecute_failed", extra={"url": url, "error": str(exc)})
                resolved = None
            if resolved:
                return ResolveResult(url=resolved, method="batchexecute")

        if self._browser_resolver is not None:
            try:
                resolved = await self._browser_resolver(url)
            except Exception as exc:  # resolution degrades, never fails
                logger.debug("ingest.resolve.browser_failed", extra={"url": url, "error": str(exc)})
                resolved = None
            if resolved:
                return ResolveResult(url=resolved, method="playwright")

        return ResolveResult(url=url, method="fallback")

    async def fetch_article_metadata(self, token: str) -> Optional[tuple[str, str]]:
        resp = await self._client.get(
            ARTICLE_META_ENDPOINT + quote(token, safe=""),
            params={"hl": "ja", "gl": "JP", "ceid": "JP:ja"},
            headers={
                "User-Agent": BROWSER_USER_AGENT,
                "Referer": "https://news.google.com/",
                "Accept-Language": "ja,en;q=0.9",
            },
            timeout=ARTICLE_META_TIMEOUT_SECONDS,
        )
        if not resp.is_success:
            return None
        text = resp.text
        ts = _TIMESTAMP_RE.search(text)
        sig = _SIGNATURE_RE.search(text)
        if not ts or not sig:
            return None
        return ts.group(1), sig.group(1)

    async def _resolve_via_batchexecute(self, token: str) -> Optional[str]:
        metadata = await self.fetch_article_metadata(token)
        if metadata is None:
            return None
        timestamp, signature = metadata
        resp = await self._client.post(
            BATCHEXECUTE_ENDPOINT,
            content=build_batchexecute_body(token, timestamp, signature),
            headers={
                "Content-Type": "application/x-www-form-urlencoded;charset=utf-8",
                "Referer": "https://news.google.com/",
            },
            timeout=BATCHEXECUTE_TIMEOUT_SECONDS,
        )
        if not resp.is_success:
            return None
        return parse_batchexecute_response(resp.text)
