"""HTML heuristics for article bodies, lead images and "read more" links."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Comment

from newsfeed.utils.text import clean_whitespace

MAX_CONTENT_LENGTH = 10_000

_ARTICLE_START_PATTERNS = (
    re.compile(r"""<div[^>]+class=["'][^"']*article-body[^"']*["'][^>]*>""", re.IGNORECASE),
    re.compile(r"""<div[^>]+class=["'][^"']*body__inner[^"']*["'][^>]*>""", re.IGNORECASE),
    re.compile(r"<article[^>]*>", re.IGNORECASE),
    re.compile(r"<main[^>]*>", re.IGNORECASE),
)
_ARTICLE_END_PATTERNS = (
    re.compile(r"""<div[^>]+class=["'][^"']*article-related[^"']*["'][^>]*>""", re.IGNORECASE),
    re.compile(r"""<div[^>]+class=["'][^"']*relatedArticles[^"']*["'][^>]*>""", re.IGNORECASE),
    re.compile(r"""<div[^>]+class=["'][^"']*articleFooter[^"']*["'][^>]*>""", re.IGNORECASE),
    re.compile(r"<footer[^>]*>", re.IGNORECASE),
    re.compile(r"</article>", re.IGNORECASE),
    re.compile(r"</main>", re.IGNORECASE),
)
READ_MORE_PARAM = "display=1"
_READ_MORE_LABEL_RE = re.compile(r"続きを読む|read more")
_DISPLAY_HREF_RE = re.compile(r"""href=["']([^"']+display=1[^"']*)["']""", re.IGNORECASE)


def strip_html(html: str) -> str:
    """Drop scripts, styles, comments and tags; decode entities; collapse whitespace."""
    soup = BeautifulSoup(html, "html.parser")
    for node in soup(["script", "style", "noscript"]):
        node.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    return clean_whitespace(soup.get_text(separator=" "))


def sanitize_content(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    stripped = strip_html(value)
    if stripped:
        return stripped
    normalized = clean_whitespace(value)
    return normalized or None


def limit_length(value: Optional[str], limit: int = MAX_CONTENT_LENGTH) -> Optional[str]:
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    return trimmed[:limit]


def extract_article_section(html: str) -> Optional[str]:
    """Raw HTML slice from the first known body container to its earliest end marker."""
    for pattern in _ARTICLE_START_PATTERNS:
        start = pattern.search(html)
        if start is None:
            continue
        rest = html[start.start():]
        end_index = -1
        for end_pattern in _ARTICLE_END_PATTERNS:
            end = end_pattern.search(rest)
            if end is not None and (end_index == -1 or end.start() < end_index):
                end_index = end.start()
        snippet = rest if end_index == -1 else rest[:end_index]
        if snippet.strip():
            return snippet
    return None


def extract_primary_image(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    for attr, name in (("property", "og:image"), ("name", "twitter:image")):
        tag = soup.find("meta", attrs={attr: name})
        if tag is None:
            continue
        content = (tag.get("content") or "").strip()
        if content:
            return content
    return None


def find_read_more_url(html: str, base_url: str) -> Optional[str]:
    """Absolute URL of the full-article link, if the page has one."""
    soup = BeautifulSoup(html, "html.parser")
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"]
        if READ_MORE_PARAM not in href:
            continue
        label = clean_whitespace(anchor.get_text(separator=" ")).lower()
        if not label or _READ_MORE_LABEL_RE.search(label):
            return urljoin(base_url, href)

    match = _DISPLAY_HREF_RE.search(html)
    if match:
        return urljoin(base_url, match.group(1))
    return None
