"""Text normalization shared by extraction and scoring."""

from __future__ import annotations

import re
import unicodedata
from typing import List

MINIMUM_CONTENT_LENGTH = 80
MINIMUM_UNIQUE_TOKENS = MINIMUM_CONTENT_LENGTH // 8

_WHITESPACE_RE = re.compile(r"\s+")


def clean_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value).strip()


def normalize_for_comparison(value: str) -> str:
    """NFKC, whitespace-collapsed, lowercased."""
    return clean_whitespace(unicodedata.normalize("NFKC", value)).lower()


def split_tokens(value: str) -> List[str]:
    """Split on Unicode punctuation and whitespace."""
    tokens: List[str] = []
    current: List[str] = []
    for ch in value:
        if ch.isspace() or unicodedata.category(ch).startswith("P"):
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(ch)
    if current:
        tokens.append("".join(current))
    return tokens


def has_sufficient_content(value: str | None, *, normalize: bool = True) -> bool:
    """At least 80 chars after trimming and 10 distinct word-like tokens."""
    if not value:
        return False
    trimmed = value.strip()
    if len(trimmed) < MINIMUM_CONTENT_LENGTH:
        return False
    fold = normalize_for_comparison if normalize else str.lower
    unique = {token for token in (fold(t) for t in split_tokens(trimmed)) if len(token) > 1}
    return len(unique) >= max(1, MINIMUM_UNIQUE_TOKENS)
