"""Summarizer module - OpenAI client and settings."""

from summarizer.client.openai_client import (
    ProviderFn,
    SummaryClient,
    SummaryError,
    SummaryHTTPStatusError,
)
from summarizer.settings import SummarySettings, get_summary_settings, reset_summary_settings_cache

__all__ = [
    "ProviderFn",
    "SummaryClient",
    "SummaryError",
    "SummaryHTTPStatusError",
    "SummarySettings",
    "get_summary_settings",
    "reset_summary_settings_cache",
]
