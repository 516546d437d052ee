"""Summary client module."""

from summarizer.client.openai_client import (
    ProviderFn,
    SummaryClient,
    SummaryError,
    SummaryHTTPStatusError,
    extract_output_text,
)

__all__ = [
    "ProviderFn",
    "SummaryClient",
    "SummaryError",
    "SummaryHTTPStatusError",
    "extract_output_text",
]
