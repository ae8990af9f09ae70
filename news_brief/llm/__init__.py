"""Summary providers, prompt building and observability."""

from .prompts import SummaryPrompt, build_summary_prompt, trim_input
from .providers.base import SummaryProvider
from .providers.factory import available_providers, create_provider
from .providers.openai import OpenAIProvider
from .responses import ContentList, FlatText, ItemList, ProviderResponse, classify_response, extract_response_text
from .tracing import flush, record_span_error, set_span_output, setup_langfuse, start_span

__all__ = [
    "SummaryProvider",
    "OpenAIProvider",
    "create_provider",
    "available_providers",
    "SummaryPrompt",
    "build_summary_prompt",
    "trim_input",
    "ProviderResponse",
    "FlatText",
    "ItemList",
    "ContentList",
    "classify_response",
    "extract_response_text",
    "setup_langfuse",
    "flush",
    "start_span",
    "set_span_output",
    "record_span_error",
]
