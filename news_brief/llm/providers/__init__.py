from .base import SummaryProvider
from .factory import available_providers, create_provider
from .openai import OpenAIProvider, check_api_key, validate_header_value

__all__ = [
    "OpenAIProvider",
    "SummaryProvider",
    "available_providers",
    "check_api_key",
    "create_provider",
    "validate_header_value",
]
