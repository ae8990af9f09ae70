"""
Core data types and errors.

This package holds the value types and the exception taxonomy used
throughout the resolution and summarization stages.
"""

from .errors import (
    CredentialError,
    ExtractionEmpty,
    FetchFailure,
    InputError,
    NewsBriefError,
    ProviderEmptyResult,
    ProviderError,
    ProviderSchemaError,
)
from .types import (
    ArticleReference,
    CandidateUrlSet,
    ExtractedContent,
    SummaryOutcome,
    SummaryRequest,
    SummaryResult,
)

__all__ = [
    "ArticleReference",
    "CandidateUrlSet",
    "ExtractedContent",
    "SummaryOutcome",
    "SummaryRequest",
    "SummaryResult",
    "NewsBriefError",
    "InputError",
    "ExtractionEmpty",
    "FetchFailure",
    "CredentialError",
    "ProviderError",
    "ProviderSchemaError",
    "ProviderEmptyResult",
]
