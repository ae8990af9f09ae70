"""Exception taxonomy shared by the resolution pipeline and the summarizer."""

from __future__ import annotations


class NewsBriefError(Exception):
    """Base class for caller-visible failures. Messages are single-line."""


class InputError(NewsBriefError):
    """Missing or unusable caller input (no URL, no text)."""


class ExtractionEmpty(InputError):
    """No usable article text could be extracted by any strategy."""

    def __init__(self, message: str = "Could not extract content from the article"):
        super().__init__(message)


class FetchFailure(NewsBriefError):
    """Every fetch strategy for a URL failed."""

    def __init__(self, url: str, detail: str | None = None):
        self.url = url
        self.detail = detail
        message = f"Failed to fetch {url}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CredentialError(NewsBriefError):
    """The API key is missing or malformed. Raised before any network call."""


class ProviderError(NewsBriefError):
    """The language-model provider returned an error."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class ProviderSchemaError(ProviderError):
    """The provider rejected the shape of a request; every variant was exhausted."""


class ProviderEmptyResult(ProviderError):
    """The provider call succeeded but no summary text could be extracted."""
