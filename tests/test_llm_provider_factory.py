"""Tests for the summary provider factory."""

import asyncio

import httpx
import pytest

from news_brief.config import LoggingConfig, ProviderConfig
from news_brief.core.errors import InputError
from news_brief.llm.providers.factory import available_providers, create_provider
from news_brief.llm.providers.openai import OpenAIProvider


def test_available_providers_contains_expected_backends():
    assert available_providers() == ["openai"]


def test_create_provider_openai():
    client = httpx.AsyncClient()
    try:
        provider = create_provider(
            ProviderConfig(name=" OpenAI ", model="gpt-5-nano"),
            client,
            LoggingConfig(),
            llm_logger=None,
        )
    finally:
        asyncio.run(client.aclose())

    assert isinstance(provider, OpenAIProvider)
    assert provider.uses_structured_shape("gpt-5-nano")
    assert not provider.uses_structured_shape("gpt-4o-mini")


def test_create_provider_rejects_unknown_backend():
    client = httpx.AsyncClient()
    try:
        with pytest.raises(InputError, match="Unsupported provider: unknown-provider. Supported: openai"):
            create_provider(ProviderConfig(name="unknown-provider", model="x"), client)
    finally:
        asyncio.run(client.aclose())
