"""Provider factory and registry for summary backends."""

from __future__ import annotations

import logging

import httpx

from ...config import LoggingConfig, ProviderConfig
from ...core.errors import InputError
from .base import SummaryProvider
from .openai import OpenAIProvider


ProviderBuilder = type[SummaryProvider]

_PROVIDER_REGISTRY: dict[str, ProviderBuilder] = {
    "openai": OpenAIProvider,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(
    provider_cfg: ProviderConfig,
    client: httpx.AsyncClient,
    log_cfg: LoggingConfig | None = None,
    llm_logger: logging.Logger | None = None,
) -> SummaryProvider:
    """Build a provider instance from runtime config."""
    name = provider_cfg.name.lower().strip()
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise InputError(f"Unsupported provider: {provider_cfg.name}. Supported: {supported}")
    return builder(provider_cfg, client, log_cfg, llm_logger)
