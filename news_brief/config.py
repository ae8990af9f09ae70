"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ProviderConfig: Language-model provider settings
- FetchConfig: HTTP fetching settings
- ResolveConfig: Intermediary link resolution settings
- ExtractConfig: Content extraction settings
- SummaryConfig: Prompt and output bounds
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml


DEFAULT_SYSTEM_PROMPT = (
    "You are a news summarizer.\n"
    "- Return exactly one concise sentence (max 25 words).\n"
    "- No emojis, no quotes, no markdown.\n"
    "- Be factual and neutral."
)


@dataclass
class ProviderConfig:
    """Configuration for the language-model provider.

    Attributes:
        name: Provider name ("openai" currently supported)
        model: Model identifier (e.g., "gpt-5-nano")
        api_key_env: Environment variable name containing the API key
        base_url: Base URL for the provider API
        api_key: Optional inline API key (overrides env var)
        system_prompt: System prompt sent with every summary request
        structured_model_prefixes: Model name prefixes that always use the
            structured-response call shape
        fallback_output_cap: Output token cap tried after the uncapped request
        timeout_seconds: Request timeout for provider calls
        trust_env: Whether to respect system proxy settings for API requests
    """

    name: str = "openai"
    model: str = "gpt-5-nano"
    api_key_env: str = "OPENAI_API_KEY"
    base_url: str = "https://api.openai.com/v1"
    api_key: str | None = None
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    structured_model_prefixes: list[str] = field(default_factory=lambda: ["gpt-5"])
    fallback_output_cap: int = 512
    timeout_seconds: float = 30.0
    trust_env: bool = True


@dataclass
class FetchConfig:
    """Configuration for HTTP page fetching.

    Attributes:
        timeout_seconds: HTTP request timeout
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
        accept: HTTP Accept header sent with page requests
        referrer: Referer header used by the retry request, simulating
            arrival from the intermediary site
    """

    timeout_seconds: float = 20.0
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    referrer: str = "https://news.google.com/"


@dataclass
class ResolveConfig:
    """Configuration for resolving intermediary links.

    Attributes:
        deep_fetch: Resolve the intermediary link and summarize the publisher
            article; when False callers summarize visible text directly
        render_fallback: Allow the rendered-navigation fallback when a
            browsing context is available
        intermediary_hosts: Redirector domains whose pages are never articles
        blocked_hosts: Extra hosts to reject in addition to the built-in set
        max_candidates: Maximum number of scanned candidates to fetch
        initial_delay_seconds: Wait before the first navigation check
        poll_interval_seconds: Re-check interval while the page is loading
        settle_seconds: Extra wait once loaded, for client-side redirects
        navigation_budget_seconds: Total wait budget for rendered navigation
        headless: Launch the rendering browser without a window
    """

    deep_fetch: bool = True
    render_fallback: bool = False
    intermediary_hosts: list[str] = field(default_factory=lambda: ["news.google.com"])
    blocked_hosts: list[str] = field(default_factory=list)
    max_candidates: int = 5
    initial_delay_seconds: float = 1.0
    poll_interval_seconds: float = 0.5
    settle_seconds: float = 3.0
    navigation_budget_seconds: float = 15.0
    headless: bool = True


@dataclass
class ExtractConfig:
    """Configuration for HTML content extraction.

    Attributes:
        primary: Primary extraction method ("main_content", "trafilatura",
            "readability" or "normalizer")
        fallback: Methods tried when the primary result is too short
        min_chars: Results shorter than this fall through to the next method
        parser: BeautifulSoup tree builder used by the main-content extractor
    """

    primary: str = "main_content"
    fallback: list[str] = field(default_factory=lambda: ["normalizer"])
    min_chars: int = 400
    parser: str = "html.parser"


@dataclass
class SummaryConfig:
    """Configuration for prompt building and output bounds.

    Attributes:
        max_input_chars: Maximum characters of article text sent to the model
        max_output_chars: Maximum characters of the returned summary
        deadline_seconds: Overall time budget for one summarization call
    """

    max_input_chars: int = 8000
    max_output_chars: int = 200
    deadline_seconds: float = 90.0


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file (requires a log directory)
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    filename: str = "news_brief.jsonl"
    llm_log_enabled: bool = True
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "redact_urls"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    environment: str | None = None
    release: str | None = None
    redaction: str = "redact_urls"
    max_text_chars: int = 20000


@dataclass(frozen=True)
class SummarizerSettings:
    """Per-call configuration handed to the summarization engine.

    The API key is excluded from ``repr`` so settings can be logged safely.
    """

    model_id: str
    api_key: str | None = field(default=None, repr=False)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    deep_fetch: bool = True

    def describe(self) -> dict[str, Any]:
        return {
            "model_id": self.model_id,
            "api_key": "[set]" if self.api_key else "[empty]",
            "deep_fetch": self.deep_fetch,
        }


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    resolve: ResolveConfig = field(default_factory=ResolveConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)

    def summarizer_settings(self) -> SummarizerSettings:
        """Build the explicit per-call settings from this configuration."""
        return SummarizerSettings(
            model_id=self.provider.model,
            api_key=get_api_key(self.provider),
            system_prompt=self.provider.system_prompt or DEFAULT_SYSTEM_PROMPT,
            deep_fetch=self.resolve.deep_fetch,
        )


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update({k: v for k, v in value.items() if k in data[key]})
        else:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        provider=ProviderConfig(**data["provider"]),
        fetch=FetchConfig(**data["fetch"]),
        resolve=ResolveConfig(**data["resolve"]),
        extract=ExtractConfig(**data["extract"]),
        summary=SummaryConfig(**data["summary"]),
        logging=LoggingConfig(**data["logging"]),
        langfuse=LangfuseConfig(**data.get("langfuse", {})),
    )


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)
