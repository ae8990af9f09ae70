"""
Command-line interface for News Brief.

Uses Typer to provide commands for summarizing a link, summarizing
supplied text and resolving a link without calling the model. Loads
.env files for API key configuration.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
import sys

from dotenv import load_dotenv
import typer
from rich.console import Console
from rich.markup import escape

from .config import AppConfig, load_config
from .core.errors import NewsBriefError
from .llm.tracing import flush, setup_langfuse
from .service import NewsBriefService
from .utils.logging import setup_llm_logger, setup_logging

app = typer.Typer(add_completion=False)
console = Console()

ConfigOption = typer.Option(None, "--config", "-c", exists=True, help="YAML config file.")
ApiKeyOption = typer.Option(
    None,
    "--api-key",
    envvar="OPENAI_API_KEY",
    help="Override provider API key (or set OPENAI_API_KEY / .env).",
)
ModelOption = typer.Option(None, "--model", "-m", help="Model identifier.")
LogLevelOption = typer.Option(None, "--log-level", help="Logging level.")
LogDirOption = typer.Option(None, "--log-dir", help="Directory for log files.")
RenderOption = typer.Option(
    None,
    "--render/--no-render",
    help="Enable or disable the rendered-navigation fallback (needs Playwright).",
)


def _prepare(
    config: Path | None,
    api_key: str | None,
    model: str | None,
    log_level: str | None,
    log_dir: Path | None,
    render: bool | None,
) -> tuple[AppConfig, NewsBriefService]:
    load_dotenv()

    cfg = load_config(str(config) if config else None)
    if api_key:
        cfg.provider.api_key = api_key
    if model:
        cfg.provider.model = model
    if log_level:
        cfg.logging.level = log_level
    if render is not None:
        cfg.resolve.render_fallback = render

    setup_logging(cfg.logging, log_dir)
    llm_logger = setup_llm_logger(cfg.logging, log_dir)
    setup_langfuse(cfg.langfuse)
    return cfg, NewsBriefService(cfg, llm_logger=llm_logger)


def _fail(message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]")
    flush()
    raise typer.Exit(code=1)


@app.command()
def summarize(
    url: str = typer.Argument(..., help="Intermediary or article URL."),
    deep_fetch: bool = typer.Option(
        True,
        "--deep-fetch/--no-deep-fetch",
        help="Resolve the publisher article, or summarize the page's visible text directly.",
    ),
    config: Path | None = ConfigOption,
    api_key: str | None = ApiKeyOption,
    model: str | None = ModelOption,
    log_level: str | None = LogLevelOption,
    log_dir: Path | None = LogDirOption,
    render: bool | None = RenderOption,
):
    """Summarize the article behind a link in one sentence.

    Args:
        url: The link to summarize
        deep_fetch: Whether to resolve the publisher article first
        config: Optional path to YAML config file
        api_key: Override provider API key
        model: Override model identifier
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files; file logging is off without it
        render: Enable/disable rendered navigation
    """
    cfg, service = _prepare(config, api_key, model, log_level, log_dir, render)
    cfg.resolve.deep_fetch = deep_fetch

    outcome = asyncio.run(service.resolve_and_summarize(url, cfg.summarizer_settings()))
    if not outcome.ok:
        _fail(outcome.error or "Unknown error")
    console.print(outcome.summary, markup=False, highlight=False)
    if outcome.source_url:
        console.print(f"[dim]{outcome.source_url}[/dim]")
    flush()


@app.command("summarize-text")
def summarize_text(
    text: str | None = typer.Argument(None, help="Text to summarize; read from --file or stdin when omitted."),
    file: Path | None = typer.Option(None, "--file", "-f", exists=True, readable=True),
    config: Path | None = ConfigOption,
    api_key: str | None = ApiKeyOption,
    model: str | None = ModelOption,
    log_level: str | None = LogLevelOption,
    log_dir: Path | None = LogDirOption,
):
    """Summarize supplied text in one sentence."""
    cfg, service = _prepare(config, api_key, model, log_level, log_dir, None)

    if text is None:
        if file is not None:
            text = file.read_text(encoding="utf-8")
        elif not sys.stdin.isatty():
            text = sys.stdin.read()
    if not text or not text.strip():
        _fail("No text to summarize")

    outcome = asyncio.run(service.summarize_text(text, cfg.summarizer_settings()))
    if not outcome.ok:
        _fail(outcome.error or "Unknown error")
    console.print(outcome.summary, markup=False, highlight=False)
    flush()


@app.command()
def resolve(
    url: str = typer.Argument(..., help="Intermediary or article URL."),
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
    log_dir: Path | None = LogDirOption,
    render: bool | None = RenderOption,
):
    """Print the article text behind a link without calling the model."""
    cfg, service = _prepare(config, None, None, log_level, log_dir, render)

    try:
        content = asyncio.run(service.resolve(url))
    except NewsBriefError as exc:
        _fail(str(exc))
    except asyncio.TimeoutError:
        _fail(f"Timed out after {cfg.summary.deadline_seconds:g} seconds")

    console.print(f"[bold]{content.source_url}[/bold] ({content.method}, {content.length} chars)")
    console.print(content.text, markup=False, highlight=False)
    flush()


if __name__ == "__main__":
    app()
