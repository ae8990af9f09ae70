"""Prompt loading and rendering helpers for summary requests."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from ..config import DEFAULT_SYSTEM_PROMPT, SummaryConfig
from ..fetch.normalizer import collapse_whitespace


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"


@dataclass(frozen=True)
class SummaryPrompt:
    system: str
    user: str


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def trim_input(text: str | None, max_chars: int) -> str:
    """Collapse whitespace and cap the article text sent to the model."""
    return collapse_whitespace(text)[:max_chars]


def build_summary_prompt(text: str, system_prompt: str | None, cfg: SummaryConfig) -> SummaryPrompt:
    return SummaryPrompt(
        system=system_prompt or DEFAULT_SYSTEM_PROMPT,
        user=_render_template("summary", content=trim_input(text, cfg.max_input_chars)),
    )
