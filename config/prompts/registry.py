"""Prompt registry: loads versioned prompt templates from files."""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache
from pathlib import Path

_PROMPTS_DIR = Path(__file__).parent

PromptTemplate = Callable[[str, str], str]


@lru_cache(maxsize=32)
def load_prompt(name: str, version: str = "v1") -> str:
    """Load a prompt template by name and version.

    Args:
        name: Prompt name without extension (e.g., "rag_answer")
        version: Prompt version directory (e.g., "v1")

    Returns:
        The prompt template string with {placeholders} for formatting.
    """
    path = _PROMPTS_DIR / version / f"{name}.txt"
    if not path.exists():
        raise FileNotFoundError(f"Prompt not found: {path}")
    return path.read_text(encoding="utf-8")


def format_prompt(name: str, version: str = "v1", **kwargs: str) -> str:
    """Load and format a prompt template with the given variables."""
    template = load_prompt(name, version)
    return template.format(**kwargs).rstrip()


def prompt_template(name: str = "rag_answer", version: str = "v1") -> PromptTemplate:
    """Return a ``(context, query) -> prompt`` function backed by a template file."""
    load_prompt(name, version)

    def render(context: str, query: str) -> str:
        return format_prompt(name, version, context=context, query=query)

    return render


def available_prompts(version: str = "v1") -> list[str]:
    """List all available prompt names for a given version."""
    path = _PROMPTS_DIR / version
    if not path.exists():
        return []
    return sorted(p.stem for p in path.glob("*.txt"))
