"""Prompt template loading for the coaching summaries."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

__all__ = ["PROMPTS_DIR", "PromptTemplate", "available_prompts", "get_prompt_text", "load_prompt"]


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    content: str


PROMPTS_DIR = Path(__file__).resolve().parent


def available_prompts() -> list[str]:
    """Return the stem names of every bundled ``.txt`` template."""

    return sorted(path.stem for path in PROMPTS_DIR.glob("*.txt"))


@lru_cache(maxsize=16)
def load_prompt(name: str) -> PromptTemplate:
    """Load the template ``<name>.txt`` from the prompts directory."""

    path = PROMPTS_DIR / f"{name}.txt"
    if not path.is_file():
        raise FileNotFoundError(f"Prompt template not found: {path}")

    return PromptTemplate(name=name, content=path.read_text(encoding="utf-8").strip())


def get_prompt_text(name: str) -> str:
    return load_prompt(name).content
