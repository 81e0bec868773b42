"""Prompt templates for the household coaching summaries."""

from .base import PROMPTS_DIR, PromptTemplate, available_prompts, get_prompt_text, load_prompt

__all__ = ["PROMPTS_DIR", "PromptTemplate", "available_prompts", "get_prompt_text", "load_prompt"]
