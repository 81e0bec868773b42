"""AI coaching helpers for the household finance tracker."""

from .summary import (
    SUMMARY_MODES,
    AISummaryError,
    AISummaryRequest,
    build_ai_summary_request,
    generate_ai_summary,
)

__all__ = [
    "SUMMARY_MODES",
    "AISummaryError",
    "AISummaryRequest",
    "build_ai_summary_request",
    "generate_ai_summary",
]
