"""Page modules for the household finance Streamlit app.

Each page exposes ``build_context``, ``fallback_insights`` and ``render_page``.
"""

from . import budget, forecast, goals

__all__ = ["budget", "forecast", "goals"]
