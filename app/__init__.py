"""Streamlit dashboard for the household finance tracker."""

from .main import main

__all__ = ["main"]
