"""Streamlit entry script: ``streamlit run app.py``."""

from __future__ import annotations

from app import main

main()
