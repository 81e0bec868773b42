"""Shared Plotly theme tokens for the household dashboards."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ThemeTokens:
    label_color: str = "#475569"
    label_font: str = "Inter"
    label_size: int = 12
    brand_blue: str = "#2563EB"
    brand_blue_soft: str = "rgba(37, 99, 235, 0.12)"
    accent_orange: str = "#F97316"
    positive_green: str = "#22C55E"
    negative_red: str = "#EF4444"
    neutral_grey: str = "#94A3B8"
    neutral_white: str = "#FFFFFF"
    neutral_background: str = "rgba(148, 163, 184, 0.25)"
    bucket_colors: tuple[tuple[str, str], ...] = (
        ("needs", "#2563EB"),
        ("wants", "#F97316"),
        ("savings", "#22C55E"),
    )
    health_colors: tuple[tuple[str, str], ...] = (
        ("excellent", "#22C55E"),
        ("good", "#2563EB"),
        ("behind", "#F59E0B"),
        ("critical", "#EF4444"),
    )

    def bucket_color(self, bucket: str) -> str:
        return dict(self.bucket_colors).get(bucket, self.neutral_grey)

    def health_color(self, health: str) -> str:
        return dict(self.health_colors).get(health, self.neutral_grey)


_TOKENS = ThemeTokens()


def theme_tokens() -> ThemeTokens:
    """Return the shared, frozen visualization tokens."""

    return _TOKENS
