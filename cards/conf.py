"""Access to the `KPI_CARDS` setting."""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings


@dataclass(frozen=True, slots=True)
class CardSettings:
    """Project-wide KPI card defaults.

    Args:
        default_width: Card width (px) used when a request does not give one.
        default_height: Card height (px) used when a request does not give one.
        chart_color: Chart color used when a card config does not set one.
        max_chart_rows: Maximum number of series rows charted per card.
    """

    default_width: int = 300
    default_height: int = 200
    chart_color: str = "#6aa7ff"
    max_chart_rows: int = 500


def card_settings() -> CardSettings:
    """Return CardSettings built from `settings.KPI_CARDS` (missing keys use defaults)."""

    raw = getattr(settings, "KPI_CARDS", None) or {}
    defaults = CardSettings()
    return CardSettings(
        default_width=int(raw.get("DEFAULT_WIDTH", defaults.default_width)),
        default_height=int(raw.get("DEFAULT_HEIGHT", defaults.default_height)),
        chart_color=str(raw.get("CHART_COLOR", defaults.chart_color)),
        max_chart_rows=int(raw.get("MAX_CHART_ROWS", defaults.max_chart_rows)),
    )
