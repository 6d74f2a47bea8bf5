"""Pure formatting and chart-layout package for KPI cards.

This package contains deterministic, testable computations that operate on
plain values (numbers, strings, sample rows) and return strings or markup
descriptions. It must not import Django or perform any I/O.
"""

from .charts import render_chart
from .colors import contrast_color, resolve_color, resolve_display_color
from .formats import format_value

__all__ = [
    "contrast_color",
    "format_value",
    "render_chart",
    "resolve_color",
    "resolve_display_color",
]
