"""Row types shared by the sorter and the chart layout.

Rows are plain data containers handed over by the host after it fetched the
data. They intentionally avoid any host or Django dependencies.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Sample:
    """A single chart row.

    Attributes:
        value: Primary measure value, or None when the host had no number.
        label: Dimension label (x-axis category) for the row.
        second_value: Optional value of the overlaid second series.
        axis_text: Optional host-formatted x-axis measure text. When present
            it takes precedence over `label` for axis labels.
    """

    value: float | None
    label: str | None = None
    second_value: float | None = None
    axis_text: str | None = None


def is_number(value: object) -> bool:
    """Return True when `value` is a finite real number (bools excluded)."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
