"""Trend arrows for comparison values.

An arrow's color encodes whether the change is good or bad, not just its
sign. `invert` flips that judgement for measures where going down is good
(costs, churn, response times).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final

from .colors import DEFAULT_TEXT_COLOR, resolve_color

UP_ARROW: Final[str] = "↑"
DOWN_ARROW: Final[str] = "↓"

DEFAULT_POSITIVE_COLOR: Final[str] = "#21a46f"
DEFAULT_NEGATIVE_COLOR: Final[str] = "#e04e4e"


@dataclass(frozen=True, slots=True)
class ArrowConfig:
    """Arrow behavior for one comparison value.

    Args:
        enabled: Whether sign-driven arrows are shown.
        invert: Treat negative changes as good and positive changes as bad.
        positive_color: Color of the "good" direction.
        negative_color: Color of the "bad" direction.
        override_glyph: Host-computed glyph that bypasses sign logic.
        override_color: Color for `override_glyph`.
    """

    enabled: bool = False
    invert: bool = False
    positive_color: str = DEFAULT_POSITIVE_COLOR
    negative_color: str = DEFAULT_NEGATIVE_COLOR
    override_glyph: str | None = None
    override_color: str | None = None


@dataclass(frozen=True, slots=True)
class Arrow:
    """A rendered arrow glyph and its color."""

    glyph: str
    color: str


def compute_arrow(value: float | None, cfg: ArrowConfig, *, default_color: str = DEFAULT_TEXT_COLOR) -> Arrow | None:
    """Compute the arrow shown next to a comparison value.

    Args:
        value: Comparison value whose sign drives the arrow.
        cfg: ArrowConfig for the comparison.
        default_color: Color used for an override glyph without its own color.

    Returns:
        Arrow, or None when no arrow should be rendered (disabled, zero, or
        missing value).
    """

    override = (cfg.override_glyph or "").strip()
    if override:
        return Arrow(glyph=override, color=resolve_color(cfg.override_color, default_color))

    if not cfg.enabled or value is None or math.isnan(value) or value == 0:
        return None

    up = value > 0
    return Arrow(glyph=UP_ARROW if up else DOWN_ARROW, color=_direction_color(up=up, cfg=cfg))


def signed_value_color(
    value: float | None,
    base_color: str,
    cfg: ArrowConfig,
    *,
    auto_color_by_sign: bool,
    apply_arrow_color: bool,
) -> str:
    """Return the final color of a comparison value.

    Args:
        value: Comparison value.
        base_color: Color used when no sign-based rule applies.
        cfg: ArrowConfig holding the positive/negative colors.
        auto_color_by_sign: Positive values use `positive_color` and negative
            values use `negative_color`, ignoring `invert`.
        apply_arrow_color: Reuse the arrow's good/bad color for the value
            (only when arrows are enabled).

    Returns:
        A concrete color string; zero or missing values keep `base_color`.
    """

    if value is None or math.isnan(value) or value == 0:
        return base_color
    if auto_color_by_sign:
        if value > 0:
            return resolve_color(cfg.positive_color, DEFAULT_POSITIVE_COLOR)
        return resolve_color(cfg.negative_color, DEFAULT_NEGATIVE_COLOR)
    if apply_arrow_color and cfg.enabled:
        return _direction_color(up=value > 0, cfg=cfg)
    return base_color


def _direction_color(*, up: bool, cfg: ArrowConfig) -> str:
    good = up != cfg.invert
    if good:
        return resolve_color(cfg.positive_color, DEFAULT_POSITIVE_COLOR)
    return resolve_color(cfg.negative_color, DEFAULT_NEGATIVE_COLOR)
