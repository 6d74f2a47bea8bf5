"""Unit tests for trend arrows and signed value colors."""

from __future__ import annotations

import math

import pytest

from kpi_engine.arrows import Arrow, ArrowConfig, compute_arrow, signed_value_color

pytestmark = pytest.mark.unit


def test_invert_swaps_the_good_direction() -> None:
    """An increase on an inverted measure is colored as bad."""

    cfg = ArrowConfig(enabled=True, invert=True, positive_color="P", negative_color="N")
    assert compute_arrow(5, cfg) == Arrow(glyph="↑", color="N")
    assert compute_arrow(-5, cfg) == Arrow(glyph="↓", color="P")


def test_default_colors_follow_the_sign() -> None:
    """Without invert, increases are green and decreases red."""

    cfg = ArrowConfig(enabled=True)
    assert compute_arrow(2.5, cfg) == Arrow(glyph="↑", color="#21a46f")
    assert compute_arrow(-0.1, cfg) == Arrow(glyph="↓", color="#e04e4e")


def test_no_arrow_for_disabled_zero_or_missing_values() -> None:
    """Disabled configs, zero, None, and NaN render no arrow."""

    assert compute_arrow(5, ArrowConfig(enabled=False)) is None
    assert compute_arrow(0, ArrowConfig(enabled=True)) is None
    assert compute_arrow(None, ArrowConfig(enabled=True)) is None
    assert compute_arrow(math.nan, ArrowConfig(enabled=True)) is None


def test_override_glyph_bypasses_sign_logic() -> None:
    """A host-computed glyph is used even for disabled arrows and zero values."""

    cfg = ArrowConfig(enabled=False, override_glyph=" ▲ ", override_color="#0000ff")
    assert compute_arrow(0, cfg) == Arrow(glyph="▲", color="#0000ff")

    uncolored = ArrowConfig(override_glyph="★")
    assert compute_arrow(None, uncolored, default_color="#333333") == Arrow(glyph="★", color="#333333")


def test_signed_value_color_by_sign_ignores_invert() -> None:
    """Auto-color-by-sign uses positive/negative colors regardless of invert."""

    cfg = ArrowConfig(invert=True)
    kwargs = {"auto_color_by_sign": True, "apply_arrow_color": False}
    assert signed_value_color(3, "#222222", cfg, **kwargs) == "#21a46f"
    assert signed_value_color(-3, "#222222", cfg, **kwargs) == "#e04e4e"
    assert signed_value_color(0, "#222222", cfg, **kwargs) == "#222222"


def test_signed_value_color_reuses_arrow_color_only_when_arrows_are_enabled() -> None:
    """Applying the arrow color follows invert and needs enabled arrows."""

    kwargs = {"auto_color_by_sign": False, "apply_arrow_color": True}
    enabled = ArrowConfig(enabled=True, invert=True)
    assert signed_value_color(3, "#222222", enabled, **kwargs) == "#e04e4e"
    assert signed_value_color(-3, "#222222", enabled, **kwargs) == "#21a46f"
    assert signed_value_color(3, "#222222", ArrowConfig(enabled=False), **kwargs) == "#222222"
    assert signed_value_color(None, "#222222", enabled, **kwargs) == "#222222"
