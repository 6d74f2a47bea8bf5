"""Responsive font sizing for KPI cards.

Every size is the tightest of the configured size and caps derived from the
card's pixel box, floored at a legible minimum and rounded half-up.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Final

DEFAULT_CARD_WIDTH: Final[float] = 300.0
DEFAULT_CARD_HEIGHT: Final[float] = 200.0

AUTO_FIT_MAIN_SIZE: Final[float] = 200.0

_TAG_RE = re.compile(r"<[^>]*>")


@dataclass(frozen=True, slots=True)
class CardFontSizes:
    """Scaled font sizes (px) and size classes for one card."""

    main_value: int
    title: int
    subtitle: int
    comparison_value: int
    comparison_title: int
    arrow: int
    width_class: str
    height_class: str

    @property
    def css_classes(self) -> str:
        return " ".join(c for c in (self.width_class, self.height_class) if c)


def scale_fonts(
    width: float | None,
    height: float | None,
    *,
    main_text: str = "",
    comparison_count: int = 0,
    auto_fit: bool = False,
    main_value_size: float | None = None,
    title_size: float | None = None,
    subtitle_size: float | None = None,
    comparison_value_size: float | None = None,
    comparison_title_size: float | None = None,
) -> CardFontSizes:
    """Scale the configured font sizes to a card box.

    Args:
        width: Card width in px (None or 0 uses 300).
        height: Card height in px (None or 0 uses 200).
        main_text: Formatted main value; its length caps the main font size.
        comparison_count: Number of visible comparison values.
        auto_fit: Grow the main value to fill the card instead of using
            `main_value_size`.
        main_value_size: Configured main value size (default 25).
        title_size: Configured title size (default 14).
        subtitle_size: Configured subtitle size (default 11).
        comparison_value_size: Configured comparison value size (default 18).
        comparison_title_size: Configured comparison title size (default 12).

    Returns:
        CardFontSizes.
    """

    card_width = float(width or DEFAULT_CARD_WIDTH)
    card_height = float(height or DEFAULT_CARD_HEIGHT)

    requested_main = AUTO_FIT_MAIN_SIZE if auto_fit else (main_value_size or 25)
    text_length = len(_TAG_RE.sub("", main_text).strip()) or 1
    if comparison_count > 0:
        height_div = 5 if auto_fit else 7.5
    else:
        height_div = 2.2 if auto_fit else 3.5
    if card_width <= 160:
        pad = 16
    elif card_width <= 220:
        pad = 20
    else:
        pad = 36
    fit_width = max(40.0, card_width - pad)
    width_share = 0.45 if auto_fit else 0.13
    main = _round(
        max(10.0, min(requested_main, card_height / height_div, fit_width / (text_length * 0.58), card_width * width_share))
    )

    return CardFontSizes(
        main_value=main,
        title=_round(max(8.0, min(title_size or 14, card_height / 12, card_width * 0.08))),
        subtitle=_round(max(7.0, min(subtitle_size or 11, card_height / 16, card_width * 0.055))),
        comparison_value=_round(max(9.0, min(comparison_value_size or 18, card_height / 9, card_width * 0.1))),
        comparison_title=_round(max(7.0, min(comparison_title_size or 12, card_height / 14, card_width * 0.07))),
        arrow=_round(max(8.0, min(14.0, card_height / 11, card_width * 0.08))),
        width_class=width_class(card_width),
        height_class="kpi-short" if card_height <= 120 else "",
    )


def width_class(width: float) -> str:
    """Return the CSS size class for a card width."""

    if width <= 120:
        return "kpi-micro"
    if width <= 160:
        return "kpi-tiny"
    if width <= 220:
        return "kpi-compact"
    return ""


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))
