"""Color resolution for KPI cards.

Color configuration arrives either as a plain CSS color string or as a
provider object that carries the color under one of a few known keys (the
"dual-output" shape some hosts emit). Both shapes are normalized into the
closed `ColorInput` variant at the boundary and resolved here.

Every resolver terminates in a concrete color string.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final, TypeAlias

DEFAULT_TEXT_COLOR: Final[str] = "#222222"
LIGHT_TEXT_COLOR: Final[str] = "#ffffff"

PROVIDER_KEYS: Final[tuple[str, ...]] = ("color", "hex", "qString", "value")


@dataclass(frozen=True, slots=True)
class PlainColor:
    """A color given as a CSS string (hex, `rgb(...)`, or a named color)."""

    value: str


@dataclass(frozen=True, slots=True)
class ProviderColor:
    """A color carried by a provider object under one of `PROVIDER_KEYS`."""

    fields: Mapping[str, str]


ColorInput: TypeAlias = PlainColor | ProviderColor


def coerce_color_input(raw: object) -> ColorInput | None:
    """Convert raw configuration into a ColorInput.

    Args:
        raw: A string, a mapping with provider keys, an existing ColorInput,
            or None.

    Returns:
        ColorInput, or None when `raw` has no usable shape.
    """

    if raw is None:
        return None
    if isinstance(raw, (PlainColor, ProviderColor)):
        return raw
    if isinstance(raw, str):
        return PlainColor(raw)
    if isinstance(raw, Mapping):
        fields = {key: raw[key] for key in PROVIDER_KEYS if isinstance(raw.get(key), str)}
        return ProviderColor(fields)
    return None


def resolve_color(color: ColorInput | str | None, fallback: str) -> str:
    """Resolve a color input to a concrete color string.

    Args:
        color: ColorInput (or a bare string, treated as PlainColor).
        fallback: Concrete color returned when nothing usable is found.

    Returns:
        The trimmed color string, or `fallback`.
    """

    found = _first_color(color)
    return found if found is not None else fallback


def contrast_color(background: str | None) -> str:
    """Pick a readable text color for a 6-digit hex background.

    Args:
        background: Background color such as `#1a2b3c` or `1a2b3c`.

    Returns:
        `#ffffff` for dark backgrounds (luminance < 0.5), otherwise `#222222`.
        Malformed input returns `#222222`.
    """

    if not background:
        return DEFAULT_TEXT_COLOR
    digits = background.strip().replace("#", "", 1)
    if len(digits) != 6:
        return DEFAULT_TEXT_COLOR
    try:
        red, green, blue = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return DEFAULT_TEXT_COLOR
    luminance = (0.299 * red + 0.587 * green + 0.114 * blue) / 255
    return LIGHT_TEXT_COLOR if luminance < 0.5 else DEFAULT_TEXT_COLOR


def resolve_display_color(
    explicit: ColorInput | str | None,
    fallback: ColorInput | str | None,
    auto_contrast: bool,
    background: str | None,
) -> str:
    """Resolve a foreground color through the explicit → contrast → fallback chain.

    Args:
        explicit: Explicitly configured color; wins when it resolves.
        fallback: Color used when there is no explicit color and no contrast.
        auto_contrast: Whether to derive the color from `background`.
        background: Known background color, if any.

    Returns:
        A concrete color string.
    """

    found = _first_color(explicit)
    if found is not None:
        return found
    if auto_contrast and background:
        return contrast_color(background)
    return resolve_color(fallback, DEFAULT_TEXT_COLOR)


def hex_to_rgba(hex_color: str, alpha: float) -> str:
    """Convert a 3- or 6-digit hex color to an `rgba(...)` string.

    Malformed colors resolve to black at the requested alpha.
    """

    digits = hex_color.strip().replace("#", "", 1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    try:
        red, green, blue = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        red = green = blue = 0
    if len(digits) != 6:
        red = green = blue = 0
    return f"rgba({red},{green},{blue},{alpha:g})"


def _first_color(color: ColorInput | str | None) -> str | None:
    """Return the first non-empty color string carried by `color`."""

    if color is None:
        return None
    if isinstance(color, str):
        color = PlainColor(color)
    if isinstance(color, PlainColor):
        trimmed = color.value.strip()
        return trimmed or None
    for key in PROVIDER_KEYS:
        candidate = color.fields.get(key)
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None
