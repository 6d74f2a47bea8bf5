"""Value formatting for KPI cards.

Formatting converts a raw numeric measurement into its display string. The
public entry point `format_value` never raises: invalid numeric input yields
the `"-"` sentinel and malformed patterns fall back to grouped-decimal
formatting.

The custom pattern mini-language:
- `0` and `#` are digit placeholders, `.` anchors the decimals and each `0`
  after it adds one decimal place.
- a `,` anywhere in the pattern enables thousands grouping.
- `;` separates a positive and a negative sub-pattern.
- `h hh m mm s ss D DD [h] [hh]` are duration tokens over a day-fraction.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Final, Literal

logger = logging.getLogger(__name__)

FormatKind = Literal[
    "auto",
    "number",
    "currency",
    "percent",
    "kmb",
    "k",
    "m",
    "b",
    "duration",
    "custom",
    "native",
]

FORMAT_KINDS: Final[frozenset[str]] = frozenset(
    {"auto", "number", "currency", "percent", "kmb", "k", "m", "b", "duration", "custom", "native"}
)

MISSING_VALUE: Final[str] = "-"
DEFAULT_CURRENCY_SYMBOL: Final[str] = "$"
DEFAULT_DURATION_PATTERN: Final[str] = "h:mm:ss"

SECONDS_PER_DAY: Final[int] = 86_400

_FIXED_SCALES: Final[dict[str, tuple[float, str]]] = {
    "k": (1_000.0, "K"),
    "m": (1_000_000.0, "M"),
    "b": (1_000_000_000.0, "B"),
}

_AUTO_SCALES: Final[tuple[tuple[float, str], ...]] = (
    (1_000_000_000.0, "B"),
    (1_000_000.0, "M"),
    (1_000.0, "K"),
)

_DURATION_TOKEN_RE = re.compile(r"\bh\b|hh|\[h|:mm|:ss|:m\b|:s\b", re.IGNORECASE | re.ASCII)
_DIGIT_PLACEHOLDER_RE = re.compile(r"[#0]")
_DURATION_VOCABULARY_RE = re.compile(r"(?:\[[hH]{1,2}\]|[hH]{1,2}|mm?|ss?|DD?|[:\s.\-/])+")
_BRACKET_HOURS_RE = re.compile(r"\[h+\]", re.IGNORECASE)
_DECIMALS_RE = re.compile(r"\.(0+)")
_PREFIX_RE = re.compile(r"^([^#0]*)")
_SUFFIX_RE = re.compile(r"([#0.,]+)([^#0.,]*)$")
_LEADING_FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_LETTER_RE = re.compile(r"[a-zA-Z]")


@dataclass(frozen=True, slots=True)
class FormatSpec:
    """How a value should be rendered.

    Args:
        kind: Format kind (see `FormatKind`).
        pattern: Custom number pattern, required when `kind="custom"`.
        currency_symbol: Currency prefix for `kind="currency"` (default `$`).
        duration_pattern: Duration pattern for `kind="duration"`.
    """

    kind: FormatKind = "auto"
    pattern: str | None = None
    currency_symbol: str | None = None
    duration_pattern: str | None = None


@dataclass(frozen=True, slots=True)
class NativeValue:
    """Host-native formatting information for a single value.

    Args:
        text: Pre-formatted text produced by the host, when available.
        format_type: Host number-format type; `U` (or None) means unspecified.
        pattern: Host number-format pattern, when available.
    """

    text: str | None = None
    format_type: str | None = None
    pattern: str | None = None


def format_value(value: object, spec: FormatSpec, native: NativeValue | None = None) -> str:
    """Format a raw value for display.

    Args:
        value: Raw numeric value (int, float, numeric string, or None).
        spec: FormatSpec describing the display format.
        native: Optional host-native text used by the `auto` and `native` kinds.

    Returns:
        The display string, or `"-"` when `value` is missing or not numeric.
    """

    number = _coerce_number(value)
    if number is None:
        return MISSING_VALUE

    kind = spec.kind
    if kind == "kmb":
        return format_kmb(number)
    if kind in _FIXED_SCALES:
        divisor, suffix = _FIXED_SCALES[kind]
        return to_fixed(number / divisor, 2) + suffix
    if kind == "currency":
        return (spec.currency_symbol or DEFAULT_CURRENCY_SYMBOL) + format_grouped(number)
    if kind == "percent":
        return to_fixed(number * 100, 1) + "%"
    if kind == "duration":
        return format_duration(number, spec.duration_pattern or DEFAULT_DURATION_PATTERN)
    if kind == "custom":
        return format_with_pattern(number, spec.pattern)
    if kind in ("auto", "native"):
        return _format_native(number, kind=kind, native=native)
    if kind != "number":
        logger.debug("Unknown format kind %r; using grouped-decimal formatting.", kind)
    return format_grouped(number)


def format_kmb(number: float) -> str:
    """Scale by the largest applicable power of 1000 and append K/M/B."""

    magnitude = abs(number)
    for threshold, suffix in _AUTO_SCALES:
        if magnitude >= threshold:
            return to_fixed(number / threshold, 2) + suffix
    return format_grouped(number)


def format_grouped(number: float, *, max_decimals: int = 2) -> str:
    """Format with `,` thousands grouping and up to `max_decimals` decimals.

    Trailing fractional zeros are dropped (`1234.5` -> `1,234.5`).
    """

    fixed = to_fixed(abs(number), max_decimals)
    integer, _, fraction = fixed.partition(".")
    fraction = fraction.rstrip("0")
    body = group_thousands(integer) + (f".{fraction}" if fraction else "")
    if number < 0 and _has_nonzero_digit(body):
        return "-" + body
    return body


def group_thousands(digits: str) -> str:
    """Insert `,` separators into a run of integer digits."""

    if not digits.isdigit():
        return digits
    return f"{int(digits):,}"


def to_fixed(number: float, places: int) -> str:
    """Render `number` with exactly `places` decimals.

    Rounds the exact binary value of the float with ties away from zero, so
    `to_fixed(1.005, 2)` is `"1.00"` while `to_fixed(0.125, 2)` is `"0.13"`.
    """

    if not math.isfinite(number) or abs(number) >= 1e21:
        return str(number)
    if number == 0:
        number = 0.0
    with localcontext() as ctx:
        ctx.prec = 64
        quantized = Decimal(number).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    return f"{quantized:f}"


def is_duration_pattern(pattern: str | None) -> bool:
    """Return True when `pattern` is a duration pattern rather than a decimal one.

    A duration pattern contains hour/minute/second tokens and no `#`/`0`
    digit placeholders.
    """

    if not pattern:
        return False
    candidate = pattern.strip().lower()
    return bool(_DURATION_TOKEN_RE.search(candidate)) and not _DIGIT_PLACEHOLDER_RE.search(candidate)


def format_duration(number: float, pattern: str) -> str:
    """Format a day-fraction (0.5 = 12 hours) through a duration pattern.

    Args:
        number: Day-fraction value; negative values get a leading `-`.
        pattern: Duration pattern such as `h:mm:ss`, `[h]:mm`, or `D hh:mm:ss`.

    Returns:
        The pattern with its tokens substituted. Values too large to count in
        seconds fall back to grouped-decimal formatting.

    Notes:
        - `[h]`/`[hh]` and patterns without `D` report total hours (may exceed 24).
        - Patterns with `D` split whole days out of the hours.
    """

    scaled = abs(number) * SECONDS_PER_DAY
    if not math.isfinite(scaled):
        logger.debug("Duration value %r is out of range; using grouped-decimal formatting.", number)
        return format_grouped(number)

    negative = number < 0
    total_seconds = math.floor(scaled + 0.5)

    bracket_hours = bool(_BRACKET_HOURS_RE.search(pattern))
    days = 0
    # Day mode is keyed on an uppercase `D` only; lowercase `d` is not a token.
    if not bracket_hours and "D" in pattern:
        days = total_seconds // SECONDS_PER_DAY
        hours = (total_seconds % SECONDS_PER_DAY) // 3600
    else:
        hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    result = re.sub(r"\[hh\]", f"{hours:02d}", pattern, flags=re.IGNORECASE)
    result = re.sub(r"\[h\]", str(hours), result, flags=re.IGNORECASE)

    result = result.replace("DD", f"{days:02d}")
    result = result.replace("D", str(days))

    if not bracket_hours:
        result = re.sub(r"hh", f"{hours:02d}", result, flags=re.IGNORECASE)
        result = re.sub(r"\bh\b", str(hours), result, flags=re.IGNORECASE | re.ASCII)

    result = result.replace("mm", f"{minutes:02d}")
    result = re.sub(r"\bm\b", str(minutes), result, flags=re.ASCII)

    result = result.replace("ss", f"{seconds:02d}")
    result = re.sub(r"\bs\b", str(seconds), result, flags=re.ASCII)

    return ("-" if negative else "") + result


def format_with_pattern(number: float, pattern: str | None) -> str:
    """Format a number through a custom pattern such as `$#,##0.00;-$#,##0.00`.

    Args:
        number: Value to format.
        pattern: Custom pattern. Empty patterns fall back to grouped-decimal
            formatting and duration patterns are routed to `format_duration`.

    Returns:
        Prefix + rounded absolute value + suffix. Negative values get a
        leading `-` only when the pattern has no negative sub-pattern.
    """

    if pattern is None or not pattern.strip():
        return format_grouped(number)

    clean = pattern.strip()
    if is_duration_pattern(clean):
        return format_duration(number, clean)

    parts = clean.split(";")
    positive = parts[0] or clean
    negative = parts[1] if len(parts) > 1 and parts[1] else None
    active = negative if number < 0 and negative is not None else positive

    decimals_match = _DECIMALS_RE.search(active)
    decimals = len(decimals_match.group(1)) if decimals_match else 0

    formatted = to_fixed(abs(number), decimals)
    if "," in active:
        integer, dot, fraction = formatted.partition(".")
        formatted = group_thousands(integer) + dot + fraction

    prefix_match = _PREFIX_RE.match(active)
    prefix = prefix_match.group(1) if prefix_match else ""
    suffix_match = _SUFFIX_RE.search(active)
    suffix = suffix_match.group(2) if suffix_match else ""
    if suffix_match is None and prefix == active:
        logger.debug("Pattern %r has no digit placeholders.", pattern)

    sign = ""
    if number < 0 and negative is None and _has_nonzero_digit(formatted):
        sign = "-"
    return sign + prefix + formatted + suffix


def validate_format_spec(spec: FormatSpec) -> tuple[str, ...]:
    """Return the problems found in a FormatSpec (empty when valid)."""

    errors: list[str] = []
    if spec.kind not in FORMAT_KINDS:
        errors.append(f"kind is not a supported value: {spec.kind!r}.")
    if spec.kind == "custom" and not (spec.pattern or "").strip():
        errors.append("kind='custom' requires a non-empty pattern.")
    if spec.kind == "duration":
        duration_pattern = (spec.duration_pattern or "").strip()
        if not duration_pattern:
            errors.append("kind='duration' requires a duration_pattern.")
        elif not _DURATION_VOCABULARY_RE.fullmatch(duration_pattern):
            errors.append(
                f"duration_pattern={duration_pattern!r} uses tokens outside h hh m mm s ss D DD [h] [hh]."
            )
    return tuple(errors)


def js_number_text(number: float) -> str:
    """Render a float the way a host script prints a plain number (`5`, `2.5`)."""

    if math.isfinite(number) and float(number).is_integer() and abs(number) < 1e21:
        return str(int(number))
    return repr(float(number))


def _format_native(number: float, *, kind: str, native: NativeValue | None) -> str:
    """Resolve the `auto`/`native` kinds against host-native text."""

    if native is None:
        return format_grouped(number)

    text = (native.text or "").strip()
    if kind == "native":
        return text if text else format_grouped(number)

    format_type = (native.format_type or "U").strip()
    if format_type != "U" and text:
        return text
    if native.pattern and is_duration_pattern(native.pattern):
        return format_duration(number, native.pattern.strip())
    if text and _looks_formatted(text, number):
        return text
    return format_grouped(number)


def _looks_formatted(text: str, number: float) -> bool:
    """Return True when host text carries formatting beyond the plain number."""

    if text == js_number_text(number):
        return False
    if ":" in text or _LETTER_RE.search(text):
        return True
    match = _LEADING_FLOAT_RE.match(text)
    if match is None:
        return True
    try:
        leading = float(match.group(0))
    except ValueError:
        return True
    return text != js_number_text(leading)


def _coerce_number(value: object) -> float | None:
    """Coerce raw input to a finite float, or None."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    else:
        try:
            number = float(str(value).strip())
        except (TypeError, ValueError):
            return None
    if not math.isfinite(number):
        return None
    return number


def _has_nonzero_digit(text: str) -> bool:
    return any(ch in "123456789" for ch in text)
