"""Row ordering for chart series.

Sorting is stable and never mutates its input. Values are compared through a
total key (missing or NaN < numbers < dates < text) so the ordering is transitive
even when a column mixes numbers and text.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Final, Literal

from .dto import Sample

SortBy = Literal["dimension", "measure", "expression"]
SortOrder = Literal["asc", "desc"]
SortField = Literal["dimension", "measure"]

_EXPRESSION_FIELDS: Final[dict[str, SortField]] = {
    "dim": "dimension",
    "0": "dimension",
    "chart": "measure",
    "1": "measure",
}

_DATE_FORMATS: Final[tuple[str, ...]] = (
    "%Y-%m",
    "%Y-%b",
    "%b %Y",
    "%B %Y",
    "%d %b %Y",
    "%b %d, %Y",
    "%m/%d/%Y",
)

_EPOCH: Final[datetime] = datetime(1970, 1, 1)

SortKey = tuple[int, float, str, str]


@dataclass(frozen=True, slots=True)
class SortSpec:
    """How a chart series should be ordered.

    Args:
        by: Sort source: the row label, the measure value, or an expression.
        order: `asc` or `desc`.
        expression: Expression for `by="expression"`; only `dim`/`0` and
            `chart`/`1` are understood.
    """

    by: SortBy = "dimension"
    order: SortOrder = "asc"
    expression: str | None = None


def resolve_sort_field(spec: SortSpec) -> SortField | None:
    """Return the field a SortSpec compares, or None for a no-op sort."""

    if spec.by == "dimension":
        return "dimension"
    if spec.by == "measure":
        return "measure"
    if spec.by == "expression":
        return _EXPRESSION_FIELDS.get((spec.expression or "").strip().lower())
    return None


def sort_samples(rows: Iterable[Sample], spec: SortSpec) -> tuple[Sample, ...]:
    """Return `rows` ordered by `spec`.

    Args:
        rows: Series rows in their original order.
        spec: SortSpec describing the ordering.

    Returns:
        A new tuple. Unrecognized expressions keep the original order.
        Missing values come first ascending and last descending.
    """

    ordered = tuple(rows)
    field = resolve_sort_field(spec)
    if field is None or len(ordered) < 2:
        return ordered

    if field == "dimension":
        keys = [sort_key(row.label) for row in ordered]
    else:
        keys = [sort_key(row.value) for row in ordered]

    indices = sorted(range(len(ordered)), key=keys.__getitem__, reverse=spec.order == "desc")
    return tuple(ordered[i] for i in indices)


def sort_key(raw: object) -> SortKey:
    """Build the comparison key for a single label or value."""

    if raw is None or (isinstance(raw, float) and math.isnan(raw)):
        return (0, 0.0, "", "")
    number = _as_number(raw)
    if number is not None:
        return (1, number, "", "")
    moment = _as_datetime(raw)
    if moment is not None:
        return (2, (moment - _EPOCH).total_seconds(), "", "")
    text = str(raw)
    return (3, 0.0, text.casefold(), text.swapcase())


def _as_number(raw: object) -> float | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
        return None if math.isnan(number) else number
    text = str(raw).strip()
    if not text or "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return None if math.isnan(number) else number


def _as_datetime(raw: object) -> datetime | None:
    text = str(raw).strip()
    if not text:
        return None
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is not None and parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(UTC).replace(tzinfo=None)
        except (OverflowError, ValueError):
            return None
    return parsed
