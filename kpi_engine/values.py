"""Extract numeric measure values from host data cells."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

logger = logging.getLogger(__name__)

_EMPTY_MARKERS: Final[frozenset[str]] = frozenset({"", "-", "—", "null", "undefined"})
_STRIP_RE = re.compile(r"[^\d.\-+]")
_LEADING_FLOAT_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)")


@dataclass(frozen=True, slots=True)
class Cell:
    """A single host data cell.

    Args:
        num: Numeric value, when the host provides one.
        text: Formatted text of the cell.
        is_error: Whether the host flagged the cell as an error.
        error: Host error description, if any.
    """

    num: float | None = None
    text: str | None = None
    is_error: bool = False
    error: str | None = None


def parse_formatted_number(text: str | None) -> float | None:
    """Parse a host-formatted number such as `1,234.56`, `$12`, or `-5.2%`.

    Percent strings are returned as fractions (`5.0%` -> 0.05).

    Returns:
        The parsed number, or None for empty markers and unparseable text.
    """

    if not text:
        return None
    original = str(text).strip()
    if original in _EMPTY_MARKERS:
        return None

    is_percent = "%" in original
    cleaned = re.sub(r"\s", "", original.replace(",", "")).replace("%", "")
    cleaned = _STRIP_RE.sub("", cleaned)
    if cleaned in ("", "-", "+"):
        return None

    match = _LEADING_FLOAT_RE.match(cleaned)
    if match is None:
        return None
    number = float(match.group(0))

    # Percent text is always in percentage form (`0.5%` is half a percent).
    return number / 100 if is_percent else number


def cell_number(cell: Cell | None) -> float | None:
    """Return the usable number carried by a cell, or None.

    The numeric value wins; otherwise the formatted text is parsed.
    """

    if cell is None:
        return None
    if cell.num is not None and not isinstance(cell.num, bool) and not math.isnan(cell.num):
        return float(cell.num)
    if cell.text:
        return parse_formatted_number(cell.text)
    return None


def measure_total(grand_total: Cell | None, column: Sequence[Cell | None]) -> float:
    """Resolve the headline value of a measure.

    Args:
        grand_total: The host's grand-total cell for the measure, if any.
        column: The measure's cells, one per data row.

    Returns:
        The grand total when usable, else the single row's value, else the
        sum of all usable cells. Error cells count as 0. Returns 0 when no
        cell carries a number.
    """

    if grand_total is not None:
        if grand_total.is_error:
            logger.debug("Grand-total cell has error: %s", grand_total.error or "unknown error")
            return 0.0
        number = cell_number(grand_total)
        if number is not None:
            return number

    if len(column) == 1:
        cell = column[0]
        if cell is not None:
            if cell.is_error:
                logger.debug("Measure cell has error: %s", cell.error or "unknown error")
                return 0.0
            number = cell_number(cell)
            if number is not None:
                return number
        return 0.0

    total = 0.0
    found = False
    for cell in column:
        if cell is None:
            continue
        if cell.is_error:
            logger.debug("Measure cell has error: %s", cell.error or "unknown error")
            continue
        number = cell_number(cell)
        if number is not None:
            total += number
            found = True
    return total if found else 0.0
