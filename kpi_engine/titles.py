"""Title text handling.

Card titles may be plain text, quoted literals (`'Revenue'`, `="Revenue"`), or
host expressions (`=Sum(Sales)`). Expressions are only detected here; their
evaluation stays with the host.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

FUNCTION_CALL_RE = re.compile(
    r"Date\(|AddMonths\(|Today\(|Sum\(|Count\(|Avg\(|Max\(|Min\(|If\(|Match\(|SubString\(",
    re.IGNORECASE,
)
_OPERATOR_RE = re.compile(r"[&|]")


@dataclass(frozen=True, slots=True)
class TitleParse:
    """Outcome of parsing a raw title.

    Args:
        display_text: Text to show immediately (empty while an expression is pending).
        expression: Expression the host should evaluate, if any.
        needs_eval: Whether `expression` must be evaluated before display.
    """

    display_text: str
    expression: str | None = None
    needs_eval: bool = False


def extract_string_literal(expr: str | None) -> str | None:
    """Return the unquoted text of `'x'`, `"x"`, `='x'` or `="x"`, else None."""

    if not expr or not isinstance(expr, str):
        return None
    trimmed = expr.strip()
    body = trimmed[1:].strip() if trimmed.startswith("=") else trimmed
    for quote in ("'", '"'):
        if body.startswith(quote) and body.endswith(quote):
            return body[1:-1]
    return None


def parse_title_expression(raw: str | None) -> TitleParse:
    """Classify a raw title as literal text or a host expression."""

    if not isinstance(raw, str) or not raw.strip():
        return TitleParse(display_text=raw or "")

    trimmed = raw.strip()
    literal = extract_string_literal(trimmed)
    if literal is not None:
        return TitleParse(display_text=literal)

    if trimmed.startswith("="):
        inner = trimmed[1:].strip()
        nested = extract_string_literal(inner)
        if nested is not None:
            return TitleParse(display_text=nested)
        return TitleParse(display_text="", expression=inner, needs_eval=True)

    if FUNCTION_CALL_RE.search(trimmed):
        return TitleParse(display_text="", expression=trimmed, needs_eval=True)

    if _OPERATOR_RE.search(trimmed) and len(trimmed) > 3:
        return TitleParse(display_text="", expression=trimmed, needs_eval=True)

    return TitleParse(display_text=raw)


def evaluation_text(result: object, fallback: str) -> str:
    """Normalize a host evaluation result into display text.

    Mappings are checked for `qText` then `qNum`; other values are stringified.
    Empty results return `fallback`.
    """

    if not result and result != 0:
        return fallback
    if isinstance(result, Mapping):
        if result.get("qText") is not None:
            return str(result["qText"])
        if result.get("qNum") is not None:
            return str(result["qNum"])
        return fallback
    return str(result)
