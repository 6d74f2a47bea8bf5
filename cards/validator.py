"""Validation for CardConfig definitions.

Card configs are user-edited, so decoding is lenient and this module reports
what is wrong instead of raising. Errors make a card unrenderable as
configured; warnings flag values the renderer will clamp or ignore.
"""

from __future__ import annotations

from dataclasses import dataclass

from kpi_engine.charts import BOTTOM_MODES, CHART_TYPES
from kpi_engine.formats import FormatSpec, validate_format_spec
from kpi_engine.sorting import SortSpec, resolve_sort_field
from kpi_engine.titles import parse_title_expression

from .schema import COMPARISON_SIDES, FONT_WEIGHTS, ICON_POSITIONS, TITLE_ALIGNMENTS, CardConfig


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Result of validating a card config."""

    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


def validate_card_config(config: CardConfig) -> ValidationResult:
    """Validate a single CardConfig.

    Args:
        config: CardConfig to validate.

    Returns:
        ValidationResult containing errors and warnings.
    """

    errors: list[str] = []
    warnings: list[str] = []

    if config.bottom_mode not in BOTTOM_MODES:
        errors.append(f"CardConfig.bottom_mode is not a supported value: {config.bottom_mode!r}.")

    errors.extend(_format_errors("main.format", config.main.format))

    seen: set[str] = set()
    for cmp in config.comparisons:
        if cmp.side not in COMPARISON_SIDES:
            errors.append(f"CardConfig.comparisons has an unknown side: {cmp.side!r}.")
            continue
        if cmp.side in seen:
            errors.append(f"CardConfig.comparisons[{cmp.side}] is declared more than once.")
        seen.add(cmp.side)
        if not cmp.enabled:
            continue
        errors.extend(_format_errors(f"comparisons[{cmp.side}].format", cmp.format))
        if parse_title_expression(cmp.title).needs_eval:
            warnings.append(
                f"CardConfig.comparisons[{cmp.side}].title is an expression and renders empty until evaluated."
            )
        if cmp.icon_position not in ICON_POSITIONS:
            errors.append(
                f"CardConfig.comparisons[{cmp.side}].icon_position is not a supported value: {cmp.icon_position!r}."
            )
        if cmp.icon_url and cmp.icon_size <= 0:
            warnings.append(f"CardConfig.comparisons[{cmp.side}].icon_size must be positive; 16px is used.")
        if cmp.title_font_size is not None and cmp.title_font_size <= 0:
            warnings.append(f"CardConfig.comparisons[{cmp.side}].title_font_size must be positive; 12px is used.")
        weights = {"title_font_weight": cmp.title_font_weight, "value_font_weight": cmp.value_font_weight}
        for name, weight in weights.items():
            if weight not in FONT_WEIGHTS:
                warnings.append(
                    f"CardConfig.comparisons[{cmp.side}].{name}={weight!r} is not one of "
                    f"{', '.join(FONT_WEIGHTS)}; the default weight is used."
                )

    if parse_title_expression(config.title).needs_eval:
        warnings.append("CardConfig.title is an expression and renders empty until evaluated.")
    if config.title_align not in TITLE_ALIGNMENTS:
        errors.append(f"CardConfig.title_align is not a supported value: {config.title_align!r}.")

    chart = config.chart
    if chart.chart_type not in CHART_TYPES:
        errors.append(f"CardConfig.chart.chart_type is not a supported value: {chart.chart_type!r}.")
    if not 0.5 <= chart.line_width <= 10:
        warnings.append(f"CardConfig.chart.line_width={chart.line_width:g} is clamped to [0.5, 10].")
    if not 10 <= chart.bar_width_pct <= 100:
        warnings.append(f"CardConfig.chart.bar_width_pct={chart.bar_width_pct:g} is clamped to [10, 100].")
    if chart.height is not None and chart.height <= 0:
        warnings.append("CardConfig.chart.height must be positive; the default height is used.")
    if chart.axis_rule.mode not in ("none", "after_last_dash", "last_chars"):
        errors.append(f"CardConfig.chart.axis_rule.mode is not a supported value: {chart.axis_rule.mode!r}.")
    elif chart.axis_rule.mode == "last_chars" and chart.axis_rule.count < 1:
        errors.append("CardConfig.chart.axis_rule.count must be at least 1 for mode='last_chars'.")

    if config.sort is not None:
        sort_errors = _sort_errors(config.sort)
        errors.extend(sort_errors)
        if config.sort.by == "expression" and not sort_errors and resolve_sort_field(config.sort) is None:
            warnings.append(
                f"CardConfig.sort.expression={config.sort.expression!r} is not recognized; rows keep host order."
            )

    shadow = config.style.shadow
    if shadow.depth not in ("none", "subtle", "medium", "strong", "custom"):
        errors.append(f"CardConfig.style.shadow.depth is not a supported value: {shadow.depth!r}.")
    elif shadow.depth != "custom" and shadow.color is not None:
        warnings.append("CardConfig.style.shadow.color only applies to depth='custom'.")
    dividers = {"divider_h_width": config.style.divider_h_width, "divider_v_width": config.style.divider_v_width}
    for name, width in dividers.items():
        if width < 0:
            warnings.append(f"CardConfig.style.{name}={width:g} is clamped to 0.")

    return ValidationResult(is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings))


def _format_errors(path: str, spec: FormatSpec) -> list[str]:
    return [f"CardConfig.{path}: {message}" for message in validate_format_spec(spec)]


def _sort_errors(spec: SortSpec) -> list[str]:
    errors: list[str] = []
    if spec.by not in ("dimension", "measure", "expression"):
        errors.append(f"CardConfig.sort.by is not a supported value: {spec.by!r}.")
    if spec.order not in ("asc", "desc"):
        errors.append(f"CardConfig.sort.order is not a supported value: {spec.order!r}.")
    return errors
