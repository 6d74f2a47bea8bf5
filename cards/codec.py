"""Decoding helpers for KPI card payloads.

Payloads arrive as JSON (API) or YAML (management command) documents using the
camelCase keys the host emits. Decoding is best-effort: unknown or malformed
scalar fields fall back to defaults and are left for the validator to report.
Only structurally unusable payloads raise.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, cast

from kpi_engine.arrows import DEFAULT_NEGATIVE_COLOR, DEFAULT_POSITIVE_COLOR, ArrowConfig
from kpi_engine.charts import AxisLabelRule, ChartConfig
from kpi_engine.colors import coerce_color_input, resolve_color
from kpi_engine.dto import Sample
from kpi_engine.formats import FormatSpec, NativeValue
from kpi_engine.sorting import SortSpec
from kpi_engine.values import Cell, measure_total, parse_formatted_number

from .schema import (
    COMPARISON_SIDES,
    CardConfig,
    CardData,
    CardStyle,
    ComparisonConfig,
    MainValueConfig,
    MeasureData,
    ShadowConfig,
)


def decode_card_config(payload: object) -> CardConfig:
    """Decode a CardConfig from a host payload.

    Args:
        payload: Mapping with `title`, `subtitle`, `main`, `comparisons`,
            `style`, `chart`, `sort`, and `bottomMode` keys (all optional).
            `titleAlign`, `subtitleColor`, and the card-level
            `positiveColor`/`negativeColor` arrow colors are also read.

    Returns:
        CardConfig instance.

    Raises:
        ValueError: When the payload or one of its sections is not an object.
    """

    root = _section(payload, "config", required=True)
    comparisons_raw = _section(root.get("comparisons"), "config.comparisons")
    # Card-level arrow colors apply to every side that does not set its own.
    positive_color = resolve_color(coerce_color_input(root.get("positiveColor")), DEFAULT_POSITIVE_COLOR)
    negative_color = resolve_color(coerce_color_input(root.get("negativeColor")), DEFAULT_NEGATIVE_COLOR)
    comparisons = tuple(
        _decode_comparison(
            side,
            _section(comparisons_raw.get(side), f"config.comparisons.{side}"),
            positive_color=positive_color,
            negative_color=negative_color,
        )
        for side in COMPARISON_SIDES
    )
    sort_raw = root.get("sort")
    return CardConfig(
        title=_parse_str(root.get("title")),
        subtitle=_parse_str(root.get("subtitle")),
        title_align=_parse_str(root.get("titleAlign")) or "left",  # type: ignore[arg-type]
        subtitle_color=coerce_color_input(root.get("subtitleColor")),
        main=_decode_main(_section(root.get("main"), "config.main")),
        comparisons=comparisons,
        style=_decode_style(_section(root.get("style"), "config.style")),
        chart=_decode_chart(_section(root.get("chart"), "config.chart")),
        sort=_decode_sort(_section(sort_raw, "config.sort")) if sort_raw is not None else None,
        bottom_mode=_parse_str(root.get("bottomMode")) or "comparison",  # type: ignore[arg-type]
    )


def decode_card_data(payload: object) -> CardData:
    """Decode CardData from a host payload.

    Args:
        payload: Mapping with `main`, `comparisons` (keyed by side), and
            `series` (list of rows with `value`, `label`, `secondValue`,
            `axisText`).

    Returns:
        CardData instance.

    Raises:
        ValueError: When the payload, a measure, or a series row is not an object,
            or when `series` is not a list.
    """

    root = _section(payload, "data", required=True)
    comparisons_raw = _section(root.get("comparisons"), "data.comparisons")
    comparisons = {
        side: _decode_measure(_section(comparisons_raw[side], f"data.comparisons.{side}"))
        for side in COMPARISON_SIDES
        if comparisons_raw.get(side) is not None
    }

    series_raw = root.get("series")
    if series_raw is None:
        series_raw = []
    if not isinstance(series_raw, list):
        raise ValueError("data.series must be a list.")
    series = tuple(
        _decode_sample(_section(row, f"data.series[{idx}]", required=True)) for idx, row in enumerate(series_raw)
    )

    return CardData(
        main=_decode_measure(_section(root.get("main"), "data.main")),
        comparisons=comparisons,
        series=series,
    )


def _decode_main(raw: Mapping[str, Any]) -> MainValueConfig:
    return MainValueConfig(
        format=_decode_format(raw.get("format")),
        prefix=_parse_str(raw.get("prefix")),
        suffix=_parse_str(raw.get("suffix")),
        color=coerce_color_input(raw.get("color")),
        font_size=_parse_float(raw.get("fontSize")),
        auto_fit=_parse_bool(raw.get("autoFit")),
    )


def _decode_comparison(
    side: str,
    raw: Mapping[str, Any],
    *,
    positive_color: str = DEFAULT_POSITIVE_COLOR,
    negative_color: str = DEFAULT_NEGATIVE_COLOR,
) -> ComparisonConfig:
    defaults = ComparisonConfig(side="left")
    arrows = ArrowConfig(
        enabled=_parse_bool(raw.get("showArrows")),
        invert=_parse_bool(raw.get("invertArrows")),
        positive_color=resolve_color(coerce_color_input(raw.get("positiveColor")), positive_color),
        negative_color=resolve_color(coerce_color_input(raw.get("negativeColor")), negative_color),
        override_glyph=_parse_str(raw.get("arrowGlyph")) or None,
        override_color=_parse_str(raw.get("arrowColor")) or None,
    )
    return ComparisonConfig(
        side=side,  # type: ignore[arg-type]
        enabled=_parse_bool(raw.get("enabled"), default=side != "third"),
        title=_parse_str(raw.get("title")),
        format=_decode_format(raw.get("format")),
        prefix=_parse_str(raw.get("prefix")),
        suffix=_parse_str(raw.get("suffix")),
        value_color=coerce_color_input(raw.get("valueColor")),
        trend_text=_parse_str(raw.get("trendText")),
        trend_color=coerce_color_input(raw.get("trendColor")),
        arrows=arrows,
        auto_color_by_sign=_parse_bool(raw.get("autoColorBySign")),
        apply_arrow_color_to_value=_parse_bool(raw.get("applyArrowColorToValue")),
        icon_url=_parse_str(raw.get("iconUrl")),
        icon_size=_parse_float(raw.get("iconSize"), default=defaults.icon_size) or defaults.icon_size,
        icon_position=_parse_str(raw.get("iconPosition")) or defaults.icon_position,  # type: ignore[arg-type]
        title_font_size=_parse_float(raw.get("titleFontSize")),
        title_font_weight=_parse_str(raw.get("titleFontWeight")) or defaults.title_font_weight,
        value_font_weight=_parse_str(raw.get("valueFontWeight")) or defaults.value_font_weight,
    )


def _decode_format(raw: object) -> FormatSpec:
    """Decode a FormatSpec from either a bare kind string or an object."""

    if raw is None:
        return FormatSpec()
    if isinstance(raw, str):
        return FormatSpec(kind=raw.strip() or "auto")  # type: ignore[arg-type]
    spec = _section(raw, "format")
    return FormatSpec(
        kind=_parse_str(spec.get("kind")) or "auto",  # type: ignore[arg-type]
        pattern=_parse_str(spec.get("pattern")) or None,
        currency_symbol=_parse_str(spec.get("currencySymbol")) or None,
        duration_pattern=_parse_str(spec.get("durationPattern")) or None,
    )


def _decode_style(raw: Mapping[str, Any]) -> CardStyle:
    shadow_raw = _section(raw.get("shadow"), "config.style.shadow")
    defaults = ShadowConfig()
    shadow = ShadowConfig(
        depth=_parse_str(shadow_raw.get("depth")) or "none",  # type: ignore[arg-type]
        color=coerce_color_input(shadow_raw.get("color")),
        offset_x=_parse_float(shadow_raw.get("offsetX"), default=defaults.offset_x),
        offset_y=_parse_float(shadow_raw.get("offsetY"), default=defaults.offset_y),
        blur=_parse_float(shadow_raw.get("blur"), default=defaults.blur),
        spread=_parse_float(shadow_raw.get("spread"), default=defaults.spread),
    )
    return CardStyle(
        background=coerce_color_input(raw.get("background")),
        conditional_background=coerce_color_input(raw.get("conditionalBackground")),
        text_color=coerce_color_input(raw.get("textColor")),
        auto_contrast=_parse_bool(raw.get("autoContrast")),
        gradient=_parse_bool(raw.get("gradient")),
        background2=coerce_color_input(raw.get("background2")),
        gradient_direction=_parse_str(raw.get("gradientDirection")) or "to right",
        show_border=_parse_bool(raw.get("showBorder"), default=True),
        border_width=_parse_float(raw.get("borderWidth"), default=1) or 1,
        border_color=coerce_color_input(raw.get("borderColor")),
        border_radius=_parse_float(raw.get("borderRadius"), default=5) or 5,
        shadow=shadow,
        show_divider_h=_parse_bool(raw.get("showDividerH"), default=True),
        divider_h_color=coerce_color_input(raw.get("dividerHColor")),
        divider_h_width=_parse_float(raw.get("dividerHWidth"), default=1),
        show_divider_v=_parse_bool(raw.get("showDividerV"), default=True),
        divider_v_color=coerce_color_input(raw.get("dividerVColor")),
        divider_v_width=_parse_float(raw.get("dividerVWidth"), default=1),
    )


def _decode_chart(raw: Mapping[str, Any]) -> ChartConfig:
    defaults = ChartConfig()
    rule_raw = _section(raw.get("axisRule"), "config.chart.axisRule")
    count = _parse_int(rule_raw.get("count"))
    axis_rule = AxisLabelRule(
        mode=_parse_str(rule_raw.get("mode")) or "none",  # type: ignore[arg-type]
        count=count if count is not None else 3,
    )
    return ChartConfig(
        chart_type=_parse_str(raw.get("type")) or "bar",  # type: ignore[arg-type]
        color=coerce_color_input(raw.get("color")),
        line_width=_parse_float(raw.get("lineWidth"), default=defaults.line_width),
        bar_width_pct=_parse_float(raw.get("barWidth"), default=defaults.bar_width_pct),
        height=_parse_float(raw.get("height")),
        second_series=_parse_bool(raw.get("secondSeries")),
        second_series_color=coerce_color_input(raw.get("secondSeriesColor")),
        show_x_axis=_parse_bool(raw.get("showXAxis")),
        x_axis_font_size=_parse_float(raw.get("xAxisFontSize"), default=defaults.x_axis_font_size),
        axis_rule=axis_rule,
        show_value_labels=_parse_bool(raw.get("showValueLabels")),
        value_label_font_size=_parse_float(raw.get("valueLabelFontSize"), default=defaults.value_label_font_size),
        value_label_color=coerce_color_input(raw.get("valueLabelColor")),
    )


def _decode_sort(raw: Mapping[str, Any]) -> SortSpec:
    return SortSpec(
        by=_parse_str(raw.get("by")) or "dimension",  # type: ignore[arg-type]
        order=_parse_str(raw.get("order")) or "asc",  # type: ignore[arg-type]
        expression=_parse_str(raw.get("expression")) or None,
    )


def _decode_measure(raw: Mapping[str, Any]) -> MeasureData:
    """Decode a measure given either as a direct value or as host cells."""

    text = raw.get("text")
    if "value" in raw:
        value = _parse_float(raw.get("value"))
        if value is None and isinstance(raw.get("value"), str):
            value = parse_formatted_number(raw["value"])
    elif "grandTotal" in raw or "cells" in raw:
        grand_total = _decode_cell(raw.get("grandTotal"))
        cells_raw = raw.get("cells") or []
        if not isinstance(cells_raw, list):
            raise ValueError("cells must be a list.")
        cells = [_decode_cell(cell) for cell in cells_raw]
        value = measure_total(grand_total, cells)
        if text is None:
            source = grand_total or (cells[0] if cells else None)
            text = source.text if source is not None else None
    else:
        value = None

    native = None
    if any(raw.get(key) is not None for key in ("formatType", "pattern")) or text is not None:
        native = NativeValue(
            text=_parse_str(text) or None,
            format_type=_parse_str(raw.get("formatType")) or None,
            pattern=_parse_str(raw.get("pattern")) or None,
        )
    return MeasureData(value=value, native=native)


def _decode_cell(raw: object) -> Cell | None:
    if raw is None:
        return None
    cell = _section(raw, "cell")
    return Cell(
        num=_parse_float(cell.get("num")),
        text=_parse_str(cell.get("text")) or None,
        is_error=_parse_bool(cell.get("isError")),
        error=_parse_str(cell.get("error")) or None,
    )


def _decode_sample(raw: Mapping[str, Any]) -> Sample:
    label = raw.get("label")
    axis_text = raw.get("axisText")
    return Sample(
        value=_parse_float(raw.get("value")),
        label=None if label is None else str(label),
        second_value=_parse_float(raw.get("secondValue")),
        axis_text=None if axis_text is None else str(axis_text),
    )


def _section(value: object, name: str, *, required: bool = False) -> Mapping[str, Any]:
    """Return `value` as a mapping; None becomes `{}` unless `required`."""

    if value is None and not required:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"{name} must be an object.")
    return cast(Mapping[str, Any], value)


def _parse_str(value: object) -> str:
    """Best-effort string parsing for card payloads."""

    if value is None:
        return ""
    return str(value).strip()


def _parse_float(value: object, *, default: float | None = None) -> float | None:
    """Best-effort float parsing for card payloads."""

    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        number = float(str(value).strip())
    except ValueError:
        return default
    if not math.isfinite(number):
        return default
    return number


def _parse_int(value: object) -> int | None:
    """Best-effort int parsing for card payloads."""

    if value is None or value == "":
        return None
    try:
        return int(str(value))
    except ValueError:
        return None


def _parse_bool(value: object, *, default: bool = False) -> bool:
    """Best-effort bool parsing for card payloads."""

    if isinstance(value, bool):
        return value
    if value is None:
        return default
    normalized = str(value).strip().casefold()
    return normalized in {"1", "true", "yes", "on"}
