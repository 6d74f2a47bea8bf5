"""Inline chart layout for KPI cards (bar, line, sparkline).

All three chart types share one coordinate model: a logical width domain of
`[0, 100]` and a fixed logical height, stretched non-uniformly by the host.
Strokes are marked non-scaling and labels are emitted as separate rows so the
stretch never distorts them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final, Literal

from .colors import ColorInput, resolve_color
from .dto import Sample, is_number
from .formats import to_fixed
from .markup import (
    ChartMarkup,
    Circle,
    IdAllocator,
    LabelRow,
    LinearGradient,
    Path,
    Point,
    Rect,
    SequentialIds,
    Shape,
)

ChartType = Literal["bar", "line", "sparkline"]
BottomMode = Literal["comparison", "chart", "both"]
AxisRuleMode = Literal["none", "after_last_dash", "last_chars"]

CHART_TYPES: Final[frozenset[str]] = frozenset({"bar", "line", "sparkline"})
BOTTOM_MODES: Final[frozenset[str]] = frozenset({"comparison", "chart", "both"})

DEFAULT_CHART_COLOR: Final[str] = "#6aa7ff"
DEFAULT_SECOND_SERIES_COLOR: Final[str] = "#ff7043"
DEFAULT_VALUE_LABEL_COLOR: Final[str] = "#666666"

CHART_WIDTH: Final[float] = 100.0
CHART_HEIGHT: Final[float] = 100.0
SPARKLINE_HEIGHT: Final[float] = 40.0
SPARKLINE_PADDING: Final[float] = 2.0

SECOND_SERIES_OPACITY: Final[float] = 0.85
BAR_RADIUS: Final[float] = 2.0
POINT_RADIUS: Final[float] = 1.8
END_DOT_RADIUS: Final[float] = 2.0


@dataclass(frozen=True, slots=True)
class AxisLabelRule:
    """Transformation applied to dimension labels on the x-axis.

    Args:
        mode: `none` keeps labels; `after_last_dash` keeps the text after the
            last `-` (`2025-jul` -> `jul`); `last_chars` keeps the last
            `count` characters of labels longer than `count`.
        count: Character count for `last_chars`.
    """

    mode: AxisRuleMode = "none"
    count: int = 3


@dataclass(frozen=True, slots=True)
class ChartConfig:
    """Chart configuration for one card.

    Args:
        chart_type: `bar`, `line`, or `sparkline`.
        color: Primary series color.
        line_width: Stroke width in pixels (clamped to 0.5..10; sparkline 0.5..4).
        bar_width_pct: Share of each bar slot filled by bars (clamped to 10..100).
        height: Display height in pixels; None picks a mode-dependent default.
        bottom_mode: Card bottom section mode; `both` uses smaller defaults.
        second_series: Whether the second series is overlaid.
        second_series_color: Color of the second series.
        show_x_axis: Whether axis labels are emitted.
        x_axis_font_size: Axis label font size.
        axis_rule: Transformation applied to dimension labels.
        show_value_labels: Whether value labels are emitted.
        value_label_font_size: Value label font size.
        value_label_color: Value label color.
    """

    chart_type: ChartType = "bar"
    color: ColorInput | str | None = None
    line_width: float = 2.0
    bar_width_pct: float = 60.0
    height: float | None = None
    bottom_mode: BottomMode = "chart"
    second_series: bool = False
    second_series_color: ColorInput | str | None = None
    show_x_axis: bool = False
    x_axis_font_size: float = 10.0
    axis_rule: AxisLabelRule = AxisLabelRule()
    show_value_labels: bool = False
    value_label_font_size: float = 9.0
    value_label_color: ColorInput | str | None = None


def render_chart(series: Iterable[Sample], config: ChartConfig, *, ids: IdAllocator | None = None) -> ChartMarkup:
    """Lay out a chart for a series.

    Args:
        series: Rows in x-axis order (already sorted by the caller).
        config: ChartConfig for the card.
        ids: Identifier allocator for gradient ids. Defaults to a fresh
            SequentialIds, which keeps output deterministic.

    Returns:
        ChartMarkup. Empty markup when the series has no values or its
        maximum is not positive.
    """

    samples = tuple(series)
    chart_type = config.chart_type if config.chart_type in CHART_TYPES else "bar"
    values = [float(s.value) for s in samples if is_number(s.value)]
    if not values:
        return ChartMarkup.empty(chart_type)

    second: list[float] = []
    if config.second_series:
        second = [float(s.second_value) for s in samples if is_number(s.second_value)]

    peak = max([*values, *(second or [0.0])])
    if peak <= 0:
        return ChartMarkup.empty(chart_type)

    color = resolve_color(config.color, DEFAULT_CHART_COLOR)
    second_color = resolve_color(config.second_series_color, DEFAULT_SECOND_SERIES_COLOR)
    line_width = _clamp(config.line_width or 2.0, 0.5, 10.0)

    if chart_type == "sparkline":
        return _sparkline(values, color=color, line_width=line_width, config=config)

    allocate = ids if ids is not None else SequentialIds()
    shapes: list[Shape] = []
    gradients: list[LinearGradient] = []
    if chart_type == "line":
        _line_shapes(
            values,
            second,
            peak=peak,
            color=color,
            second_color=second_color,
            line_width=line_width,
            gradient_id=allocate("lineGrad"),
            shapes=shapes,
            gradients=gradients,
        )
    else:
        _bar_shapes(
            values,
            second,
            peak=peak,
            color=color,
            second_color=second_color,
            bar_width_pct=config.bar_width_pct,
            shapes=shapes,
        )

    return ChartMarkup(
        chart_type=chart_type,
        view_box=(CHART_WIDTH, CHART_HEIGHT),
        display_height=_display_height(config, both=50.0, chart_only=70.0),
        shapes=tuple(shapes),
        gradients=tuple(gradients),
        value_labels=_value_label_row(values, config),
        axis_labels=_axis_label_row(samples, config),
    )


def x_position(index: int, count: int) -> float:
    """Return the logical x of point `index` in a series of `count` points."""

    if count > 1:
        return index / (count - 1) * CHART_WIDTH
    return CHART_WIDTH / 2


def compact_value_label(value: float) -> str:
    """Compact label for a data point: `1.5B`, `2.0M`, `3.4K`, `42`, `0.5`."""

    magnitude = abs(value)
    if magnitude >= 1e9:
        return to_fixed(value / 1e9, 1) + "B"
    if magnitude >= 1e6:
        return to_fixed(value / 1e6, 1) + "M"
    if magnitude >= 1e3:
        return to_fixed(value / 1e3, 1) + "K"
    if float(value).is_integer():
        return str(int(value))
    return to_fixed(value, 1)


def axis_label(sample: Sample, rule: AxisLabelRule) -> str:
    """Return the x-axis label for a row.

    Host-formatted axis text wins; otherwise the row label is transformed by
    `rule`.
    """

    if sample.axis_text is not None:
        return sample.axis_text
    text = sample.label or ""
    if rule.mode == "none":
        return text
    if rule.mode == "last_chars" and len(text) > rule.count > 0:
        return text[-rule.count :]
    if "-" in text:
        return text.rsplit("-", 1)[-1]
    return text


def _bar_shapes(
    values: list[float],
    second: list[float],
    *,
    peak: float,
    color: str,
    second_color: str,
    bar_width_pct: float,
    shapes: list[Shape],
) -> None:
    count = len(values)
    fraction = _clamp(bar_width_pct or 60.0, 10.0, 100.0) / 100
    grouped = len(second) == count
    group_count = 2 if grouped else 1
    slot = CHART_WIDTH / count
    bar_width = slot * fraction / group_count
    spacing = slot * (1 - fraction)

    for idx, value in enumerate(values):
        x = idx * slot + spacing / 2
        height = max(value / peak * CHART_HEIGHT, 0.0)
        shapes.append(
            Rect(x=x, y=CHART_HEIGHT - height, width=bar_width, height=height, fill=color, rx=BAR_RADIUS)
        )
        if grouped:
            second_height = max(second[idx] / peak * CHART_HEIGHT, 0.0)
            shapes.append(
                Rect(
                    x=x + bar_width,
                    y=CHART_HEIGHT - second_height,
                    width=bar_width,
                    height=second_height,
                    fill=second_color,
                    rx=BAR_RADIUS,
                    opacity=SECOND_SERIES_OPACITY,
                )
            )


def _line_shapes(
    values: list[float],
    second: list[float],
    *,
    peak: float,
    color: str,
    second_color: str,
    line_width: float,
    gradient_id: str,
    shapes: list[Shape],
    gradients: list[LinearGradient],
) -> None:
    points = _scaled_points(values, peak=peak)
    gradients.append(LinearGradient(id=gradient_id, color=color))
    shapes.append(Path(points=points, stroke=None, fill=f"url(#{gradient_id})", baseline=CHART_HEIGHT))
    shapes.append(Path(points=points, stroke=color, stroke_width=line_width, css_class="miniChart-line"))
    shapes.extend(Circle(cx=p.x, cy=p.y, r=POINT_RADIUS, fill=color) for p in points)

    if len(second) > 1:
        second_points = _scaled_points(second, peak=peak)
        shapes.append(
            Path(points=second_points, stroke=second_color, stroke_width=line_width, opacity=SECOND_SERIES_OPACITY)
        )
        shapes.extend(Circle(cx=p.x, cy=p.y, r=POINT_RADIUS, fill=second_color) for p in second_points)


def _sparkline(values: list[float], *, color: str, line_width: float, config: ChartConfig) -> ChartMarkup:
    low = min(values)
    high = max(values)
    span = (high - low) or 1.0
    usable = SPARKLINE_HEIGHT - 2 * SPARKLINE_PADDING
    count = len(values)
    points = tuple(
        Point(x=x_position(idx, count), y=SPARKLINE_PADDING + usable - (value - low) / span * usable)
        for idx, value in enumerate(values)
    )
    last = points[-1]
    return ChartMarkup(
        chart_type="sparkline",
        view_box=(CHART_WIDTH, SPARKLINE_HEIGHT),
        display_height=_display_height(config, both=24.0, chart_only=30.0),
        shapes=(
            Path(points=points, stroke=color, stroke_width=min(line_width, 4.0)),
            Circle(cx=last.x, cy=last.y, r=END_DOT_RADIUS, fill=color),
        ),
    )


def _scaled_points(values: list[float], *, peak: float) -> tuple[Point, ...]:
    count = len(values)
    return tuple(
        Point(x=x_position(idx, count), y=CHART_HEIGHT - value / peak * CHART_HEIGHT)
        for idx, value in enumerate(values)
    )


def _value_label_row(values: list[float], config: ChartConfig) -> LabelRow | None:
    if not config.show_value_labels:
        return None
    return LabelRow(
        kind="value",
        labels=tuple(compact_value_label(v) for v in values),
        font_size=config.value_label_font_size or 9.0,
        color=resolve_color(config.value_label_color, DEFAULT_VALUE_LABEL_COLOR),
    )


def _axis_label_row(samples: tuple[Sample, ...], config: ChartConfig) -> LabelRow | None:
    if not config.show_x_axis:
        return None
    if not any(s.label is not None or s.axis_text is not None for s in samples):
        return None
    return LabelRow(
        kind="axis",
        labels=tuple(axis_label(s, config.axis_rule) for s in samples),
        font_size=config.x_axis_font_size or 10.0,
    )


def _display_height(config: ChartConfig, *, both: float, chart_only: float) -> float:
    if config.height is not None and config.height > 0:
        return float(config.height)
    return both if config.bottom_mode == "both" else chart_only


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, float(value)))
