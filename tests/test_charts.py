"""Unit tests for chart layout."""

from __future__ import annotations

import pytest

from kpi_engine.charts import AxisLabelRule, ChartConfig, axis_label, compact_value_label, render_chart
from kpi_engine.dto import Sample
from kpi_engine.markup import Circle, Path, Point, Rect, SequentialIds

pytestmark = pytest.mark.unit


def _series(*values: float | None) -> list[Sample]:
    return [Sample(value=v, label=f"2025-{idx}") for idx, v in enumerate(values)]


def test_empty_or_non_positive_series_draws_nothing() -> None:
    """No values, all-zero, and all-negative series produce empty markup."""

    config = ChartConfig(chart_type="bar")
    assert render_chart([], config).is_empty
    assert render_chart(_series(None, None), config).is_empty
    assert render_chart(_series(0, 0), config).is_empty
    assert render_chart(_series(-3, -1), ChartConfig(chart_type="line")).is_empty


def test_single_bar_is_centered() -> None:
    """A single-point bar chart is centered at x=50."""

    markup = render_chart(_series(5), ChartConfig(chart_type="bar"))
    (bar,) = markup.shapes
    assert isinstance(bar, Rect)
    assert bar.center_x == 50
    assert bar.height == 100


def test_bar_geometry_scales_to_the_series_maximum() -> None:
    """Bars share equal slots and scale heights to the maximum value."""

    markup = render_chart(_series(1, 2), ChartConfig(chart_type="bar", bar_width_pct=60))
    first, second = markup.shapes
    assert isinstance(first, Rect) and isinstance(second, Rect)
    assert (first.x, first.width, first.height, first.y) == (10, 30, 50, 50)
    assert (second.x, second.width, second.height, second.y) == (60, 30, 100, 0)
    assert markup.view_box == (100.0, 100.0)
    assert markup.gradients == ()


def test_negative_bars_are_clamped_to_zero_height() -> None:
    """Negative values never draw below the baseline."""

    markup = render_chart(_series(-1, 4), ChartConfig(chart_type="bar"))
    negative = markup.shapes[0]
    assert isinstance(negative, Rect)
    assert negative.height == 0
    assert negative.y == 100


def test_second_series_groups_bars_only_when_lengths_match() -> None:
    """Grouped bars need one second value per primary value."""

    rows = [Sample(value=1, label="a", second_value=4), Sample(value=2, label="b", second_value=1)]
    markup = render_chart(rows, ChartConfig(chart_type="bar", second_series=True, second_series_color="#00ff00"))
    assert len(markup.shapes) == 4
    first, first_second = markup.shapes[:2]
    assert isinstance(first, Rect) and isinstance(first_second, Rect)
    assert first.width == 15
    assert first_second.x == first.x + first.width
    assert first_second.height == 100
    assert first_second.fill == "#00ff00"
    assert first_second.opacity == 0.85

    partial = [Sample(value=1, label="a", second_value=4), Sample(value=2, label="b")]
    assert len(render_chart(partial, ChartConfig(chart_type="bar", second_series=True)).shapes) == 2


def test_line_chart_emits_area_stroke_and_points() -> None:
    """Line charts draw a gradient area, a stroke, and one dot per point."""

    markup = render_chart(_series(0, 5, 10), ChartConfig(chart_type="line", color="#123456"))
    area, stroke, *dots = markup.shapes

    assert isinstance(area, Path) and isinstance(stroke, Path)
    assert area.fill == "url(#lineGrad_1)"
    assert area.stroke is None
    assert stroke.css_class == "miniChart-line"
    assert stroke.stroke == "#123456"
    assert stroke.points == (Point(0, 100), Point(50, 50), Point(100, 0))
    assert area.d == "M 0 100 L 50 50 L 100 0 L 100 100 L 0 100 Z"
    assert [(d.cx, d.cy) for d in dots if isinstance(d, Circle)] == [(0, 100), (50, 50), (100, 0)]
    assert markup.gradients[0].id == "lineGrad_1"
    assert markup.gradients[0].color == "#123456"


def test_gradient_ids_come_from_the_supplied_allocator() -> None:
    """Callers control gradient ids through the allocator."""

    markup = render_chart(_series(1, 2), ChartConfig(chart_type="line"), ids=SequentialIds(7))
    assert markup.gradients[0].id == "lineGrad_7"

    shared = SequentialIds()
    first = render_chart(_series(1, 2), ChartConfig(chart_type="line"), ids=shared)
    second = render_chart(_series(1, 2), ChartConfig(chart_type="line"), ids=shared)
    assert first.gradients[0].id != second.gradients[0].id


def test_line_width_is_clamped() -> None:
    """Stroke widths outside 0.5..10 are clamped."""

    wide = render_chart(_series(1, 2), ChartConfig(chart_type="line", line_width=50))
    thin = render_chart(_series(1, 2), ChartConfig(chart_type="line", line_width=0.1))
    assert isinstance(wide.shapes[1], Path) and wide.shapes[1].stroke_width == 10
    assert isinstance(thin.shapes[1], Path) and thin.shapes[1].stroke_width == 0.5


def test_sparkline_uses_local_range_and_an_end_dot() -> None:
    """Sparklines scale between the series min and max with 2px padding."""

    markup = render_chart(_series(1, 3, 2), ChartConfig(chart_type="sparkline", line_width=8, show_value_labels=True))
    path, dot = markup.shapes
    assert isinstance(path, Path) and isinstance(dot, Circle)
    assert [p.y for p in path.points] == [38, 2, 20]
    assert path.stroke_width == 4
    assert (dot.cx, dot.cy, dot.r) == (100, 20, 2)
    assert markup.view_box == (100.0, 40.0)
    assert markup.value_labels is None


def test_flat_sparkline_does_not_divide_by_zero() -> None:
    """A constant series sits on the bottom of the usable area."""

    markup = render_chart(_series(4, 4), ChartConfig(chart_type="sparkline"))
    path = markup.shapes[0]
    assert isinstance(path, Path)
    assert [p.y for p in path.points] == [38, 38]


def test_display_height_depends_on_bottom_mode() -> None:
    """Explicit heights win; otherwise `both` mode is shorter."""

    rows = _series(1, 2)
    assert render_chart(rows, ChartConfig(chart_type="bar", bottom_mode="both")).display_height == 50
    assert render_chart(rows, ChartConfig(chart_type="bar", bottom_mode="chart")).display_height == 70
    assert render_chart(rows, ChartConfig(chart_type="sparkline", bottom_mode="both")).display_height == 24
    assert render_chart(rows, ChartConfig(chart_type="sparkline")).display_height == 30
    assert render_chart(rows, ChartConfig(chart_type="line", height=120)).display_height == 120


def test_unknown_chart_type_falls_back_to_bar() -> None:
    """Unrecognized chart types render as bars."""

    markup = render_chart(_series(1, 2), ChartConfig(chart_type="pie"))  # type: ignore[arg-type]
    assert markup.chart_type == "bar"
    assert all(isinstance(shape, Rect) for shape in markup.shapes)


def test_value_labels_are_compact() -> None:
    """Value labels abbreviate large numbers with one decimal."""

    markup = render_chart(_series(1500, 42, 0.25, 2e6), ChartConfig(chart_type="bar", show_value_labels=True))
    assert markup.value_labels is not None
    assert markup.value_labels.labels == ("1.5K", "42", "0.3", "2.0M")
    assert markup.value_labels.color == "#666666"
    assert compact_value_label(3_400_000_000) == "3.4B"


def test_axis_labels_follow_the_axis_rule() -> None:
    """Axis labels use host text first, then the configured rule."""

    assert axis_label(Sample(1, "2025-jul"), AxisLabelRule(mode="after_last_dash")) == "jul"
    assert axis_label(Sample(1, "2025-jul"), AxisLabelRule(mode="none")) == "2025-jul"
    assert axis_label(Sample(1, "September"), AxisLabelRule(mode="last_chars", count=3)) == "ber"
    assert axis_label(Sample(1, "Sep"), AxisLabelRule(mode="last_chars", count=3)) == "Sep"
    assert axis_label(Sample(1, "2025-jul", axis_text="Jul"), AxisLabelRule(mode="after_last_dash")) == "Jul"

    rows = [Sample(1, "2025-jan"), Sample(2, "2025-feb")]
    markup = render_chart(
        rows, ChartConfig(show_x_axis=True, axis_rule=AxisLabelRule(mode="after_last_dash"), x_axis_font_size=8)
    )
    assert markup.axis_labels is not None
    assert markup.axis_labels.labels == ("jan", "feb")
    assert markup.axis_labels.font_size == 8


def test_axis_row_is_omitted_without_labels() -> None:
    """No axis row is produced when no row carries a label."""

    rows = [Sample(1), Sample(2)]
    assert render_chart(rows, ChartConfig(show_x_axis=True)).axis_labels is None
    assert render_chart(_series(1, 2), ChartConfig(show_x_axis=False)).axis_labels is None


def test_rendering_is_deterministic() -> None:
    """Identical inputs produce identical markup."""

    rows = _series(3, 1, 4, 1, 5)
    config = ChartConfig(chart_type="line", show_value_labels=True, show_x_axis=True)
    assert render_chart(rows, config) == render_chart(rows, config)


def test_single_point_line_is_centered() -> None:
    """A one-sample line chart places its point at x=50."""

    markup = render_chart([Sample(5)], ChartConfig(chart_type="line"))
    area, stroke, dot = markup.shapes
    assert isinstance(area, Path) and isinstance(stroke, Path) and isinstance(dot, Circle)
    assert stroke.points == (Point(50, 0),)
    assert (dot.cx, dot.cy) == (50, 0)


def test_line_second_series_overlay_shares_the_primary_scale() -> None:
    """The overlay is scaled against the combined maximum and drawn translucent."""

    rows = [Sample(value=1, second_value=4), Sample(value=2, second_value=2)]
    markup = render_chart(rows, ChartConfig(chart_type="line", second_series=True, second_series_color="#00aa00"))

    assert len(markup.shapes) == 7
    stroke = markup.shapes[1]
    overlay = markup.shapes[4]
    assert isinstance(stroke, Path) and isinstance(overlay, Path)
    assert [p.y for p in stroke.points] == [75, 50]
    assert [p.y for p in overlay.points] == [0, 50]
    assert overlay.stroke == "#00aa00"
    assert overlay.opacity == 0.85
    assert [(c.cx, c.cy, c.fill) for c in markup.shapes[5:] if isinstance(c, Circle)] == [
        (0, 0, "#00aa00"),
        (100, 50, "#00aa00"),
    ]


def test_line_overlay_needs_more_than_one_second_value() -> None:
    """A lone second value scales the chart but draws no overlay."""

    rows = [Sample(value=1, second_value=4), Sample(value=2)]
    markup = render_chart(rows, ChartConfig(chart_type="line", second_series=True))

    assert len(markup.shapes) == 4
    stroke = markup.shapes[1]
    assert isinstance(stroke, Path)
    assert [p.y for p in stroke.points] == [75, 50]
    assert not any(isinstance(s, Path) and s.opacity == 0.85 for s in markup.shapes)


def test_single_point_sparkline_sits_at_the_bottom_center() -> None:
    """A one-sample sparkline has a flat range and a centered end dot."""

    markup = render_chart([Sample(7)], ChartConfig(chart_type="sparkline"))
    path, dot = markup.shapes
    assert isinstance(path, Path) and isinstance(dot, Circle)
    assert path.points == (Point(50, 38),)
    assert (dot.cx, dot.cy) == (50, 38)
