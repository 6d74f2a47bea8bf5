"""Integration tests for card HTML rendering."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

import pytest

from cards.codec import decode_card_config, decode_card_data
from cards.render import box_shadow, render_card, resolve_palette
from cards.schema import CardConfig, CardData, CardStyle, MeasureData, ShadowConfig
from kpi_engine.colors import PlainColor

pytestmark = pytest.mark.integration


def _render(payload: dict[str, Any], **kwargs: Any):
    return render_card(decode_card_config(payload["config"]), decode_card_data(payload["data"]), **kwargs)


def test_render_card_formats_the_main_value_and_comparisons(card_payload: dict[str, Any]) -> None:
    """The fixture card renders its headline, comparison, and arrow."""

    rendered = _render(card_payload)

    assert rendered.main_text == "1.23M"
    assert rendered.warnings == ()
    assert '<span class="kpi-title" style="font-size:14px;">Revenue</span>' in rendered.html
    assert '<span class="kpi-subtitle" style="font-size:11px;color:#888888;">Year to date</span>' in rendered.html
    assert ">1.23M</div>" in rendered.html
    assert "-12.5%" in rendered.html
    assert '<span class="kpi-arrow" style="color:#e04e4e;font-size:14px;">↓</span>' in rendered.html
    assert "comp-left" in rendered.html
    assert "comp-right" not in rendered.html
    assert "kpi-bottom kpi-bottom-both" in rendered.html


def test_render_card_sorts_and_labels_the_chart(card_payload: dict[str, Any]) -> None:
    """Series rows are sorted before layout and axis labels use the rule."""

    rendered = _render(card_payload)

    assert rendered.chart_svg.startswith('<svg class="miniChart miniChart-bar"')
    assert "height:50px" in rendered.chart_svg
    assert rendered.chart_svg in rendered.html
    jan = rendered.html.index('<span class="mini-chart-xaxis-label">jan</span>')
    feb = rendered.html.index('<span class="mini-chart-xaxis-label">feb</span>')
    mar = rendered.html.index('<span class="mini-chart-xaxis-label">mar</span>')
    assert jan < feb < mar


def test_chart_color_and_dimensions_default_from_settings(settings, card_payload: dict[str, Any]) -> None:
    """`KPI_CARDS` supplies the chart color and card size."""

    settings.KPI_CARDS = {"CHART_COLOR": "#ff0000", "DEFAULT_WIDTH": 100, "DEFAULT_HEIGHT": 100}
    rendered = _render(card_payload)

    assert 'fill="#ff0000"' in rendered.chart_svg
    assert "kpi-micro kpi-short" in rendered.html


def test_max_chart_rows_truncates_the_series(settings, card_payload: dict[str, Any]) -> None:
    """Only the first `MAX_CHART_ROWS` rows are charted."""

    settings.KPI_CARDS = {"MAX_CHART_ROWS": 2}
    rendered = _render(card_payload)

    assert rendered.chart_svg.count("<rect ") == 2
    assert "mar" in rendered.html
    assert '<span class="mini-chart-xaxis-label">feb</span>' not in rendered.html


def test_chart_without_positive_values_adds_a_warning(card_payload: dict[str, Any]) -> None:
    """An empty chart is omitted and reported."""

    for row in card_payload["data"]["series"]:
        row["value"] = 0
    rendered = _render(card_payload)

    assert rendered.chart_svg == ""
    assert "kpi-chart" not in rendered.html
    assert rendered.warnings == ("Chart has no positive values to draw.",)


def test_user_text_is_escaped() -> None:
    """Titles, affixes, and trend text never inject markup."""

    config = decode_card_config(
        {
            "title": "<script>alert(1)</script>",
            "main": {"format": "number", "prefix": "<b>"},
            "comparisons": {"left": {"trendText": "<i>up</i>"}},
        }
    )
    rendered = render_card(config, CardData(main=MeasureData(value=5)))

    assert "<script>" not in rendered.html
    assert "&lt;script&gt;" in rendered.html
    assert '<span class="val-prefix">&lt;b&gt;</span>' in rendered.html
    assert "&lt;i&gt;up&lt;/i&gt;" in rendered.html


def test_missing_comparison_values_render_as_dash() -> None:
    """Enabled comparisons without data show the missing-value sentinel."""

    rendered = render_card(CardConfig(), CardData(main=MeasureData(value=None)))

    assert rendered.main_text == "-"
    assert rendered.html.count('<div class="comp-value"') == 2
    assert "kpi-arrow" not in rendered.html


def test_auto_contrast_uses_light_text_on_dark_backgrounds() -> None:
    """Auto-contrast derives the value color from the background."""

    style = CardStyle(background=PlainColor("#101010"), auto_contrast=True)
    rendered = render_card(replace(CardConfig(), style=style), CardData(main=MeasureData(value=1)))

    assert "font-weight:700;color:#ffffff;" in rendered.html


def test_resolve_palette_prefers_conditional_background_and_builds_gradients() -> None:
    """Conditional backgrounds override static ones and feed the gradient."""

    palette = resolve_palette(
        CardStyle(
            background=PlainColor("#ffffff"),
            conditional_background=PlainColor("#00ff00"),
            gradient=True,
            gradient_direction="to bottom",
        )
    )
    assert palette.background == "#00ff00"
    assert palette.card_background == "linear-gradient(to bottom, #00ff00, #667eea)"
    assert palette.text == "#222222"
    assert palette.border == "#e0e0e0"


def test_box_shadow_presets_and_custom() -> None:
    """Preset depths map to fixed shadows; custom builds one from its fields."""

    assert box_shadow(ShadowConfig()) == "none"
    assert box_shadow(ShadowConfig(depth="strong")).startswith("0 10px 30px")
    assert box_shadow(ShadowConfig(depth="custom")) == "0px 4px 12px 0px rgba(0,0,0,0.25)"
    assert (
        box_shadow(ShadowConfig(depth="custom", color=PlainColor("#ff0000"), offset_x=2, blur=6.5))
        == "2px 4px 6.5px 0px rgba(255,0,0,0.25)"
    )


def test_comparison_icons_follow_their_position() -> None:
    """Icons sit before or after the value, or above the title."""

    config = decode_card_config(
        {
            "comparisons": {
                "left": {"iconUrl": "/icons/up.svg?a=1&b=2", "iconPosition": "before"},
                "right": {"iconUrl": "/icons/r.svg", "iconPosition": "top", "iconSize": 24},
                "third": {"enabled": True, "iconUrl": "/icons/t.svg", "iconPosition": "after"},
            },
        }
    )
    html = render_card(config, CardData(main=MeasureData(value=1))).html

    left = html[html.index("comp-left") : html.index("comp-right")]
    assert 'src="/icons/up.svg?a=1&amp;b=2"' in left
    assert left.index('class="comp-icon"') > left.index('class="comp-value"')
    assert "comp-icon-top" not in left
    assert (
        '<div class="comp-block comp-right"><div class="comp-icon-top">'
        '<img class="comp-icon" src="/icons/r.svg" style="width:24px;height:24px;" alt=""></div>'
    ) in html
    assert '-<img class="comp-icon" src="/icons/t.svg" style="width:16px;height:16px;" alt=""></div>' in html


def test_comparison_font_weights_and_title_size() -> None:
    """Per-side title size is scaled; unknown weights fall back to defaults."""

    config = decode_card_config(
        {
            "comparisons": {
                "left": {"titleFontSize": 8, "titleFontWeight": "700", "valueFontWeight": 300},
                "right": {"valueFontWeight": "bold;background:red"},
            },
        }
    )
    rendered = render_card(config, CardData(main=MeasureData(value=1)), width=300, height=200)

    assert '<div class="comp-title" style="font-size:8px;font-weight:700;">' in rendered.html
    assert '<div class="comp-value" style="font-size:18px;font-weight:300;' in rendered.html
    assert '<div class="comp-title" style="font-size:12px;font-weight:500;">' in rendered.html
    assert '<div class="comp-value" style="font-size:18px;font-weight:600;' in rendered.html
    assert "background:red" not in rendered.html
    assert any("value_font_weight" in warning for warning in rendered.warnings)


def test_dividers_frame_the_comparison_row() -> None:
    """A horizontal rule precedes the row and vertical rules separate blocks."""

    config = decode_card_config(
        {
            "comparisons": {"third": {"enabled": True}},
            "style": {"dividerVColor": "#cccccc", "dividerVWidth": 2},
        }
    )
    html = render_card(config, CardData()).html

    assert '<div class="divider-h" style="background:#ececec;height:1px;"></div><div class="kpi-comparisons">' in html
    assert html.count('<div class="divider-v" style="background:#cccccc;width:2px;align-self:stretch;"></div>') == 2

    single = decode_card_config({"comparisons": {"right": {"enabled": False}}})
    assert "divider-v" not in render_card(single, CardData()).html

    hidden = decode_card_config({"style": {"showDividerH": False, "showDividerV": False}})
    hidden_html = render_card(hidden, CardData()).html
    assert "divider-h" not in hidden_html
    assert "divider-v" not in hidden_html

    chart_only = decode_card_config({"bottomMode": "chart"})
    assert "divider-h" not in render_card(chart_only, CardData()).html


def test_title_alignment_and_subtitle_color() -> None:
    """The title group is aligned as configured and the subtitle is colored."""

    config = decode_card_config(
        {"title": "Sales", "subtitle": "'Q1'", "titleAlign": "right", "subtitleColor": "#123456"}
    )
    html = render_card(config, CardData(main=MeasureData(value=1)), width=300, height=200).html

    assert '<div class="kpi-header" data-align="right" style="justify-content:flex-end;">' in html
    assert '<div class="kpi-title-group" style="align-items:flex-end;text-align:right;">' in html
    assert '<span class="kpi-subtitle" style="font-size:11px;color:#123456;">Q1</span>' in html


def test_card_level_arrow_colors_apply_to_every_side() -> None:
    """Card-level arrow colors are used unless a side sets its own."""

    config = decode_card_config(
        {
            "negativeColor": "#990000",
            "comparisons": {
                "left": {"showArrows": True},
                "right": {"showArrows": True, "negativeColor": "#330000"},
            },
        }
    )
    data = CardData(comparisons={"left": MeasureData(value=-1), "right": MeasureData(value=-2)})
    html = render_card(config, data).html

    left = html[html.index("comp-left") : html.index("comp-right")]
    right = html[html.index("comp-right") :]
    assert '<span class="kpi-arrow" style="color:#990000;' in left
    assert '<span class="kpi-arrow" style="color:#330000;' in right
