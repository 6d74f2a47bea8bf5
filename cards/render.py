"""HTML rendering for KPI cards.

The renderer is a thin presentation layer: every value, color, arrow, font
size, and chart geometry decision is delegated to `kpi_engine`. This module
only assembles the results into escaped HTML.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Final

from django.utils.html import format_html, format_html_join
from django.utils.safestring import SafeString, mark_safe

from kpi_engine.arrows import compute_arrow, signed_value_color
from kpi_engine.charts import ChartConfig, render_chart
from kpi_engine.colors import (
    DEFAULT_TEXT_COLOR,
    PlainColor,
    hex_to_rgba,
    resolve_color,
    resolve_display_color,
)
from kpi_engine.formats import format_value
from kpi_engine.markup import ChartMarkup, IdAllocator, LabelRow
from kpi_engine.sizing import CardFontSizes, scale_fonts
from kpi_engine.sorting import sort_samples
from kpi_engine.svg import chart_to_svg
from kpi_engine.titles import parse_title_expression

from .conf import card_settings
from .schema import (
    FONT_WEIGHTS,
    TITLE_ALIGNMENTS,
    CardConfig,
    CardData,
    CardStyle,
    ComparisonConfig,
    MeasureData,
    ShadowConfig,
)
from .validator import validate_card_config

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND: Final[str] = "#ffffff"
DEFAULT_GRADIENT_END: Final[str] = "#667eea"
DEFAULT_BORDER_COLOR: Final[str] = "#e0e0e0"
DEFAULT_TREND_COLOR: Final[str] = "#999999"
DEFAULT_SUBTITLE_COLOR: Final[str] = "#888888"
DEFAULT_DIVIDER_H_COLOR: Final[str] = "#ececec"
DEFAULT_DIVIDER_V_COLOR: Final[str] = "#ebebeb"
DEFAULT_ICON_SIZE: Final[float] = 16.0
DEFAULT_TITLE_WEIGHT: Final[str] = "500"
DEFAULT_VALUE_WEIGHT: Final[str] = "600"
DEFAULT_SHADOW_COLOR: Final[str] = "#000000"
CUSTOM_SHADOW_ALPHA: Final[float] = 0.25

SHADOW_PRESETS: Final[dict[str, str]] = {
    "none": "none",
    "subtle": "0 1px 3px rgba(0,0,0,0.08), 0 1px 2px rgba(0,0,0,0.06)",
    "medium": "0 4px 12px rgba(0,0,0,0.10), 0 2px 4px rgba(0,0,0,0.06)",
    "strong": "0 10px 30px rgba(0,0,0,0.15), 0 4px 8px rgba(0,0,0,0.08)",
}

_FLEX_ALIGN: Final[dict[str, str]] = {"left": "flex-start", "center": "center", "right": "flex-end"}


@dataclass(frozen=True, slots=True)
class RenderedCard:
    """A rendered KPI card.

    Args:
        html: Complete card markup (escaped, safe to embed).
        main_text: Formatted headline value.
        chart_svg: Chart SVG, or an empty string when no chart is drawn.
        warnings: Non-fatal issues found while rendering.
    """

    html: str
    main_text: str
    chart_svg: str = ""
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CardPalette:
    """Concrete colors resolved for a card."""

    background: str
    card_background: str
    text: str
    border: str


def render_card(
    config: CardConfig,
    data: CardData,
    *,
    width: float | None = None,
    height: float | None = None,
    ids: IdAllocator | None = None,
) -> RenderedCard:
    """Render a KPI card to HTML.

    Args:
        config: CardConfig describing the presentation.
        data: CardData with the measure values and chart series.
        width: Card width in px (defaults to `KPI_CARDS["DEFAULT_WIDTH"]`).
        height: Card height in px (defaults to `KPI_CARDS["DEFAULT_HEIGHT"]`).
        ids: Identifier allocator passed through to chart layout.

    Returns:
        RenderedCard. Configuration problems never raise; they surface as
        warnings and engine fallbacks.
    """

    conf = card_settings()
    card_width = float(width or conf.default_width)
    card_height = float(height or conf.default_height)
    warnings = list(validate_card_config(config).warnings)

    palette = resolve_palette(config.style)
    main_text = format_value(data.main.value, config.main.format, data.main.native)
    enabled = [cmp for cmp in config.comparisons if cmp.enabled]
    sizes = scale_fonts(
        card_width,
        card_height,
        main_text=main_text,
        comparison_count=len(enabled),
        auto_fit=config.main.auto_fit,
        main_value_size=config.main.font_size,
    )

    comparisons_html = SafeString("")
    if config.shows_comparisons and enabled:
        blocks = [
            _comparison_block(
                cmp,
                data.comparisons.get(cmp.side),
                config.style,
                palette,
                _comparison_sizes(sizes, cmp, card_width, card_height),
            )
            for cmp in enabled
        ]
        comparisons_html = format_html(
            '{}<div class="kpi-comparisons">{}</div>',
            _divider_h(config.style),
            mark_safe(_divider_v(config.style).join(blocks)),
        )

    chart_svg = ""
    chart_html = SafeString("")
    if config.shows_chart:
        markup = _chart_markup(config, data, max_rows=conf.max_chart_rows, default_color=conf.chart_color, ids=ids)
        if markup.is_empty:
            logger.debug("Chart for card %r has nothing to draw.", config.title)
            warnings.append("Chart has no positive values to draw.")
        else:
            chart_svg = chart_to_svg(markup)
            chart_html = format_html(
                '<div class="kpi-chart">{}{}{}</div>',
                mark_safe(chart_svg),
                _label_row(markup.value_labels, "mini-chart-value-labels", "mini-chart-value-label"),
                _label_row(markup.axis_labels, "mini-chart-xaxis", "mini-chart-xaxis-label"),
            )

    main_color = resolve_display_color(config.main.color, palette.text, config.style.auto_contrast, palette.background)
    html = format_html(
        '<div class="kpi-card {}" style="background:{};color:{};border:{};border-radius:{}px;box-shadow:{};">'
        "{}"
        '<div class="kpi-main-value" style="font-size:{}px;font-weight:700;color:{};">{}{}{}</div>'
        '<div class="kpi-bottom kpi-bottom-{}">{}{}</div>'
        "</div>",
        sizes.css_classes,
        palette.card_background,
        palette.text,
        _border(config.style, palette),
        f"{config.style.border_radius:g}",
        box_shadow(config.style.shadow),
        _header(config, palette, sizes),
        sizes.main_value,
        main_color,
        _affix("val-prefix", config.main.prefix),
        main_text,
        _affix("val-suffix", config.main.suffix),
        config.bottom_mode,
        comparisons_html,
        chart_html,
    )
    return RenderedCard(html=str(html), main_text=main_text, chart_svg=chart_svg, warnings=tuple(warnings))


def resolve_palette(style: CardStyle) -> CardPalette:
    """Resolve the card's background, text, and border colors.

    A conditional background overrides the static one. Gradients blend the
    resolved background into `background2`.
    """

    conditional = resolve_color(style.conditional_background, "")
    background = conditional or resolve_color(style.background, DEFAULT_BACKGROUND)
    card_background = background
    if style.gradient:
        end = resolve_color(style.background2, DEFAULT_GRADIENT_END)
        card_background = f"linear-gradient({style.gradient_direction}, {background}, {end})"
    return CardPalette(
        background=background,
        card_background=card_background,
        text=resolve_color(style.text_color, DEFAULT_TEXT_COLOR),
        border=resolve_color(style.border_color, DEFAULT_BORDER_COLOR),
    )


def box_shadow(shadow: ShadowConfig) -> str:
    """Return the CSS box-shadow for a ShadowConfig."""

    if shadow.depth == "custom":
        color = hex_to_rgba(resolve_color(shadow.color, DEFAULT_SHADOW_COLOR), CUSTOM_SHADOW_ALPHA)
        return f"{shadow.offset_x:g}px {shadow.offset_y:g}px {shadow.blur:g}px {shadow.spread:g}px {color}"
    return SHADOW_PRESETS.get(shadow.depth, "none")


def _chart_markup(
    config: CardConfig,
    data: CardData,
    *,
    max_rows: int,
    default_color: str,
    ids: IdAllocator | None,
) -> ChartMarkup:
    rows = data.series[:max_rows]
    if config.sort is not None:
        rows = sort_samples(rows, config.sort)
    chart: ChartConfig = replace(
        config.chart,
        bottom_mode=config.bottom_mode,
        color=config.chart.color or PlainColor(default_color),
        value_label_color=config.chart.value_label_color or config.style.text_color,
    )
    return render_chart(rows, chart, ids=ids)


def _header(config: CardConfig, palette: CardPalette, sizes: CardFontSizes) -> SafeString:
    title = parse_title_expression(config.title).display_text.strip()
    subtitle = parse_title_expression(config.subtitle).display_text.strip()
    if not title and not subtitle:
        return SafeString("")

    subtitle_html = SafeString("")
    if subtitle:
        subtitle_html = format_html(
            '<span class="kpi-subtitle" style="font-size:{}px;color:{};">{}</span>',
            sizes.subtitle,
            resolve_color(config.subtitle_color, DEFAULT_SUBTITLE_COLOR),
            subtitle,
        )
    title_html = SafeString("")
    if title:
        title_html = format_html('<span class="kpi-title" style="font-size:{}px;">{}</span>', sizes.title, title)
    align = config.title_align if config.title_align in TITLE_ALIGNMENTS else "left"
    return format_html(
        '<div class="kpi-header" data-align="{}" style="justify-content:{};">'
        '<div class="kpi-title-group" style="align-items:{};text-align:{};">{}{}</div></div>',
        align,
        _FLEX_ALIGN[align],
        _FLEX_ALIGN[align],
        align,
        title_html,
        subtitle_html,
    )


def _comparison_block(
    cmp: ComparisonConfig,
    measure: MeasureData | None,
    style: CardStyle,
    palette: CardPalette,
    sizes: CardFontSizes,
) -> SafeString:
    value = measure.value if measure is not None else None
    native = measure.native if measure is not None else None
    text = format_value(value, cmp.format, native)

    base_color = resolve_display_color(cmp.value_color, palette.text, style.auto_contrast, palette.background)
    color = signed_value_color(
        value,
        base_color,
        cmp.arrows,
        auto_color_by_sign=cmp.auto_color_by_sign,
        apply_arrow_color=cmp.apply_arrow_color_to_value,
    )
    arrow = compute_arrow(value, cmp.arrows, default_color=base_color)
    arrow_html = SafeString("")
    if arrow is not None:
        arrow_html = format_html(
            '<span class="kpi-arrow" style="color:{};font-size:{}px;">{}</span>',
            arrow.color,
            sizes.arrow,
            arrow.glyph,
        )

    trend_html = SafeString("")
    if cmp.trend_text.strip():
        trend_html = format_html(
            '<div class="comp-trend" style="color:{};">{}</div>',
            resolve_color(cmp.trend_color, DEFAULT_TREND_COLOR),
            cmp.trend_text,
        )

    icon_html = _icon(cmp)
    top_icon_html = SafeString("")
    if cmp.icon_position == "top" and icon_html:
        top_icon_html = format_html('<div class="comp-icon-top">{}</div>', icon_html)
    return format_html(
        '<div class="comp-block comp-{}">'
        "{}"
        '<div class="comp-title" style="font-size:{}px;font-weight:{};">{}</div>'
        '<div class="comp-value" style="font-size:{}px;font-weight:{};color:{};">{}{}{}{}{}{}</div>'
        "{}</div>",
        cmp.side,
        top_icon_html,
        sizes.comparison_title,
        _font_weight(cmp.title_font_weight, DEFAULT_TITLE_WEIGHT),
        parse_title_expression(cmp.title).display_text,
        sizes.comparison_value,
        _font_weight(cmp.value_font_weight, DEFAULT_VALUE_WEIGHT),
        color,
        icon_html if cmp.icon_position == "before" else "",
        arrow_html,
        _affix("val-prefix", cmp.prefix),
        text,
        _affix("val-suffix", cmp.suffix),
        icon_html if cmp.icon_position == "after" else "",
        trend_html,
    )


def _comparison_sizes(sizes: CardFontSizes, cmp: ComparisonConfig, width: float, height: float) -> CardFontSizes:
    """Rescale the comparison title for a side that requests its own size."""

    if cmp.title_font_size is None:
        return sizes
    scaled = scale_fonts(width, height, comparison_title_size=cmp.title_font_size)
    return replace(sizes, comparison_title=scaled.comparison_title)


def _icon(cmp: ComparisonConfig) -> SafeString:
    if not cmp.icon_url:
        return SafeString("")
    size = cmp.icon_size if cmp.icon_size > 0 else DEFAULT_ICON_SIZE
    return format_html(
        '<img class="comp-icon" src="{}" style="width:{}px;height:{}px;" alt="">',
        cmp.icon_url,
        f"{size:g}",
        f"{size:g}",
    )


def _font_weight(weight: str, default: str) -> str:
    return weight if weight in FONT_WEIGHTS else default


def _divider_h(style: CardStyle) -> SafeString:
    if not style.show_divider_h:
        return SafeString("")
    return format_html(
        '<div class="divider-h" style="background:{};height:{}px;"></div>',
        resolve_color(style.divider_h_color, DEFAULT_DIVIDER_H_COLOR),
        f"{max(style.divider_h_width, 0.0):g}",
    )


def _divider_v(style: CardStyle) -> SafeString:
    if not style.show_divider_v:
        return SafeString("")
    return format_html(
        '<div class="divider-v" style="background:{};width:{}px;align-self:stretch;"></div>',
        resolve_color(style.divider_v_color, DEFAULT_DIVIDER_V_COLOR),
        f"{max(style.divider_v_width, 0.0):g}",
    )


def _label_row(row: LabelRow | None, row_class: str, label_class: str) -> SafeString:
    if row is None:
        return SafeString("")
    color = f"color:{row.color};" if row.color else ""
    return format_html(
        '<div class="{}" style="font-size:{}px;{}">{}</div>',
        row_class,
        f"{row.font_size:g}",
        color,
        format_html_join("", '<span class="{}">{}</span>', ((label_class, label) for label in row.labels)),
    )


def _affix(css_class: str, text: str) -> SafeString:
    if not text:
        return SafeString("")
    return format_html('<span class="{}">{}</span>', css_class, text)


def _border(style: CardStyle, palette: CardPalette) -> str:
    if not style.show_border:
        return "none"
    return f"{style.border_width:g}px solid {palette.border}"
