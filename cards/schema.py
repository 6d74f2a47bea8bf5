"""Schema types for declarative KPI card configuration.

A KPI card is driven entirely by a CardConfig (how to present) and a CardData
(what to present). Both are immutable; the codec builds them from host
payloads and the renderer turns them into HTML.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

from kpi_engine.arrows import ArrowConfig
from kpi_engine.charts import BottomMode, ChartConfig
from kpi_engine.colors import ColorInput
from kpi_engine.dto import Sample
from kpi_engine.formats import FormatSpec, NativeValue
from kpi_engine.sorting import SortSpec

ComparisonSide = Literal["left", "right", "third"]

ShadowDepth = Literal["none", "subtle", "medium", "strong", "custom"]

IconPosition = Literal["before", "after", "top"]

TitleAlign = Literal["left", "center", "right"]

COMPARISON_SIDES: tuple[ComparisonSide, ...] = ("left", "right", "third")

ICON_POSITIONS: tuple[IconPosition, ...] = ("before", "after", "top")

TITLE_ALIGNMENTS: tuple[TitleAlign, ...] = ("left", "center", "right")

FONT_WEIGHTS: tuple[str, ...] = ("300", "400", "500", "600", "700")


@dataclass(frozen=True, slots=True)
class MainValueConfig:
    """Presentation of the headline value.

    Args:
        format: FormatSpec for the value.
        prefix: Text rendered before the value.
        suffix: Text rendered after the value.
        color: Explicit value color; falls back to contrast then text color.
        font_size: Requested font size before responsive scaling.
        auto_fit: Grow the value to fill the card.
    """

    format: FormatSpec = FormatSpec()
    prefix: str = ""
    suffix: str = ""
    color: ColorInput | None = None
    font_size: float | None = None
    auto_fit: bool = False


@dataclass(frozen=True, slots=True)
class ComparisonConfig:
    """Presentation of one comparison value below the headline.

    Args:
        side: Slot the comparison occupies.
        enabled: Whether the comparison is rendered.
        title: Title text (literal, quoted literal, or host expression).
        format: FormatSpec for the value.
        prefix: Text rendered before the value.
        suffix: Text rendered after the value.
        value_color: Explicit value color.
        trend_text: Optional micro-text rendered under the value.
        trend_color: Color of `trend_text`.
        arrows: ArrowConfig for the value.
        auto_color_by_sign: Color the value by its sign.
        apply_arrow_color_to_value: Reuse the arrow color for the value.
        icon_url: Optional icon image URL.
        icon_size: Icon width and height in px.
        icon_position: Icon placement relative to the value, or above the title.
        title_font_size: Requested title size before responsive scaling.
        title_font_weight: CSS weight of the title.
        value_font_weight: CSS weight of the value.
    """

    side: ComparisonSide
    enabled: bool = False
    title: str = ""
    format: FormatSpec = FormatSpec()
    prefix: str = ""
    suffix: str = ""
    value_color: ColorInput | None = None
    trend_text: str = ""
    trend_color: ColorInput | None = None
    arrows: ArrowConfig = ArrowConfig()
    auto_color_by_sign: bool = False
    apply_arrow_color_to_value: bool = False
    icon_url: str = ""
    icon_size: float = 16
    icon_position: IconPosition = "before"
    title_font_size: float | None = None
    title_font_weight: str = "500"
    value_font_weight: str = "600"


@dataclass(frozen=True, slots=True)
class ShadowConfig:
    """Card shadow. Offsets, blur and spread only apply to `custom`."""

    depth: ShadowDepth = "none"
    color: ColorInput | None = None
    offset_x: float = 0
    offset_y: float = 4
    blur: float = 12
    spread: float = 0


@dataclass(frozen=True, slots=True)
class CardStyle:
    """Card-level colors, border, and shadow.

    Args:
        background: Static background color.
        conditional_background: Host-computed background that overrides `background`.
        text_color: Base text color.
        auto_contrast: Derive value colors from the background.
        gradient: Render a two-stop gradient background.
        background2: Second gradient stop.
        gradient_direction: CSS gradient direction.
        show_border: Whether the card has a border.
        border_width: Border width in px.
        border_color: Border color.
        border_radius: Corner radius in px.
        shadow: ShadowConfig.
        show_divider_h: Draw a rule above the comparison row.
        divider_h_color: Color of the horizontal rule.
        divider_h_width: Thickness of the horizontal rule in px.
        show_divider_v: Draw rules between comparison blocks.
        divider_v_color: Color of the vertical rules.
        divider_v_width: Thickness of the vertical rules in px.
    """

    background: ColorInput | None = None
    conditional_background: ColorInput | None = None
    text_color: ColorInput | None = None
    auto_contrast: bool = False
    gradient: bool = False
    background2: ColorInput | None = None
    gradient_direction: str = "to right"
    show_border: bool = True
    border_width: float = 1
    border_color: ColorInput | None = None
    border_radius: float = 5
    shadow: ShadowConfig = ShadowConfig()
    show_divider_h: bool = True
    divider_h_color: ColorInput | None = None
    divider_h_width: float = 1
    show_divider_v: bool = True
    divider_v_color: ColorInput | None = None
    divider_v_width: float = 1


def _default_comparisons() -> tuple[ComparisonConfig, ...]:
    return (
        ComparisonConfig(side="left", enabled=True),
        ComparisonConfig(side="right", enabled=True),
        ComparisonConfig(side="third", enabled=False),
    )


@dataclass(frozen=True, slots=True)
class CardConfig:
    """Full presentation config for a KPI card.

    Args:
        title: Main title (literal, quoted literal, or host expression).
        subtitle: Optional subtitle.
        main: MainValueConfig.
        comparisons: One ComparisonConfig per side, in display order.
        style: CardStyle.
        chart: ChartConfig for the bottom chart.
        sort: Optional SortSpec applied to the chart series.
        bottom_mode: What the bottom section shows.
        title_align: Horizontal alignment of the title group.
        subtitle_color: Color of the subtitle.
    """

    title: str = ""
    subtitle: str = ""
    title_align: TitleAlign = "left"
    subtitle_color: ColorInput | None = None
    main: MainValueConfig = MainValueConfig()
    comparisons: tuple[ComparisonConfig, ...] = field(default_factory=_default_comparisons)
    style: CardStyle = CardStyle()
    chart: ChartConfig = ChartConfig()
    sort: SortSpec | None = None
    bottom_mode: BottomMode = "comparison"

    @property
    def shows_comparisons(self) -> bool:
        return self.bottom_mode in ("comparison", "both")

    @property
    def shows_chart(self) -> bool:
        return self.bottom_mode in ("chart", "both")

    def comparison(self, side: ComparisonSide) -> ComparisonConfig | None:
        """Return the ComparisonConfig for `side`, if configured."""

        for cmp in self.comparisons:
            if cmp.side == side:
                return cmp
        return None


@dataclass(frozen=True, slots=True)
class MeasureData:
    """Resolved value of one measure plus its host-native formatting."""

    value: float | None = None
    native: NativeValue | None = None


@dataclass(frozen=True, slots=True)
class CardData:
    """Data rendered by a KPI card.

    Args:
        main: Headline measure.
        comparisons: Comparison measures keyed by side.
        series: Chart rows in host order.
    """

    main: MeasureData = MeasureData()
    comparisons: Mapping[str, MeasureData] = field(default_factory=dict)
    series: tuple[Sample, ...] = ()
