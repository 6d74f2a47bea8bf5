"""Structured chart markup.

Chart layout produces geometry in a logical coordinate space (`0..100`
horizontally) rather than pixels, so a renderer can stretch it to any width.
Labels live in separate `LabelRow`s that sit outside that stretched space.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal, TypeAlias

LabelKind = Literal["value", "axis"]

IdAllocator: TypeAlias = Callable[[str], str]


class SequentialIds:
    """Allocate identifiers that are unique within a single render.

    Identifiers are `<prefix>_<n>` with `n` counting up from `start`, so the
    same inputs always produce the same markup.
    """

    def __init__(self, start: int = 1) -> None:
        self._next = start

    def __call__(self, prefix: str) -> str:
        ident = f"{prefix}_{self._next}"
        self._next += 1
        return ident


@dataclass(frozen=True, slots=True)
class Point:
    """A point in logical chart coordinates."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Rect:
    """A bar anchored at the chart baseline."""

    x: float
    y: float
    width: float
    height: float
    fill: str
    rx: float = 2.0
    opacity: float = 1.0

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2


@dataclass(frozen=True, slots=True)
class Path:
    """A straight-segment path through `points`.

    Args:
        points: Vertices in drawing order.
        stroke: Stroke color, or None for fill-only paths.
        stroke_width: Stroke width in screen pixels (never scaled).
        fill: Fill paint (`none`, a color, or `url(#id)`).
        opacity: Overall opacity.
        baseline: When set, the path is closed down to this y and back to the
            first point, forming an area.
        css_class: Optional class name for the host stylesheet.
    """

    points: tuple[Point, ...]
    stroke: str | None
    stroke_width: float = 0.0
    fill: str = "none"
    opacity: float = 1.0
    baseline: float | None = None
    css_class: str | None = None

    @property
    def d(self) -> str:
        """SVG path data for the path."""

        commands = [
            f"{'M' if idx == 0 else 'L'} {format_coordinate(p.x)} {format_coordinate(p.y)}"
            for idx, p in enumerate(self.points)
        ]
        if self.baseline is not None and self.points:
            base = format_coordinate(self.baseline)
            commands.append(f"L {format_coordinate(self.points[-1].x)} {base}")
            commands.append(f"L {format_coordinate(self.points[0].x)} {base}")
            commands.append("Z")
        return " ".join(commands)


@dataclass(frozen=True, slots=True)
class Circle:
    """A data-point or end-of-series marker."""

    cx: float
    cy: float
    r: float
    fill: str


@dataclass(frozen=True, slots=True)
class LinearGradient:
    """A vertical gradient of a single color fading out downwards."""

    id: str
    color: str
    start_opacity: float = 0.2
    end_opacity: float = 0.02


@dataclass(frozen=True, slots=True)
class LabelRow:
    """A row of text labels rendered outside the scaled chart geometry."""

    kind: LabelKind
    labels: tuple[str, ...]
    font_size: float
    color: str | None = None


Shape: TypeAlias = Rect | Path | Circle


@dataclass(frozen=True, slots=True)
class ChartMarkup:
    """Complete chart description returned by `render_chart`.

    Args:
        chart_type: Chart variant that produced the markup.
        view_box: Logical `(width, height)` of the geometry.
        display_height: Suggested rendered height in pixels.
        shapes: Geometry in paint order.
        gradients: Gradient definitions referenced by `shapes`.
        value_labels: Optional value label row.
        axis_labels: Optional axis label row.
    """

    chart_type: str
    view_box: tuple[float, float] = (100.0, 100.0)
    display_height: float = 0.0
    shapes: tuple[Shape, ...] = ()
    gradients: tuple[LinearGradient, ...] = ()
    value_labels: LabelRow | None = None
    axis_labels: LabelRow | None = None

    @property
    def is_empty(self) -> bool:
        return not self.shapes

    @classmethod
    def empty(cls, chart_type: str) -> ChartMarkup:
        """Return markup that draws nothing."""

        return cls(chart_type=chart_type)


def format_coordinate(value: float) -> str:
    """Render a coordinate compactly (`50`, `33.333333333333336`)."""

    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
