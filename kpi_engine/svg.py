"""Serialize ChartMarkup geometry into an inline SVG element.

Only geometry is serialized; label rows are left to the host layout so they
are not stretched with the chart.
"""

from __future__ import annotations

from html import escape

from .markup import ChartMarkup, Circle, LinearGradient, Path, Rect, format_coordinate


def chart_to_svg(markup: ChartMarkup) -> str:
    """Render ChartMarkup as an SVG string.

    Args:
        markup: Output of `render_chart`.

    Returns:
        An `<svg>` element, or an empty string when the markup draws nothing.
    """

    if markup.is_empty:
        return ""

    width, height = markup.view_box
    parts = [
        (
            f'<svg class="miniChart miniChart-{_attr(markup.chart_type)}" '
            f'viewBox="0 0 {format_coordinate(width)} {format_coordinate(height)}" '
            f'preserveAspectRatio="none" width="100%" '
            f'style="height:{format_coordinate(markup.display_height)}px">'
        )
    ]
    if markup.gradients:
        parts.append("<defs>")
        parts.extend(_gradient(g) for g in markup.gradients)
        parts.append("</defs>")
    for shape in markup.shapes:
        if isinstance(shape, Rect):
            parts.append(_rect(shape))
        elif isinstance(shape, Path):
            parts.append(_path(shape))
        elif isinstance(shape, Circle):
            parts.append(_circle(shape))
    parts.append("</svg>")
    return "".join(parts)


def _gradient(gradient: LinearGradient) -> str:
    color = _attr(gradient.color)
    return (
        f'<linearGradient id="{_attr(gradient.id)}" x1="0" y1="0" x2="0" y2="1">'
        f'<stop offset="0%" stop-color="{color}" stop-opacity="{gradient.start_opacity:g}"/>'
        f'<stop offset="100%" stop-color="{color}" stop-opacity="{gradient.end_opacity:g}"/>'
        "</linearGradient>"
    )


def _rect(rect: Rect) -> str:
    opacity = f' opacity="{rect.opacity:g}"' if rect.opacity != 1.0 else ""
    return (
        f'<rect x="{format_coordinate(rect.x)}" y="{format_coordinate(rect.y)}" '
        f'width="{format_coordinate(rect.width)}" height="{format_coordinate(rect.height)}" '
        f'rx="{format_coordinate(rect.rx)}" fill="{_attr(rect.fill)}"{opacity}/>'
    )


def _path(path: Path) -> str:
    attrs = [f'd="{path.d}"', f'fill="{_attr(path.fill)}"']
    if path.stroke is not None:
        attrs.append(f'stroke="{_attr(path.stroke)}"')
        attrs.append(f'stroke-width="{path.stroke_width:g}"')
        attrs.append('stroke-linejoin="round"')
        attrs.append('stroke-linecap="round"')
        attrs.append('vector-effect="non-scaling-stroke"')
    if path.opacity != 1.0:
        attrs.append(f'opacity="{path.opacity:g}"')
    if path.css_class:
        attrs.append(f'class="{_attr(path.css_class)}"')
    return f"<path {' '.join(attrs)}/>"


def _circle(circle: Circle) -> str:
    return (
        f'<circle cx="{format_coordinate(circle.cx)}" cy="{format_coordinate(circle.cy)}" '
        f'r="{circle.r:g}" fill="{_attr(circle.fill)}" vector-effect="non-scaling-stroke"/>'
    )


def _attr(value: str) -> str:
    return escape(value, quote=True)
