"""SVG export of traced images."""
from typing import List, Optional, Sequence, Tuple

import numpy as np

from tracevec.types import (
    IndexedImage,
    LineSegment,
    QuadraticSegment,
    RenderingOptions,
    Segment,
)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"


def format_number(x: float, precision: Optional[int] = None) -> str:
    """
    Format a coordinate.

    Args:
        x: Number to format
        precision: Decimal places to round to, None for full precision

    Returns:
        Formatted string without trailing zeros ("11", "10.5")
    """
    x = float(x)
    if precision is None:
        if x.is_integer():
            return str(int(x))
        return repr(x)

    x = round(x, precision)
    if x == 0:
        x = 0.0  # no "-0"
    formatted = f"{x:.{precision}f}"
    # Remove trailing zeros and decimal point if not needed
    if '.' in formatted:
        formatted = formatted.rstrip('0').rstrip('.')
    return formatted


def format_color(rgba: Sequence[int]) -> str:
    """Fill, stroke and opacity attributes for a palette color."""
    r, g, b, a = (int(c) for c in rgba)
    rgb = f"rgb({r},{g},{b})"
    return (
        f'fill="{rgb}" stroke="{rgb}" stroke-width="1" '
        f'opacity="{format_number(a / 255.0)}" '
    )


def segment_to_command(segment: Segment, scale: float, precision: Optional[int]) -> str:
    """SVG path command for one segment (L or Q, absolute)."""
    fmt = lambda v: format_number(v * scale, precision)

    if isinstance(segment, LineSegment):
        return f"L {fmt(segment.p1.x)} {fmt(segment.p1.y)}"
    if isinstance(segment, QuadraticSegment):
        return (
            f"Q {fmt(segment.p1.x)} {fmt(segment.p1.y)} "
            f"{fmt(segment.p2.x)} {fmt(segment.p2.y)}"
        )
    raise TypeError(f"Unknown segment type: {type(segment).__name__}")


def path_to_svg(
    segments: List[Segment],
    rgba: Sequence[int],
    options: RenderingOptions,
    desc: str = ""
) -> str:
    """
    Convert a closed chain of segments to an SVG path element.

    Args:
        segments: Fitted segments of one path
        rgba: Palette color of the path's layer
        options: Rendering options
        desc: Optional description attribute text

    Returns:
        SVG path element, followed by control point markers when enabled
    """
    scale = options.scale
    precision = options.round_coords
    fmt = lambda v: format_number(v * scale, precision)

    first = segments[0].start
    commands = [f"M {fmt(first.x)} {fmt(first.y)}"]
    commands.extend(segment_to_command(s, scale, precision) for s in segments)
    commands.append("Z")

    desc_attr = f'desc="{desc}" ' if desc else ""
    parts = [f'<path {desc_attr}{format_color(rgba)}d="{" ".join(commands)}" />']
    parts.extend(control_points_to_svg(segments, options))
    return ''.join(parts)


def control_points_to_svg(segments: List[Segment], options: RenderingOptions) -> List[str]:
    """Debug markers for segment end and control points."""
    scale = options.scale
    precision = options.round_coords
    fmt = lambda v: format_number(v * scale, precision)
    lr = options.linear_control_radius
    qr = options.quadratic_control_radius

    markers = []
    for segment in segments:
        if lr > 0 and isinstance(segment, LineSegment):
            markers.append(
                f'<circle cx="{fmt(segment.p1.x)}" cy="{fmt(segment.p1.y)}" r="{format_number(lr)}" '
                f'fill="white" stroke-width="{format_number(lr * 0.2)}" stroke="black" />'
            )
        elif qr > 0 and isinstance(segment, QuadraticSegment):
            sw = format_number(qr * 0.2)
            p0, p1, p2 = segment.p0, segment.p1, segment.p2
            markers.append(
                f'<circle cx="{fmt(p1.x)}" cy="{fmt(p1.y)}" r="{format_number(qr)}" '
                f'fill="cyan" stroke-width="{sw}" stroke="black" />'
            )
            markers.append(
                f'<circle cx="{fmt(p2.x)}" cy="{fmt(p2.y)}" r="{format_number(qr)}" '
                f'fill="white" stroke-width="{sw}" stroke="black" />'
            )
            markers.append(
                f'<line x1="{fmt(p0.x)}" y1="{fmt(p0.y)}" x2="{fmt(p1.x)}" y2="{fmt(p1.y)}" '
                f'stroke-width="{sw}" stroke="cyan" />'
            )
            markers.append(
                f'<line x1="{fmt(p1.x)}" y1="{fmt(p1.y)}" x2="{fmt(p2.x)}" y2="{fmt(p2.y)}" '
                f'stroke-width="{sw}" stroke="cyan" />'
            )
    return markers


def z_order(indexed: IndexedImage, width: int) -> List[Tuple[int, int]]:
    """
    Drawing order of all paths.

    The key is the linearised start point of the path, so shapes that
    start higher up (enclosing shapes) are painted first. Equal keys keep
    layer-then-path discovery order.

    Args:
        indexed: Traced image
        width: Rendered image width

    Returns:
        (layer index, path index) pairs in drawing order
    """
    keyed = []
    for layer_index, layer in enumerate(indexed.layers):
        for path_index, segments in enumerate(layer):
            if not segments:
                continue
            start = segments[0].start
            keyed.append((start.y * width + start.x, layer_index, path_index))

    keyed.sort(key=lambda item: item[0])
    return [(layer_index, path_index) for _, layer_index, path_index in keyed]


def to_svg(indexed: IndexedImage, options: Optional[RenderingOptions] = None) -> str:
    """
    Render a traced image as an SVG 1.1 document.

    Args:
        indexed: Traced image
        options: Rendering options, defaults if None

    Returns:
        SVG string
    """
    from tracevec import __version__

    options = options or RenderingOptions()
    width = int(indexed.image_width * options.scale)
    height = int(indexed.image_height * options.scale)

    if options.viewbox:
        size = f'viewBox="0 0 {width} {height}"'
    else:
        size = f'width="{width}" height="{height}"'

    header = f'<svg {size} version="1.1" xmlns="{SVG_NAMESPACE}" '
    if options.desc:
        header += f'desc="Created with tracevec version {__version__}" '
    parts = [header + '>']

    palette = np.asarray(indexed.palette)
    for layer_index, path_index in z_order(indexed, width):
        desc = f"l {layer_index} p {path_index}" if options.desc else ""
        parts.append(path_to_svg(
            indexed.layers[layer_index][path_index],
            palette[layer_index],
            options,
            desc
        ))

    parts.append('</svg>')
    return ''.join(parts)


def save_svg(svg_string: str, output_path: str) -> None:
    """
    Save SVG string to file.

    Args:
        svg_string: SVG content
        output_path: Output file path
    """
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(svg_string)
