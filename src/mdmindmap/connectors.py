"""Elbow connector geometry shared by the raster and SVG renderers."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from .layout import Box, Layout, LayoutNode, child_spacing
from .style import CONNECTOR_CORNER_RADIUS


@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float


@dataclass(frozen=True)
class QuadTo:
    cx: float
    cy: float
    x: float
    y: float


PathCommand = Union[MoveTo, LineTo, QuadTo]


def elbow_path(
    parent_box: Box,
    child_box: Box,
    spacing: float,
    radius: float = CONNECTOR_CORNER_RADIUS,
) -> List[PathCommand]:
    """Route from the parent's right-edge midpoint to the child's left-edge midpoint."""
    px, py, pw, ph = parent_box
    cx, cy, _cw, ch = child_box
    start_x = px + pw
    start_y = py + ph / 2
    end_x = cx
    end_y = cy + ch / 2
    mid_x = start_x + spacing / 2

    path: List[PathCommand] = [MoveTo(start_x, start_y), LineTo(mid_x - radius, start_y)]
    if abs(end_y - start_y) > radius:
        step = radius if end_y > start_y else -radius
        path.append(QuadTo(mid_x, start_y, mid_x, start_y + step))
        path.append(LineTo(mid_x, end_y - step))
        path.append(QuadTo(mid_x, end_y, mid_x + radius, end_y))
    else:
        # Too flat for two corners.
        path.append(LineTo(mid_x, start_y))
        path.append(LineTo(mid_x + radius, end_y))
    path.append(LineTo(end_x, end_y))
    return path


def connector_path(layout: Layout, node: LayoutNode) -> Optional[List[PathCommand]]:
    parent = layout.parent_of(node)
    if parent is None:
        return None
    return elbow_path(parent.box, node.box, child_spacing(parent.has_box))


def connectors(layout: Layout) -> Iterator[Tuple[LayoutNode, List[PathCommand]]]:
    for parent, node in layout.edges():
        yield node, elbow_path(parent.box, node.box, child_spacing(parent.has_box))


def path_to_svg_d(path: List[PathCommand]) -> str:
    parts: List[str] = []
    for command in path:
        if isinstance(command, MoveTo):
            parts.append(f"M {fmt(command.x)} {fmt(command.y)}")
        elif isinstance(command, LineTo):
            parts.append(f"L {fmt(command.x)} {fmt(command.y)}")
        else:
            parts.append(
                f"Q {fmt(command.cx)} {fmt(command.cy)} {fmt(command.x)} {fmt(command.y)}"
            )
    return " ".join(parts)


def flatten(path: List[PathCommand], steps: int = 8) -> List[List[Tuple[float, float]]]:
    """Approximate a path as polylines; each MoveTo starts a new one."""
    polylines: List[List[Tuple[float, float]]] = []
    current: List[Tuple[float, float]] = []
    for command in path:
        if isinstance(command, MoveTo):
            if len(current) > 1:
                polylines.append(current)
            current = [(command.x, command.y)]
        elif isinstance(command, LineTo):
            current.append((command.x, command.y))
        else:
            x0, y0 = current[-1] if current else (command.cx, command.cy)
            for i in range(1, steps + 1):
                t = i / steps
                u = 1 - t
                current.append(
                    (
                        u * u * x0 + 2 * u * t * command.cx + t * t * command.x,
                        u * u * y0 + 2 * u * t * command.cy + t * t * command.y,
                    )
                )
    if len(current) > 1:
        polylines.append(current)
    return polylines


def fmt(value: float) -> str:
    if math.isclose(value, round(value)):
        return str(int(round(value)))
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text
