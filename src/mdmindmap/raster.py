"""Painting a mind-map layout onto a Pillow image."""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from PIL import Image, ImageDraw

from .connectors import connectors, flatten
from .layout import Layout, TextMeasurer, compute_layout
from .metrics import PillowTextMeasurer, default_measurer
from .style import (
    BORDER_WIDTH,
    BOX_CORNER_RADIUS,
    BOX_FILL,
    CONNECTOR_COLOR,
    CONNECTOR_WIDTH,
    PLAIN_TEXT_INSET,
    border_color,
    level_style,
)
from .titles import TitleNode, parse_markdown_titles

logger = logging.getLogger(__name__)

CONTAINER_MARGIN = 40
WRAPPER_CLASS = "canvas-wrapper"
TRANSPARENT = (0, 0, 0, 0)


@dataclass
class Container:
    """Host element a surface is sized against."""

    width: Optional[float]
    height: Optional[float]
    classes: Tuple[str, ...] = ()
    parent: Optional["Container"] = field(default=None, repr=False)


def surface_size_for_container(container: Optional[Container], margin: float = CONTAINER_MARGIN) -> Tuple[int, int]:
    """Container size minus ``margin``; a wrapper defers to its own parent.

    Missing or too-small dimensions give a zero-area surface.
    """
    if container is not None and WRAPPER_CLASS in container.classes and container.parent is not None:
        container = container.parent
    if container is None:
        return 0, 0
    width = max(0, int((container.width or 0) - margin))
    height = max(0, int((container.height or 0) - margin))
    return width, height


class RasterSurface:
    """RGBA pixel buffer the painter draws on."""

    def __init__(self, width: int = 0, height: int = 0, background: Union[str, Tuple[int, int, int, int]] = TRANSPARENT) -> None:
        self.background = background
        self.image = Image.new("RGBA", (max(0, int(width)), max(0, int(height))), background)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def resize(self, width: int, height: int) -> None:
        self.image = Image.new("RGBA", (max(0, int(width)), max(0, int(height))), self.background)

    def resize_to_container(self, container: Optional[Container], margin: float = CONTAINER_MARGIN) -> None:
        self.resize(*surface_size_for_container(container, margin))

    def clear(self) -> None:
        if self.width and self.height:
            self.image.paste(self.background, (0, 0, self.width, self.height))

    def to_png_bytes(self) -> bytes:
        if not (self.width and self.height):
            raise ValueError(f"cannot encode a {self.width}x{self.height} surface as PNG")
        buffer = io.BytesIO()
        self.image.save(buffer, format="PNG")
        return buffer.getvalue()

    def save(self, path: Union[str, Path]) -> None:
        Path(path).write_bytes(self.to_png_bytes())


def render_to_surface(
    surface: RasterSurface,
    forest: Sequence[TitleNode],
    measurer: Optional[TextMeasurer] = None,
    fonts: Optional[PillowTextMeasurer] = None,
) -> Optional[Layout]:
    """Clear ``surface`` and paint the mind map of ``forest`` on it.

    Returns the layout that was painted, or None when nothing was drawn
    (empty forest or zero-area surface).
    """
    surface.clear()
    if not forest:
        return None
    if surface.width == 0 or surface.height == 0:
        logger.debug("surface is %dx%d; nothing to draw", surface.width, surface.height)
        return None

    layout = compute_layout(forest, surface.width, surface.height, measurer)
    draw = ImageDraw.Draw(surface.image)
    _draw_connectors(draw, layout)
    if fonts is None:
        fonts = measurer if isinstance(measurer, PillowTextMeasurer) else default_measurer()
    _draw_nodes(draw, layout, fonts)
    return layout


def render_png(
    markdown: str,
    width: int,
    height: int,
    *,
    measurer: Optional[TextMeasurer] = None,
    fonts: Optional[PillowTextMeasurer] = None,
    background: Union[str, Tuple[int, int, int, int]] = TRANSPARENT,
) -> bytes:
    surface = RasterSurface(width, height, background)
    render_to_surface(surface, parse_markdown_titles(markdown), measurer, fonts)
    return surface.to_png_bytes()


def _draw_connectors(draw: ImageDraw.ImageDraw, layout: Layout) -> None:
    for _node, path in connectors(layout):
        for points in flatten(path):
            draw.line(points, fill=CONNECTOR_COLOR, width=CONNECTOR_WIDTH, joint="curve")


def _draw_nodes(draw: ImageDraw.ImageDraw, layout: Layout, fonts: PillowTextMeasurer) -> None:
    for node in layout:
        style = level_style(node.depth)
        if node.has_box:
            draw.rounded_rectangle(
                (node.x, node.y, node.x + node.width, node.y + node.height),
                radius=BOX_CORNER_RADIUS,
                fill=BOX_FILL,
                outline=border_color(node.depth),
                width=BORDER_WIDTH,
            )

        font = fonts.font_for_depth(node.depth)
        center_y = node.y + node.height / 2
        left, top, right, bottom = draw.textbbox((0, 0), node.text, font=font)
        if node.has_box:
            text_x = node.x + node.width / 2 - (left + right) / 2
        else:
            text_x = node.x + PLAIN_TEXT_INSET - left
        text_y = center_y - (top + bottom) / 2
        draw.text((text_x, text_y), node.text, fill=style.text_color, font=font)
