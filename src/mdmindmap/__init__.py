"""Public API for mdmindmap."""
from .layout import Layout, LayoutNode, compute_layout
from .raster import RasterSurface, render_png, render_to_surface
from .svg import export_svg, markdown_to_svg
from .titles import TitleNode, parse_markdown_titles

__all__ = [
    "Layout",
    "LayoutNode",
    "RasterSurface",
    "TitleNode",
    "compute_layout",
    "export_svg",
    "markdown_to_svg",
    "parse_markdown_titles",
    "render_png",
    "render_to_surface",
]
