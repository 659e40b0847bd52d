"""SVG export of a mind-map layout."""
from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from typing import Optional, Sequence

from .connectors import connectors, fmt, path_to_svg_d
from .layout import Layout, TextMeasurer, compute_layout
from .style import (
    BORDER_WIDTH,
    BOX_CORNER_RADIUS,
    BOX_FILL,
    CONNECTOR_COLOR,
    CONNECTOR_WIDTH,
    FONT_FAMILY,
    PLAIN_TEXT_INSET,
    border_color,
    level_style,
)
from .titles import TitleNode, parse_markdown_titles

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", SVG_NS)

EMPTY_SVG = "<svg></svg>"
# Characters XML 1.0 does not allow, even escaped.
_XML_ILLEGAL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")
EXPORT_WIDTH = 1200
EXPORT_HEIGHT = 800
EXPORT_MARGIN = 40


def _q(tag: str) -> str:
    return f"{{{SVG_NS}}}{tag}"


def export_svg(forest: Sequence[TitleNode], measurer: Optional[TextMeasurer] = None) -> str:
    """Lay out ``forest`` on the export canvas and return a standalone SVG document."""
    if not forest:
        return EMPTY_SVG
    layout = compute_layout(forest, EXPORT_WIDTH, EXPORT_HEIGHT, measurer)
    return layout_to_svg(layout)


def markdown_to_svg(markdown: str, measurer: Optional[TextMeasurer] = None) -> str:
    return export_svg(parse_markdown_titles(markdown), measurer)


def layout_to_svg(layout: Layout) -> str:
    if not layout:
        return EMPTY_SVG
    _min_x, _min_y, max_x, max_y = layout.bounds()
    svg_root = ET.Element(_q("svg"))
    svg_root.set("width", fmt(max_x + EXPORT_MARGIN))
    svg_root.set("height", fmt(max_y + EXPORT_MARGIN))
    group = ET.SubElement(svg_root, _q("g"))

    for _node, path in connectors(layout):
        ET.SubElement(
            group,
            _q("path"),
            {
                "d": path_to_svg_d(path),
                "stroke": CONNECTOR_COLOR,
                "fill": "none",
                "stroke-width": str(CONNECTOR_WIDTH),
            },
        )

    for node in layout:
        style = level_style(node.depth)
        center_y = node.y + node.height / 2
        if node.has_box:
            ET.SubElement(
                group,
                _q("rect"),
                {
                    "x": fmt(node.x),
                    "y": fmt(node.y),
                    "width": fmt(node.width),
                    "height": fmt(node.height),
                    "rx": str(BOX_CORNER_RADIUS),
                    "ry": str(BOX_CORNER_RADIUS),
                    "fill": BOX_FILL,
                    "stroke": border_color(node.depth),
                    "stroke-width": str(BORDER_WIDTH),
                },
            )
            text_x = node.x + node.width / 2
            anchor = "middle"
        else:
            text_x = node.x + PLAIN_TEXT_INSET
            anchor = "start"
        text = ET.SubElement(
            group,
            _q("text"),
            {
                "x": fmt(text_x),
                "y": fmt(center_y),
                "font-family": FONT_FAMILY,
                "font-size": f"{style.font_size}px",
                "text-anchor": anchor,
                "dominant-baseline": "middle",
                "fill": style.text_color,
            },
        )
        text.text = _XML_ILLEGAL_RE.sub("", node.text)

    logger.debug("exported %d nodes to SVG", len(layout))
    return _pretty_xml(svg_root)


def _pretty_xml(element: ET.Element) -> str:
    ET.indent(element, space="  ")
    return ET.tostring(element, encoding="unicode")
