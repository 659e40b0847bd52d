"""Left-rooted mind-map layout.

Two recursive passes place the tree: subtree heights are accumulated bottom-up,
then nodes are positioned top-down with each parent's children stacked and
centered on the parent. A final pass translates the whole drawing so its
bounding box is centered in the viewport.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Protocol, Sequence, Tuple

from .metrics import default_measurer
from .titles import TitleNode

logger = logging.getLogger(__name__)

BASE_HEIGHT = 50.0
ROOT_X = 60.0
VIEWPORT_MARGIN = 40.0

BOX_HEIGHT = 33.0
PLAIN_HEIGHT = 28.0
BOX_PADDING = 30.0
PLAIN_PADDING = 16.0
ROOT_MIN_WIDTH = 80.0
BOX_MIN_WIDTH = 50.0
BOX_CHILD_SPACING = 95.0
PLAIN_CHILD_SPACING = 118.0

Box = Tuple[float, float, float, float]


class TextMeasurer(Protocol):
    def measure(self, text: str, depth: int) -> float:
        ...


@dataclass
class LayoutNode:
    index: int
    title: TitleNode
    depth: int
    x: float
    y: float
    width: float
    height: float
    has_box: bool
    subtree_height: float
    parent_index: Optional[int] = None

    @property
    def level(self) -> int:
        return self.title.level

    @property
    def text(self) -> str:
        return self.title.text

    @property
    def children(self) -> Tuple[TitleNode, ...]:
        return self.title.children

    @property
    def box(self) -> Box:
        return self.x, self.y, self.width, self.height


class Layout:
    """Flat, depth-first list of placed nodes; the root comes first."""

    def __init__(self, nodes: Optional[List[LayoutNode]] = None) -> None:
        self.nodes: List[LayoutNode] = nodes or []

    def __iter__(self) -> Iterator[LayoutNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> LayoutNode:
        return self.nodes[index]

    def __bool__(self) -> bool:
        return bool(self.nodes)

    def parent_of(self, node: LayoutNode) -> Optional[LayoutNode]:
        if node.parent_index is None:
            return None
        return self.nodes[node.parent_index]

    def parent_box(self, node: LayoutNode) -> Optional[Box]:
        parent = self.parent_of(node)
        return parent.box if parent is not None else None

    def edges(self) -> Iterator[Tuple[LayoutNode, LayoutNode]]:
        for node in self.nodes:
            parent = self.parent_of(node)
            if parent is not None:
                yield parent, node

    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """Return ``(min_x, min_y, max_x, max_y)`` over every box."""
        if not self.nodes:
            return None
        return (
            min(node.x for node in self.nodes),
            min(node.y for node in self.nodes),
            max(node.x + node.width for node in self.nodes),
            max(node.y + node.height for node in self.nodes),
        )

    def translate(self, dx: float, dy: float) -> None:
        for node in self.nodes:
            node.x += dx
            node.y += dy


def child_spacing(has_box: bool) -> float:
    return BOX_CHILD_SPACING if has_box else PLAIN_CHILD_SPACING


def has_box_at(depth: int) -> bool:
    return depth <= 1


def box_size(text_width: float, depth: int) -> Tuple[float, float]:
    if has_box_at(depth):
        min_width = ROOT_MIN_WIDTH if depth == 0 else BOX_MIN_WIDTH
        return max(min_width, text_width + BOX_PADDING), BOX_HEIGHT
    return text_width + PLAIN_PADDING, PLAIN_HEIGHT


def subtree_height(node: TitleNode, memo: Optional[Dict[int, float]] = None) -> float:
    """Vertical space reserved for ``node`` and all of its descendants."""
    if memo is None:
        memo = {}
    key = id(node)
    cached = memo.get(key)
    if cached is not None:
        return cached
    if not node.children:
        height = BASE_HEIGHT
    else:
        height = max(BASE_HEIGHT, sum(subtree_height(child, memo) for child in node.children))
    memo[key] = height
    return height


def compute_layout(
    forest: Sequence[TitleNode],
    viewport_width: float,
    viewport_height: float,
    measurer: Optional[TextMeasurer] = None,
) -> Layout:
    """Place the first tree of ``forest`` inside a viewport of the given size.

    Returns an empty Layout for an empty forest. Content larger than the
    viewport overflows the margins; it is never scaled down.
    """
    if not forest:
        return Layout()
    if measurer is None:
        measurer = default_measurer()
    if len(forest) > 1:
        logger.debug("laying out first of %d top-level headings; %d ignored", len(forest), len(forest) - 1)

    viewport_width = max(0.0, float(viewport_width))
    viewport_height = max(0.0, float(viewport_height))

    layout = Layout()
    memo: Dict[int, float] = {}
    _place(layout, forest[0], 0, ROOT_X, viewport_height / 2, None, measurer, memo)
    _recenter(layout, viewport_width, viewport_height)
    return layout


def _place(
    layout: Layout,
    node: TitleNode,
    depth: int,
    start_x: float,
    center_y: float,
    parent_index: Optional[int],
    measurer: TextMeasurer,
    memo: Dict[int, float],
) -> None:
    has_box = has_box_at(depth)
    width, height = box_size(measurer.measure(node.text, depth), depth)
    placed = LayoutNode(
        index=len(layout.nodes),
        title=node,
        depth=depth,
        x=start_x,
        y=center_y - height / 2,
        width=width,
        height=height,
        has_box=has_box,
        subtree_height=subtree_height(node, memo),
        parent_index=parent_index,
    )
    layout.nodes.append(placed)

    if not node.children:
        return
    child_x = start_x + width + child_spacing(has_box)
    total = sum(subtree_height(child, memo) for child in node.children)
    cursor = center_y - total / 2
    for child in node.children:
        child_height = subtree_height(child, memo)
        _place(layout, child, depth + 1, child_x, cursor + child_height / 2, placed.index, measurer, memo)
        cursor += child_height


def recenter_offset(
    bounds: Tuple[float, float, float, float], viewport_width: float, viewport_height: float
) -> Tuple[float, float]:
    min_x, min_y, max_x, max_y = bounds
    available_width = viewport_width - VIEWPORT_MARGIN * 2
    available_height = viewport_height - VIEWPORT_MARGIN * 2
    dx = (available_width - (max_x - min_x)) / 2 + VIEWPORT_MARGIN - min_x
    dy = (available_height - (max_y - min_y)) / 2 + VIEWPORT_MARGIN - min_y
    return dx, dy


def _recenter(layout: Layout, viewport_width: float, viewport_height: float) -> None:
    bounds = layout.bounds()
    if bounds is None:
        return
    dx, dy = recenter_offset(bounds, viewport_width, viewport_height)
    layout.translate(dx, dy)
