from __future__ import annotations

import itertools
import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
sys.path.insert(0, str(TESTS_DIR.parent / "src"))

from mdmindmap.layout import (
    BASE_HEIGHT,
    BOX_CHILD_SPACING,
    PLAIN_CHILD_SPACING,
    VIEWPORT_MARGIN,
    compute_layout,
    subtree_height,
)
from mdmindmap.metrics import HeuristicTextMeasurer
from mdmindmap.titles import parse_markdown_titles

DEEP_DOC = """
# Project
## Goals
### Speed
### Accuracy
#### Benchmarks
#### Datasets
## Risks
### Budget
## Team
### Alice
### Bob
### Carol
"""


class FixedMeasurer:
    def __init__(self, width: float = 40.0) -> None:
        self.width = width
        self.calls = []

    def measure(self, text: str, depth: int) -> float:
        self.calls.append((text, depth))
        return self.width


class LayoutTests(unittest.TestCase):
    def setUp(self) -> None:
        self.measurer = HeuristicTextMeasurer()

    def layout(self, text: str, width: float = 1200, height: float = 800):
        return compute_layout(parse_markdown_titles(text), width, height, self.measurer)

    def test_empty_forest_gives_empty_layout(self) -> None:
        layout = compute_layout([], 800, 600, self.measurer)
        self.assertEqual(len(layout), 0)
        self.assertFalse(layout)
        self.assertIsNone(layout.bounds())

    def test_children_symmetric_about_parent(self) -> None:
        layout = self.layout("# A\n## B\n## C")
        root, b, c = layout.nodes
        self.assertEqual([n.text for n in layout], ["A", "B", "C"])
        root_center = root.y + root.height / 2
        b_center = b.y + b.height / 2
        c_center = c.y + c.height / 2
        self.assertAlmostEqual(root_center - b_center, c_center - root_center)
        self.assertAlmostEqual(c_center - b_center, BASE_HEIGHT)
        self.assertIs(layout.parent_of(b), root)
        self.assertIsNone(layout.parent_of(root))

    def test_levels_match_source_titles(self) -> None:
        forest = parse_markdown_titles(DEEP_DOC)
        layout = compute_layout(forest, 1200, 800, self.measurer)
        self.assertEqual(len(layout), len(list(forest[0].walk())))
        for node in layout:
            self.assertEqual(node.level, node.title.level)
            parent = layout.parent_of(node)
            if parent is not None:
                self.assertGreater(node.level, parent.level)
                self.assertEqual(node.depth, parent.depth + 1)
                self.assertIn(node.title, parent.children)

    def test_depth_drives_box_style_not_heading_level(self) -> None:
        layout = self.layout("## Root\n#### Child\n##### Grandchild")
        self.assertEqual([n.depth for n in layout], [0, 1, 2])
        self.assertEqual([n.has_box for n in layout], [True, True, False])
        self.assertEqual([n.height for n in layout], [33, 33, 28])

    def test_box_sizes(self) -> None:
        layout = compute_layout(parse_markdown_titles("# A\n## B\n### C"), 1200, 800, FixedMeasurer(10))
        root, child, grandchild = layout.nodes
        self.assertEqual(root.width, 80)
        self.assertEqual(child.width, 50)
        self.assertEqual(grandchild.width, 26)

        layout = compute_layout(parse_markdown_titles("# A\n## B\n### C"), 1200, 800, FixedMeasurer(100))
        self.assertEqual([n.width for n in layout], [130, 130, 116])

    def test_measurer_is_called_with_depth(self) -> None:
        measurer = FixedMeasurer()
        compute_layout(parse_markdown_titles("## Top\n### Mid\n###### Deep"), 800, 600, measurer)
        self.assertEqual(measurer.calls, [("Top", 0), ("Mid", 1), ("Deep", 2)])

    def test_child_x_uses_parent_spacing(self) -> None:
        layout = self.layout(DEEP_DOC)
        for parent, child in layout.edges():
            expected = BOX_CHILD_SPACING if parent.has_box else PLAIN_CHILD_SPACING
            self.assertAlmostEqual(child.x, parent.x + parent.width + expected)

    def test_subtree_height_accumulates_and_is_idempotent(self) -> None:
        root = parse_markdown_titles(DEEP_DOC)[0]
        goals, risks, team = root.children
        self.assertEqual(subtree_height(risks), 50)
        self.assertEqual(subtree_height(goals), 150)
        self.assertEqual(subtree_height(team), 150)
        self.assertEqual(subtree_height(root), 350)
        memo = {}
        first = [subtree_height(n, memo) for n in root.walk()]
        second = [subtree_height(n) for n in root.walk()]
        self.assertEqual(first, second)

    def test_subtree_height_floors_at_base(self) -> None:
        root = parse_markdown_titles("# A\n## only")[0]
        self.assertEqual(subtree_height(root), BASE_HEIGHT)

    def test_boxes_never_overlap(self) -> None:
        layout = self.layout(DEEP_DOC)
        for a, b in itertools.combinations(layout.nodes, 2):
            overlap = (
                a.x < b.x + b.width
                and b.x < a.x + a.width
                and a.y < b.y + b.height
                and b.y < a.y + a.height
            )
            self.assertFalse(overlap, f"{a.text!r} overlaps {b.text!r}")

    def test_content_is_centered_in_viewport(self) -> None:
        width, height = 1000, 700
        layout = self.layout(DEEP_DOC, width, height)
        min_x, min_y, max_x, max_y = layout.bounds()
        self.assertAlmostEqual(min_x - VIEWPORT_MARGIN, (width - VIEWPORT_MARGIN) - max_x)
        self.assertAlmostEqual(min_y - VIEWPORT_MARGIN, (height - VIEWPORT_MARGIN) - max_y)

    def test_recentering_is_a_single_translation(self) -> None:
        small = self.layout(DEEP_DOC, 900, 600)
        large = self.layout(DEEP_DOC, 1500, 1100)
        dx = large[0].x - small[0].x
        dy = large[0].y - small[0].y
        for a, b in zip(small, large):
            self.assertAlmostEqual(b.x - a.x, dx)
            self.assertAlmostEqual(b.y - a.y, dy)
            self.assertEqual((a.width, a.height), (b.width, b.height))
            pa, pb = small.parent_box(a), large.parent_box(b)
            if pa is None:
                self.assertIsNone(pb)
                continue
            self.assertAlmostEqual(pb[0] - pa[0], dx)
            self.assertAlmostEqual(pb[1] - pa[1], dy)

    def test_parent_box_tracks_current_parent_position(self) -> None:
        layout = self.layout(DEEP_DOC)
        for parent, child in layout.edges():
            self.assertEqual(layout.parent_box(child), (parent.x, parent.y, parent.width, parent.height))

    def test_small_viewport_overflows_without_scaling(self) -> None:
        big = self.layout(DEEP_DOC, 1200, 800)
        tiny = self.layout(DEEP_DOC, 100, 80)
        min_x, min_y, _max_x, _max_y = tiny.bounds()
        self.assertLess(min_x, VIEWPORT_MARGIN)
        self.assertLess(min_y, VIEWPORT_MARGIN)
        self.assertEqual([n.width for n in big], [n.width for n in tiny])
        self.assertEqual([n.height for n in big], [n.height for n in tiny])

    def test_zero_viewport_is_degenerate_not_an_error(self) -> None:
        layout = self.layout("# A\n## B", 0, -10)
        self.assertEqual(len(layout), 2)

    def test_only_first_tree_is_laid_out(self) -> None:
        layout = self.layout("# A\n## A1\n# B\n## B1\n## B2")
        self.assertEqual([n.text for n in layout], ["A", "A1"])

    def test_layout_is_deterministic(self) -> None:
        first = [n.box for n in self.layout(DEEP_DOC)]
        second = [n.box for n in self.layout(DEEP_DOC)]
        self.assertEqual(first, second)


if __name__ == "__main__":
    unittest.main()
