"""Markdown heading extraction and title-tree construction."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")


@dataclass(frozen=True)
class TitleNode:
    level: int
    text: str
    children: Tuple["TitleNode", ...] = ()

    def walk(self) -> Iterable["TitleNode"]:
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class _Draft:
    level: int
    text: str
    children: List["_Draft"] = field(default_factory=list)

    def freeze(self) -> TitleNode:
        return TitleNode(self.level, self.text, tuple(child.freeze() for child in self.children))


def extract_headings(markdown: str) -> List[Tuple[int, str]]:
    """Return ``(level, text)`` for every heading line, in document order."""
    headings: List[Tuple[int, str]] = []
    for line in markdown.split("\n"):
        if not line.strip():
            continue
        match = HEADING_RE.match(line)
        if not match:
            continue
        text = match.group(2).strip()
        if not text:
            continue
        headings.append((len(match.group(1)), text))
    return headings


def build_title_tree(headings: Iterable[Tuple[int, str]]) -> List[TitleNode]:
    """Nest headings under the nearest preceding heading of a lower level."""
    root = _Draft(0, "")
    stack = [root]
    for level, text in headings:
        while len(stack) > 1 and stack[-1].level >= level:
            stack.pop()
        node = _Draft(level, text)
        stack[-1].children.append(node)
        stack.append(node)
    return [child.freeze() for child in root.children]


def parse_markdown_titles(markdown: str) -> List[TitleNode]:
    return build_title_tree(extract_headings(markdown))


def format_outline(forest: Iterable[TitleNode], indent: str = "  ") -> str:
    lines: List[str] = []

    def _emit(node: TitleNode, depth: int) -> None:
        lines.append(f"{indent * depth}{'#' * node.level} {node.text}")
        for child in node.children:
            _emit(child, depth + 1)

    for tree in forest:
        _emit(tree, 0)
    return "\n".join(lines)
