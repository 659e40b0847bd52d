"""Colors, fonts and shared geometry for both renderers."""
from __future__ import annotations

from dataclasses import dataclass

FONT_FAMILY = "Arial, SimHei, sans-serif"
FONT_FAMILY_CANDIDATES = ["Arial", "SimHei", "sans-serif"]

BOX_FILL = "#ffffff"
ROOT_BORDER_COLOR = "#b2afad"
BORDER_COLOR = "#d1cecd"
CONNECTOR_COLOR = "#746e6a"
CONNECTOR_WIDTH = 1
BORDER_WIDTH = 1

BOX_CORNER_RADIUS = 6
CONNECTOR_CORNER_RADIUS = 8
PLAIN_TEXT_INSET = 5


@dataclass(frozen=True)
class LevelStyle:
    font_size: int
    text_color: str


ROOT_STYLE = LevelStyle(font_size=16, text_color="#4e4e4e")
SECONDARY_STYLE = LevelStyle(font_size=15, text_color="#595959")
TERTIARY_STYLE = LevelStyle(font_size=12, text_color="#606060")


def level_style(depth: int) -> LevelStyle:
    """Style tier for a node ``depth`` steps below the diagram root."""
    if depth <= 0:
        return ROOT_STYLE
    if depth == 1:
        return SECONDARY_STYLE
    return TERTIARY_STYLE


def font_size_for(depth: int) -> int:
    return level_style(depth).font_size


def border_color(depth: int) -> str:
    return ROOT_BORDER_COLOR if depth <= 0 else BORDER_COLOR
