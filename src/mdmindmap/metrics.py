"""Text width measurement backed by Pillow fonts."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

from PIL import ImageFont

from .style import FONT_FAMILY_CANDIDATES, font_size_for

logger = logging.getLogger(__name__)

GENERIC_FONT_FALLBACKS = {
    "sans-serif": ["Helvetica", "Arial", "Liberation Sans", "DejaVu Sans"],
    "serif": ["Times New Roman", "Times", "Liberation Serif", "DejaVu Serif"],
    "monospace": ["Courier New", "Courier", "Liberation Mono", "DejaVu Sans Mono"],
}


class HeuristicTextMeasurer:
    """Font-independent widths; stable across machines."""

    def measure(self, text: str, depth: int) -> float:
        return _heuristic_width(text, font_size_for(depth))


class PillowTextMeasurer:
    """Caches Pillow fonts per size and measures rendered text widths."""

    FONT_DIRS = [
        Path("/System/Library/Fonts"),
        Path("/System/Library/Fonts/Supplemental"),
        Path("/Library/Fonts"),
        Path("~/Library/Fonts").expanduser(),
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        Path("C:/Windows/Fonts"),
    ]

    def __init__(self, families: Optional[List[str]] = None, font_path: Optional[str] = None) -> None:
        self.families = list(families or FONT_FAMILY_CANDIDATES)
        self.font_path = font_path
        self._font_cache: Dict[int, Optional[ImageFont.ImageFont]] = {}
        self._font_index: Optional[Dict[str, str]] = None

    def measure(self, text: str, depth: int) -> float:
        size = font_size_for(depth)
        font = self.font(size)
        if font is None:
            return _heuristic_width(text, size)
        return float(font.getlength(text))

    def font_for_depth(self, depth: int) -> Optional[ImageFont.ImageFont]:
        return self.font(font_size_for(depth))

    def font(self, size: float) -> Optional[ImageFont.ImageFont]:
        key_size = max(1, int(round(size)))
        if key_size in self._font_cache:
            return self._font_cache[key_size]

        candidates: List[str] = []
        if self.font_path:
            candidates.append(self.font_path)
        for family in self.families:
            for name in GENERIC_FONT_FALLBACKS.get(family.lower(), [family]):
                resolved = self._locate_font(name)
                if resolved and resolved not in candidates:
                    candidates.append(resolved)
        candidates.append("DejaVuSans.ttf")

        font: Optional[ImageFont.ImageFont] = None
        for candidate in candidates:
            try:
                font = ImageFont.truetype(candidate, key_size)
                break
            except OSError:
                continue
        if font is None:
            logger.debug("no TrueType font found for size %s; using Pillow default", key_size)
            try:
                font = ImageFont.load_default(size=key_size)
            except (OSError, ImportError):
                font = None

        self._font_cache[key_size] = font
        return font

    def _locate_font(self, family: str) -> Optional[str]:
        """Best installed match for ``family``: exact name, then prefix, then substring."""
        wanted = _normalize_font_name(family)
        if not wanted:
            return None
        installed = self._installed_fonts()
        for alias in (wanted, wanted + "mt", wanted + "psmt"):
            if alias in installed:
                return installed[alias]
        prefixed = [path for stem, path in installed.items() if stem.startswith(wanted)]
        if prefixed:
            return prefixed[0]
        contained = [path for stem, path in installed.items() if wanted in stem]
        return contained[0] if contained else None

    def _installed_fonts(self) -> Dict[str, str]:
        if self._font_index is None:
            index: Dict[str, str] = {}
            for directory in self.FONT_DIRS:
                if not directory.is_dir():
                    continue
                try:
                    paths = sorted(directory.rglob("*.tt[fc]"))
                except OSError:
                    continue
                for path in paths:
                    index.setdefault(_normalize_font_name(path.stem), str(path))
            self._font_index = index
        return self._font_index


_DEFAULT_MEASURER: Optional[PillowTextMeasurer] = None


def default_measurer() -> PillowTextMeasurer:
    """Process-wide measurer, created on first use and reused afterwards."""
    global _DEFAULT_MEASURER
    if _DEFAULT_MEASURER is None:
        _DEFAULT_MEASURER = PillowTextMeasurer()
    return _DEFAULT_MEASURER


def _normalize_font_name(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", name.lower())


def _heuristic_width(text: str, font_size: float) -> float:
    width = 0.0
    for ch in text:
        if ch.isspace():
            width += font_size * 0.33
        elif ch in "il":
            width += font_size * 0.3
        elif ch in "mwMW@#":
            width += font_size * 0.9
        elif ord(ch) > 0x2E80:
            width += font_size
        else:
            width += font_size * 0.6
    return width
