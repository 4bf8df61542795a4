# -*- coding: utf-8 -*-
"""
src/fontlens/catalog/system_fonts.py

A catalog built from the fonts installed on this machine.

The platform font directories are scanned for .ttf and .otf files; each file
is opened with Pillow to read its family and style names, and the style is
mapped to a numeric weight. Italic and oblique faces are skipped, since
candidates are (family, weight) pairs.
"""

import logging
import os
import platform
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from PIL import ImageFont

from ..errors import CatalogError
from ..models import CatalogEntry, FontCandidate
from .base import FontCatalogProvider, FontRegistry

logger = logging.getLogger(__name__)

FONT_EXTENSIONS = ("*.ttf", "*.otf", "*.TTF", "*.OTF")

# Style words checked longest first, so "ExtraBold" wins over "Bold".
STYLE_WEIGHTS = [
    ("extralight", 200), ("ultralight", 200),
    ("extrabold", 800), ("ultrabold", 800),
    ("semibold", 600), ("demibold", 600),
    ("hairline", 100), ("thin", 100),
    ("light", 300),
    ("regular", 400), ("normal", 400), ("book", 400), ("roman", 400),
    ("medium", 500),
    ("bold", 700),
    ("black", 900), ("heavy", 900),
]


def get_system_font_dirs() -> List[Path]:
    """Returns the font directories for the current platform."""
    system = platform.system()
    if system == "Windows":
        win_dir = os.environ.get("windir", "C:/Windows")
        return [Path(win_dir) / "Fonts"]
    if system == "Darwin":  # macOS
        return [
            Path("/System/Library/Fonts"),
            Path("/Library/Fonts"),
            Path.home() / "Library/Fonts",
        ]
    return [
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        Path.home() / ".local/share/fonts",
        Path.home() / ".fonts",
    ]


def get_system_font_paths(font_dirs: Optional[Iterable[Path]] = None) -> List[Path]:
    """
    Scans font directories recursively for .ttf and .otf files.

    Returns:
        A sorted list of font file paths.
    """
    font_paths = set()
    for font_dir in font_dirs if font_dirs is not None else get_system_font_dirs():
        font_dir = Path(font_dir)
        if not font_dir.is_dir():
            continue
        for ext in FONT_EXTENSIONS:
            for font_file in font_dir.rglob(ext):
                font_paths.add(font_file)
    return sorted(font_paths)


def style_to_weight(style: str) -> Optional[int]:
    """
    Maps a style name such as 'Bold' or 'SemiBold Italic' to a weight.

    Returns None for italic/oblique styles. Unknown styles count as 400.
    """
    normalized = style.lower().replace(" ", "").replace("-", "")
    if "italic" in normalized or "oblique" in normalized:
        return None
    for word, weight in STYLE_WEIGHTS:
        if word in normalized:
            return weight
    return 400


class SystemFontIndex:
    """Lazily built (family, weight) -> font file index of installed fonts."""

    def __init__(self, font_dirs: Optional[Iterable[Path]] = None):
        self.font_dirs = list(font_dirs) if font_dirs is not None else None
        self._index: Optional[Dict[Tuple[str, int], Path]] = None

    def build(self) -> Dict[Tuple[str, int], Path]:
        if self._index is not None:
            return self._index

        index: Dict[Tuple[str, int], Path] = {}
        paths = get_system_font_paths(self.font_dirs)
        for path in paths:
            try:
                family, style = ImageFont.truetype(str(path), 10).getname()
            except OSError as e:
                logger.debug(f"Skipping unreadable font {path}: {e}")
                continue
            if not family:
                continue
            weight = style_to_weight(style or "")
            if weight is None:
                continue
            index.setdefault((family, weight), path)

        logger.info(f"Indexed {len(index)} installed font faces from {len(paths)} files.")
        self._index = index
        return index

    def find(self, family: str, weight: int) -> Optional[Path]:
        index = self.build()
        path = index.get((family, weight))
        if path is None:
            # Family names are matched case-insensitively as a second chance.
            for (name, w), candidate_path in index.items():
                if w == weight and name.lower() == family.lower():
                    return candidate_path
        return path

    def families(self) -> Dict[str, List[int]]:
        grouped: Dict[str, List[int]] = {}
        for family, weight in self.build():
            grouped.setdefault(family, []).append(weight)
        return {family: sorted(weights) for family, weights in sorted(grouped.items())}


def register_from_index(
    index: SystemFontIndex,
    registry: FontRegistry,
    candidates: Sequence[FontCandidate],
) -> List[FontCandidate]:
    """Registers every candidate the index can resolve and returns those."""
    confirmed = []
    for candidate in candidates:
        path = index.find(candidate.family, candidate.weight)
        if path is None:
            logger.debug(f"{candidate} is not installed.")
            continue
        registry.register(candidate, path)
        confirmed.append(candidate)
    return confirmed


class SystemFontCatalog(FontCatalogProvider):
    """Every installed family, alphabetically, with its installed weights."""

    name = "system"

    def __init__(self, registry: FontRegistry, index: Optional[SystemFontIndex] = None,
                 limit: Optional[int] = None):
        super().__init__(registry)
        self.index = index or SystemFontIndex()
        self.limit = limit

    def list_candidates(self) -> List[CatalogEntry]:
        families = self.index.families()
        if not families:
            raise CatalogError("No installed fonts were found.")
        entries = [CatalogEntry(family, tuple(weights)) for family, weights in families.items()]
        if self.limit:
            entries = entries[:self.limit]
        return entries

    def ensure_available(self, candidates: Sequence[FontCandidate]) -> List[FontCandidate]:
        confirmed = register_from_index(self.index, self.registry, candidates)
        if not confirmed:
            raise CatalogError("None of the requested fonts are installed.")
        return confirmed
