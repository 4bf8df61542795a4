# -*- coding: utf-8 -*-
"""
src/fontlens/catalog/builtin.py

The small built-in candidate list used when the configured catalog is
unavailable.

Families are resolved against the installed fonts. The last entry is the
font bundled with Pillow, so the list always contains at least one
renderable candidate even on a machine with no fonts installed.
"""

import logging
from typing import List, Optional, Sequence

from PIL import ImageFont

from ..errors import CatalogError
from ..models import CatalogEntry, FontCandidate
from .base import FontCatalogProvider, FontRegistry
from .system_fonts import SystemFontIndex, register_from_index

logger = logging.getLogger(__name__)

BUNDLED_FAMILY = "Aileron"

BUILTIN_ENTRIES = (
    CatalogEntry("Roboto", (400, 700)),
    CatalogEntry("Lato", (400, 700)),
    CatalogEntry("Montserrat", (400, 700)),
    CatalogEntry("DejaVu Sans", (400, 700)),
    CatalogEntry(BUNDLED_FAMILY, (400,)),
)


def load_bundled_font(size: int) -> ImageFont.FreeTypeFont:
    """Pillow's embedded scalable default font."""
    return ImageFont.load_default(size=size)


class BuiltinCatalog(FontCatalogProvider):
    name = "builtin"

    def __init__(self, registry: FontRegistry, index: Optional[SystemFontIndex] = None):
        super().__init__(registry)
        self.index = index or SystemFontIndex()

    def list_candidates(self) -> List[CatalogEntry]:
        return list(BUILTIN_ENTRIES)

    def ensure_available(self, candidates: Sequence[FontCandidate]) -> List[FontCandidate]:
        installed = [c for c in candidates if c.family != BUNDLED_FAMILY]
        resolved = set(c.key for c in register_from_index(self.index, self.registry, installed))

        confirmed = []
        for candidate in candidates:
            if candidate.family == BUNDLED_FAMILY:
                self.registry.register(candidate, load_bundled_font)
                confirmed.append(candidate)
            elif candidate.key in resolved:
                confirmed.append(candidate)

        if not confirmed:
            raise CatalogError("None of the built-in fonts are available.")
        logger.info(f"Built-in catalog ready with {len(confirmed)} of {len(candidates)} candidates.")
        return confirmed
