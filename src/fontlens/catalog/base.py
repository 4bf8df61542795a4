# -*- coding: utf-8 -*-
"""
src/fontlens/catalog/base.py

The contract every font catalog provider fulfils, and the registry through
which confirmed font resources reach the renderer.
"""

import abc
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from PIL import ImageFont

from ..models import CatalogEntry, FontCandidate

logger = logging.getLogger(__name__)

# A font file on disk, or a callable returning a loaded font for a pixel size.
FontSource = Union[Path, Callable[[int], ImageFont.FreeTypeFont]]


class FontRegistry:
    """
    Maps (family, weight) to the font resource confirmed by a load barrier.

    The renderer only draws candidates found here.
    """

    def __init__(self):
        self._sources: Dict[Tuple[str, int], FontSource] = {}

    def register(self, candidate: FontCandidate, source: FontSource) -> None:
        if isinstance(source, str):
            source = Path(source)
        self._sources[candidate.key] = source
        logger.debug(f"Registered {candidate} -> {source}")

    def lookup(self, candidate: FontCandidate) -> Optional[FontSource]:
        return self._sources.get(candidate.key)

    def __contains__(self, candidate: FontCandidate) -> bool:
        return candidate.key in self._sources

    def __len__(self):
        return len(self._sources)

    def clear(self) -> None:
        self._sources.clear()


def expand_entries(entries: Iterable[CatalogEntry]) -> List[FontCandidate]:
    """Flattens catalog entries into candidates, keeping catalog order."""
    candidates = []
    seen = set()
    for entry in entries:
        for candidate in entry.candidates():
            if candidate.key in seen:
                continue
            seen.add(candidate.key)
            candidates.append(candidate)
    return candidates


class FontCatalogProvider(abc.ABC):
    """
    Supplies the ordered candidate fonts and makes them available for rendering.

    Both methods may block (network, disk); the load barrier runs them off
    the event loop.
    """

    name = "catalog"

    def __init__(self, registry: FontRegistry):
        self.registry = registry

    @abc.abstractmethod
    def list_candidates(self) -> List[CatalogEntry]:
        """
        Returns the catalog in ranking order.

        Raises:
            CatalogError: If the catalog cannot be retrieved.
        """

    @abc.abstractmethod
    def ensure_available(self, candidates: Sequence[FontCandidate]) -> List[FontCandidate]:
        """
        Makes the font resources of `candidates` available to the renderer.

        Returns:
            The candidates whose resources were confirmed, in the given order.

        Raises:
            CatalogError: If no candidate could be made available.
        """
