# -*- coding: utf-8 -*-
"""
src/fontlens/core/renderer.py

Renders the extracted text in a font candidate onto a fixed-size canvas.

The `Renderer` interface keeps the scoring and ranking code independent of
the rasterization backend. `PillowRenderer` draws with FreeType through
Pillow, using the font files registered in a `FontRegistry` by the catalog
load barrier.
"""

import abc
import logging
from typing import Dict, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from ..catalog.base import FontRegistry, FontSource
from ..errors import RenderError
from ..models import FontCandidate, RenderedSample

logger = logging.getLogger(__name__)

CANVAS_WIDTH = 800
CANVAS_HEIGHT = 200
FONT_SIZE = 48
BACKGROUND = (255, 255, 255)
INK = (0, 0, 0)


class Renderer(abc.ABC):
    """Turns (text, candidate) into a RenderedSample."""

    @abc.abstractmethod
    def render(self, text: str, candidate: FontCandidate) -> RenderedSample:
        """
        Renders `text` in `candidate`.

        Raises:
            RenderError: If this candidate cannot be drawn. Callers treat
                         this as a per-candidate failure.
        """


class PillowRenderer(Renderer):
    """
    Draws black text centred on a white canvas with Pillow.

    Output is deterministic for a given text, candidate and font file.
    """

    def __init__(
        self,
        registry: FontRegistry,
        width: int = CANVAS_WIDTH,
        height: int = CANVAS_HEIGHT,
        font_size: int = FONT_SIZE,
    ):
        self.registry = registry
        self.width = width
        self.height = height
        self.font_size = font_size
        self._fonts: Dict[Tuple[Tuple[str, int], FontSource], ImageFont.FreeTypeFont] = {}

    def _load_font(self, candidate: FontCandidate) -> ImageFont.FreeTypeFont:
        source = self.registry.lookup(candidate)
        if source is None:
            raise RenderError(candidate, f"No font file registered for {candidate}")

        # Keyed on the source too, so a re-registered candidate loads its new file.
        cache_key = (candidate.key, source)
        font = self._fonts.get(cache_key)
        if font is not None:
            return font

        try:
            if callable(source):
                font = source(self.font_size)
            else:
                font = ImageFont.truetype(str(source), self.font_size)
        except OSError as e:
            raise RenderError(candidate, f"Cannot open font {source}: {e}") from e

        _apply_weight_axis(font, candidate.weight)
        self._fonts[cache_key] = font
        return font

    def render(self, text: str, candidate: FontCandidate) -> RenderedSample:
        font = self._load_font(candidate)

        image = Image.new("RGB", (self.width, self.height), BACKGROUND)
        draw = ImageDraw.Draw(image)
        try:
            # "mm" anchors the middle of the text line on the canvas centre.
            draw.text(
                (self.width / 2, self.height / 2),
                text,
                font=font,
                fill=INK,
                anchor="mm",
            )
        except (OSError, ValueError) as e:
            raise RenderError(candidate, f"Failed to draw text in {candidate}: {e}") from e

        return RenderedSample(candidate=candidate, pixels=np.array(image))


def _apply_weight_axis(font: ImageFont.FreeTypeFont, weight: int) -> None:
    """Sets the 'Weight' axis of a variable font. Static fonts are left untouched."""
    try:
        axes = font.get_variation_axes()
    except (OSError, ValueError, AttributeError):
        # Not a variable font, or FreeType lacks variation support.
        return

    values = []
    found = False
    for axis in axes:
        name = axis.get("name", b"")
        if isinstance(name, bytes):
            name = name.decode("latin-1", errors="ignore")
        if name.lower() == "weight":
            values.append(min(max(weight, axis["minimum"]), axis["maximum"]))
            found = True
        else:
            values.append(axis["default"])

    if found:
        try:
            font.set_variation_by_axes(values)
        except (OSError, ValueError) as e:
            logger.debug(f"Could not set weight axis to {weight}: {e}")
