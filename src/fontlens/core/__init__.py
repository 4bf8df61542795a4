# -*- coding: utf-8 -*-
"""
The Core Processing Package for FontLens.

This package holds the font identification engine: the staged pipeline from a
selected image region to a ranked list of font matches.

- `image_processor`: OCR preprocessing and the text extraction adapter.
- `renderer`: draws the extracted text in a candidate font.
- `similarity`: pixel-level closeness between two buffers.
- `ranking`: reduces scored candidates to the top matches.
- `font_matcher`: the render/score loop over all candidates.
- `pipeline`: the orchestrator state machine.
"""

from .font_matcher import FontMatcher
from .image_processor import EasyOcrExtractor, TextExtractor
from .pipeline import FontIdentificationPipeline
from .ranking import rank
from .renderer import PillowRenderer, Renderer
from .similarity import SimilarityScorer, compare

__all__ = [
    "EasyOcrExtractor",
    "FontIdentificationPipeline",
    "FontMatcher",
    "PillowRenderer",
    "Renderer",
    "SimilarityScorer",
    "TextExtractor",
    "compare",
    "rank",
]
