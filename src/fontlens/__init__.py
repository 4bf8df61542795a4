# -*- coding: utf-8 -*-
"""
FontLens Application Package.

Identifies the typeface that most resembles the text in a selected image
region: the text is recognized with OCR, rendered in every candidate font,
and each rendering is compared pixel by pixel with the region.
"""

__version__ = "0.1.0"

from .core.pipeline import FontIdentificationPipeline
from .models import (
    ExtractedText,
    FontCandidate,
    MatchResult,
    PipelineEvent,
    SimilarityScore,
    SourceRegion,
    Stage,
)

__all__ = [
    "ExtractedText",
    "FontCandidate",
    "FontIdentificationPipeline",
    "MatchResult",
    "PipelineEvent",
    "SimilarityScore",
    "SourceRegion",
    "Stage",
]
