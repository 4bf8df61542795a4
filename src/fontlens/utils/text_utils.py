# -*- coding: utf-8 -*-
"""
src/fontlens/utils/text_utils.py

Helpers for cleaning OCR output and normalizing the text the user confirms.
"""

import re
from typing import NamedTuple

_WHITESPACE_RUN = re.compile(r"\s+")
# Letters, digits, underscore, whitespace and basic punctuation survive OCR cleanup.
_DISALLOWED_OCR_CHARS = re.compile(r"[^\w\s.,!?'\"-]")

HIGH_CONFIDENCE = 80
MEDIUM_CONFIDENCE = 60


class ConfidenceLevel(NamedTuple):
    level: str
    message: str


def normalize_text(text: str) -> str:
    """
    Trims the text and collapses newlines and whitespace runs to single spaces.

    The result never has leading/trailing whitespace or embedded newlines.
    """
    return _WHITESPACE_RUN.sub(" ", text or "").strip()


def clean_ocr_text(text: str) -> str:
    """Normalizes raw OCR output and strips characters OCR commonly hallucinates."""
    return normalize_text(_DISALLOWED_OCR_CHARS.sub("", normalize_text(text)))


def confidence_level(confidence: float) -> ConfidenceLevel:
    """Classifies an OCR confidence (0-100) for display."""
    if confidence >= HIGH_CONFIDENCE:
        return ConfidenceLevel("high", "High confidence text recognition")
    if confidence >= MEDIUM_CONFIDENCE:
        return ConfidenceLevel("medium", "Medium confidence - please verify text")
    return ConfidenceLevel("low", "Low confidence - text may need editing")
