# -*- coding: utf-8 -*-
"""
src/fontlens/models.py

Value types shared by the pipeline stages.

All pixel buffers are NumPy arrays of shape (height, width, 3) and dtype
uint8 in RGB channel order.
"""

import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from .errors import InputError


class Stage(enum.Enum):
    """States of the pipeline orchestrator."""
    IDLE = "idle"
    REGION_READY = "region-ready"
    TEXT_EXTRACTED = "text-extracted"
    MATCHING = "matching"
    COMPLETED = "completed"
    FAILED = "failed"


def as_rgb(pixels: np.ndarray) -> np.ndarray:
    """
    Coerces a grayscale, RGB or RGBA array into a (h, w, 3) uint8 RGB array.

    RGBA input is composited onto a white background so transparent areas
    read as paper rather than ink.
    """
    array = np.asarray(pixels)
    if array.dtype != np.uint8:
        array = np.clip(array, 0, 255).astype(np.uint8)

    if array.ndim == 2:
        return np.stack([array] * 3, axis=-1)
    if array.ndim != 3 or array.shape[2] not in (3, 4):
        raise InputError(f"Unsupported pixel buffer shape: {array.shape}")
    if array.shape[2] == 3:
        return array

    rgb = array[..., :3].astype(np.float32)
    alpha = array[..., 3:4].astype(np.float32) / 255.0
    composited = rgb * alpha + 255.0 * (1.0 - alpha)
    return np.round(composited).astype(np.uint8)


@dataclass(frozen=True, eq=False)
class SourceRegion:
    """The user-selected crop. Immutable for the lifetime of a run."""
    pixels: np.ndarray

    def __post_init__(self):
        if self.pixels is None or np.asarray(self.pixels).size == 0:
            raise InputError("The selected region is empty.")
        rgb = as_rgb(self.pixels).copy()
        rgb.setflags(write=False)
        object.__setattr__(self, "pixels", rgb)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]


@dataclass(frozen=True)
class ExtractedText:
    text: str
    confidence: float

    def __post_init__(self):
        if not self.text or not self.text.strip():
            raise InputError("Extracted text is empty.")
        object.__setattr__(self, "confidence", float(min(max(self.confidence, 0.0), 100.0)))

    def with_text(self, text: str) -> "ExtractedText":
        """Returns the user-corrected value; the original stays untouched."""
        return ExtractedText(text=text, confidence=self.confidence)


@dataclass(frozen=True)
class FontCandidate:
    """A (family, weight) pair tested against the extracted text."""
    family: str
    weight: int = 400
    display_name: str = ""

    def __post_init__(self):
        if not self.display_name:
            object.__setattr__(self, "display_name", f"{self.family} {self.weight}")

    @property
    def key(self) -> Tuple[str, int]:
        return (self.family, self.weight)

    def __str__(self):
        return self.display_name


@dataclass(frozen=True)
class CatalogEntry:
    """A family as listed by a catalog provider, with its available weights."""
    family: str
    weights: Tuple[int, ...] = (400,)

    def candidates(self):
        return [FontCandidate(self.family, weight) for weight in self.weights]


@dataclass(frozen=True, eq=False)
class RenderedSample:
    candidate: FontCandidate
    pixels: np.ndarray


@dataclass(frozen=True, eq=False)
class SimilarityScore:
    candidate: FontCandidate
    score: float
    sample: Optional[RenderedSample] = None


@dataclass(frozen=True)
class MatchResult:
    """
    Terminal artifact of a run: at most three scores, best first.

    The run statistics are informational only.
    """
    matches: Tuple[SimilarityScore, ...] = ()
    tested: int = 0
    failed: int = 0
    degraded: bool = False
    elapsed: float = 0.0

    def __len__(self):
        return len(self.matches)

    def __iter__(self):
        return iter(self.matches)

    def __getitem__(self, index):
        return self.matches[index]

    @property
    def is_empty(self) -> bool:
        return not self.matches

    @property
    def best(self) -> Optional[SimilarityScore]:
        return self.matches[0] if self.matches else None


@dataclass(frozen=True)
class PipelineEvent:
    """A structured progress notification emitted by the orchestrator."""
    stage: Stage
    percent_complete: float = 0.0
    label: str = ""
    generation: int = 0
    text: Optional[ExtractedText] = None
    result: Optional[MatchResult] = None
    error: Optional[Exception] = None
    warning: Optional[Warning] = None
    notices: Tuple[str, ...] = field(default_factory=tuple)
