# -*- coding: utf-8 -*-
"""
src/fontlens/core/similarity.py

Pixel-level visual closeness between a reference buffer and a rendered
candidate.

Both buffers are resampled to a common square, reduced to grayscale as the
plain mean of the three colour channels, and compared pixel by pixel. No
spatial alignment is attempted: two renderings of the same glyphs shifted by
a few pixels score lower than a perfect overlay.
"""

import logging

import cv2
import numpy as np

from ..models import as_rgb

logger = logging.getLogger(__name__)

DEFAULT_COMPARE_SIZE = 400


def resample(pixels: np.ndarray, size: int = DEFAULT_COMPARE_SIZE) -> np.ndarray:
    """
    Resizes an RGB buffer to a (size, size, 3) float32 array.

    INTER_AREA is used when shrinking, since it averages the source pixels
    instead of dropping them; INTER_CUBIC when enlarging.
    """
    rgb = as_rgb(pixels)
    h, w = rgb.shape[:2]
    if (h, w) == (size, size):
        return rgb.astype(np.float32)

    interpolation = cv2.INTER_AREA if (w >= size and h >= size) else cv2.INTER_CUBIC
    resized = cv2.resize(rgb, (size, size), interpolation=interpolation)
    return resized.astype(np.float32)


def grayscale(pixels: np.ndarray) -> np.ndarray:
    """Plain channel mean, (R + G + B) / 3, on a float array."""
    return pixels[..., :3].sum(axis=-1) / 3.0


def score_normalized(reference: np.ndarray, sample: np.ndarray) -> float:
    """
    Scores two buffers that are already resampled to the same shape.

    Args:
        reference (np.ndarray): A float array from `resample`.
        sample (np.ndarray): A float array from `resample`.

    Returns:
        float: Similarity in [0, 100], rounded to two decimals.
    """
    if reference.shape != sample.shape:
        raise ValueError(
            f"Buffers must share dimensions before scoring: {reference.shape} != {sample.shape}"
        )

    diff = np.abs(grayscale(reference) - grayscale(sample)) / 255.0
    avg_diff = float(diff.mean())
    similarity = max(0.0, (1.0 - avg_diff) * 100.0)
    return round(similarity, 2)


def compare(buffer_a: np.ndarray, buffer_b: np.ndarray, size: int = DEFAULT_COMPARE_SIZE) -> float:
    """
    Computes the similarity score (0-100) between two pixel buffers of any size.

    The score is symmetric, equals 100 for buffers that are identical after
    resampling, and decreases as per-pixel differences grow.
    """
    return score_normalized(resample(buffer_a, size), resample(buffer_b, size))


class SimilarityScorer:
    """
    Holds the normalized reference buffer for a run.

    The reference is resampled once and shared read-only across every
    candidate; each sample is resampled into a private scratch array.
    """

    def __init__(self, reference_pixels: np.ndarray, size: int = DEFAULT_COMPARE_SIZE):
        self.size = size
        self.reference = resample(reference_pixels, size)
        self.reference.setflags(write=False)
        logger.debug(f"Reference buffer normalized to {size}x{size}.")

    def score(self, sample_pixels: np.ndarray) -> float:
        return score_normalized(self.reference, resample(sample_pixels, self.size))
