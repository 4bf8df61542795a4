# -*- coding: utf-8 -*-
"""
src/fontlens/core/image_processor.py

The OCR extraction adapter. This module takes the selected region,
preprocesses it for clarity, and runs it through an OCR engine to extract the
text and a confidence value for the pipeline.
"""

import abc
import logging
from typing import Any, List, Optional, Sequence

import cv2
import numpy as np

from ..errors import ENGINE_ERROR, NO_TEXT_DETECTED, ExtractionError
from ..models import ExtractedText, as_rgb
from ..utils.text_utils import clean_ocr_text

logger = logging.getLogger(__name__)

# --- Module-level Configuration ---

# Factor by which to upscale the image before OCR. Helps with small text.
UPSCALE_FACTOR = 2.0

# Grayscale level separating ink from paper in the high-contrast binarization.
INK_THRESHOLD = 128


def preprocess_for_ocr(pixels: np.ndarray, upscale_factor: float = UPSCALE_FACTOR) -> np.ndarray:
    """
    Upscales, converts to grayscale and binarizes a region.

    Returns:
        np.ndarray: A single-channel uint8 image, dark text (0) on white (255).
    """
    rgb = as_rgb(pixels)
    if upscale_factor and upscale_factor != 1.0:
        # INTER_CUBIC preserves edges better than linear when enlarging.
        h, w = rgb.shape[:2]
        rgb = cv2.resize(
            rgb,
            (max(1, int(w * upscale_factor)), max(1, int(h * upscale_factor))),
            interpolation=cv2.INTER_CUBIC,
        )

    gray = cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY)
    _, binary = cv2.threshold(gray, INK_THRESHOLD, 255, cv2.THRESH_BINARY)
    return binary


def has_ink(pixels: np.ndarray) -> bool:
    """True if any pixel is dark enough to be text."""
    gray = cv2.cvtColor(as_rgb(pixels), cv2.COLOR_RGB2GRAY)
    return bool(np.any(gray < INK_THRESHOLD))


def order_detections(detections: Sequence[Any]) -> List[str]:
    """
    Orders EasyOCR detections top-to-bottom, then left-to-right within a line.

    Each detection is (bbox, text, confidence) where bbox holds four [x, y]
    corner points. Two boxes share a line when their vertical centres are
    closer than half the median box height.
    """
    boxes = []
    for bbox, text, _ in detections:
        xs = [point[0] for point in bbox]
        ys = [point[1] for point in bbox]
        boxes.append((min(xs), (min(ys) + max(ys)) / 2.0, max(ys) - min(ys), text))
    if not boxes:
        return []

    tolerance = float(np.median([height for _, _, height, _ in boxes])) / 2.0
    lines: List[list] = []
    for box in sorted(boxes, key=lambda b: b[1]):
        if lines and abs(box[1] - lines[-1][0][1]) <= tolerance:
            lines[-1].append(box)
        else:
            lines.append([box])

    ordered = []
    for line in lines:
        ordered.extend(text for _, _, _, text in sorted(line, key=lambda b: b[0]))
    return ordered


class TextExtractor(abc.ABC):
    """The OCR adapter contract consumed by the pipeline."""

    @abc.abstractmethod
    def extract(self, pixels: np.ndarray) -> ExtractedText:
        """
        Recognizes the text in a region.

        Calling it again with the same region is always safe; the result may
        differ between calls.

        Raises:
            ExtractionError: kind 'no-text-detected' or 'engine-error'.
                             Timeouts are enforced by the caller.
        """


class EasyOcrExtractor(TextExtractor):
    """
    Runs EasyOCR on the binarized region.

    The EasyOCR reader is created on first use and reused afterwards, since
    loading its models is slow.
    """

    def __init__(
        self,
        languages: Optional[List[str]] = None,
        gpu: bool = False,
        upscale_factor: float = UPSCALE_FACTOR,
        reader: Any = None,
    ):
        """
        Args:
            languages (List[str]): Language codes for EasyOCR. Defaults to ['en'].
            gpu (bool): Whether EasyOCR may use CUDA.
            upscale_factor (float): Enlargement applied before OCR.
            reader: A pre-built reader exposing `readtext`; built lazily if None.
        """
        self.languages = languages or ['en']
        self.gpu = gpu
        self.upscale_factor = upscale_factor
        self.reader = reader

    def _get_reader(self):
        if self.reader is None:
            logger.info(f"Initializing EasyOCR Reader for languages: {self.languages}...")
            try:
                import easyocr
                self.reader = easyocr.Reader(self.languages, gpu=self.gpu)
            except Exception as e:
                logger.critical(f"Failed to initialize EasyOCR Reader: {e}")
                raise ExtractionError(ENGINE_ERROR, f"OCR engine unavailable: {e}") from e
            logger.info("EasyOCR Reader initialized successfully.")
        return self.reader

    def extract(self, pixels: np.ndarray) -> ExtractedText:
        if pixels is None or np.asarray(pixels).size == 0:
            raise ExtractionError(NO_TEXT_DETECTED, "The region is empty.")

        if not has_ink(pixels):
            logger.info("Region contains no dark pixels; skipping OCR.")
            raise ExtractionError(NO_TEXT_DETECTED, "No text was recognized in the image.")

        binary = preprocess_for_ocr(pixels, self.upscale_factor)
        reader = self._get_reader()

        try:
            # `paragraph=False` keeps per-box confidences.
            detections = reader.readtext(binary, detail=1, paragraph=False)
        except Exception as e:
            logger.error(f"An error occurred during OCR processing: {e}")
            raise ExtractionError(ENGINE_ERROR, str(e)) from e

        detections = [d for d in detections if str(d[1]).strip()]
        text = clean_ocr_text(" ".join(order_detections(detections)))
        if not text:
            logger.warning("OCR did not find any text in the region.")
            raise ExtractionError(NO_TEXT_DETECTED, "No text was recognized in the image.")

        confidence = float(np.mean([float(conf) for _, _, conf in detections])) * 100.0
        logger.info(f"OCR extracted '{text}' with confidence {confidence:.1f}")
        return ExtractedText(text=text, confidence=confidence)
