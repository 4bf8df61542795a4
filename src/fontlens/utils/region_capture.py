# -*- coding: utf-8 -*-
"""
src/fontlens/utils/region_capture.py

Sources for the region the pipeline analyses: an image file (optionally
cropped to a box) or a rectangle of the screen captured with 'mss'.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import cv2
import mss
import numpy as np
from PIL import Image

from ..errors import InputError
from ..models import SourceRegion

logger = logging.getLogger(__name__)

Box = Tuple[int, int, int, int]


def parse_box(value: str) -> Box:
    """
    Parses 'LEFT,TOP,WIDTH,HEIGHT' into a tuple of ints.

    Raises:
        InputError: If the string is malformed or the box is empty.
    """
    try:
        left, top, width, height = (int(part) for part in value.split(","))
    except ValueError:
        raise InputError(f"Expected LEFT,TOP,WIDTH,HEIGHT but got '{value}'.") from None
    if width <= 0 or height <= 0:
        raise InputError(f"Region must have a positive size, got {width}x{height}.")
    return left, top, width, height


def load_region_from_file(path: Path, box: Optional[Box] = None) -> SourceRegion:
    """
    Loads an image file as a SourceRegion, cropped to `box` if given.

    Transparent areas are composited onto white by SourceRegion.
    """
    try:
        with Image.open(path) as image:
            image = image.convert("RGBA")
            if box is not None:
                left, top, width, height = box
                image = image.crop((left, top, left + width, top + height))
            pixels = np.array(image)
    except OSError as e:
        raise InputError(f"Could not read image '{path}': {e}") from e

    logger.info(f"Loaded region {pixels.shape[1]}x{pixels.shape[0]} from {path}")
    return SourceRegion(pixels)


def grab_screen_region(box: Box) -> SourceRegion:
    """Captures a rectangle of the screen."""
    left, top, width, height = box
    monitor = {"top": top, "left": left, "width": width, "height": height}

    with mss.mss() as sct:
        sct_img = sct.grab(monitor)
        # mss returns BGRA.
        img = cv2.cvtColor(np.array(sct_img), cv2.COLOR_BGRA2RGB)

    logger.info(f"Captured screen region {width}x{height} at ({left}, {top})")
    return SourceRegion(img)
