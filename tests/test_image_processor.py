"""Unit tests for fontlens.core.image_processor (OCR adapter)."""

import unittest
from unittest.mock import MagicMock

import numpy as np

from fontlens.core.image_processor import (
    EasyOcrExtractor,
    has_ink,
    order_detections,
    preprocess_for_ocr,
)
from fontlens.errors import ENGINE_ERROR, NO_TEXT_DETECTED, ExtractionError
from helpers import solid, text_like_region


def box(x, y, w=20, h=10):
    return [[x, y], [x + w, y], [x + w, y + h], [x, y + h]]


class TestPreprocessing(unittest.TestCase):

    def test_binarized_and_upscaled(self):
        binary = preprocess_for_ocr(text_like_region(120, 40), upscale_factor=2.0)
        self.assertEqual(binary.shape, (80, 240))
        self.assertTrue(set(np.unique(binary)).issubset({0, 255}))

    def test_has_ink(self):
        self.assertFalse(has_ink(solid(255)))
        self.assertFalse(has_ink(solid(200)))
        self.assertTrue(has_ink(text_like_region()))


class TestOrderDetections(unittest.TestCase):

    def test_reading_order(self):
        detections = [
            (box(100, 52), "second", 0.9),
            (box(10, 50), "line", 0.9),
            (box(60, 11), "World", 0.9),
            (box(5, 9), "Hello", 0.9),
        ]
        self.assertEqual(order_detections(detections), ["Hello", "World", "line", "second"])

    def test_empty(self):
        self.assertEqual(order_detections([]), [])


class TestEasyOcrExtractor(unittest.TestCase):

    def setUp(self):
        self.reader = MagicMock()
        self.extractor = EasyOcrExtractor(reader=self.reader)

    def test_blank_region_is_no_text_without_engine_call(self):
        with self.assertRaises(ExtractionError) as ctx:
            self.extractor.extract(solid(255, 200, 60))
        self.assertEqual(ctx.exception.kind, NO_TEXT_DETECTED)
        self.reader.readtext.assert_not_called()

    def test_joins_text_and_averages_confidence(self):
        self.reader.readtext.return_value = [
            (box(70, 10), "World", 0.8),
            (box(10, 10), "Hello", 0.6),
        ]
        extracted = self.extractor.extract(text_like_region())
        self.assertEqual(extracted.text, "Hello World")
        self.assertAlmostEqual(extracted.confidence, 70.0)
        _, kwargs = self.reader.readtext.call_args
        self.assertEqual(kwargs, {"detail": 1, "paragraph": False})

    def test_no_detections(self):
        self.reader.readtext.return_value = []
        with self.assertRaises(ExtractionError) as ctx:
            self.extractor.extract(text_like_region())
        self.assertEqual(ctx.exception.kind, NO_TEXT_DETECTED)

    def test_only_symbols_is_no_text(self):
        self.reader.readtext.return_value = [(box(0, 0), "|©|", 0.9)]
        with self.assertRaises(ExtractionError) as ctx:
            self.extractor.extract(text_like_region())
        self.assertEqual(ctx.exception.kind, NO_TEXT_DETECTED)

    def test_engine_exception_is_engine_error(self):
        self.reader.readtext.side_effect = RuntimeError("model crashed")
        with self.assertRaises(ExtractionError) as ctx:
            self.extractor.extract(text_like_region())
        self.assertEqual(ctx.exception.kind, ENGINE_ERROR)

    def test_retry_is_safe(self):
        self.reader.readtext.return_value = [(box(0, 0), "Again", 0.9)]
        first = self.extractor.extract(text_like_region())
        second = self.extractor.extract(text_like_region())
        self.assertEqual(first, second)
        self.assertEqual(self.reader.readtext.call_count, 2)


if __name__ == '__main__':
    unittest.main()
