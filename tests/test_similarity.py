"""Unit tests for fontlens.core.similarity."""

import unittest

import numpy as np

from fontlens.core.similarity import SimilarityScorer, compare, grayscale, resample
from helpers import solid, text_like_region


class TestCompare(unittest.TestCase):

    def setUp(self):
        rng = np.random.default_rng(7)
        self.a = rng.integers(0, 256, size=(60, 150, 3), dtype=np.uint8)
        self.b = rng.integers(0, 256, size=(90, 40, 3), dtype=np.uint8)

    def test_identical_buffers_score_100(self):
        self.assertEqual(compare(self.a, self.a), 100.0)
        self.assertEqual(compare(text_like_region(), text_like_region()), 100.0)

    def test_symmetric(self):
        self.assertEqual(compare(self.a, self.b), compare(self.b, self.a))

    def test_black_against_white_scores_zero(self):
        self.assertEqual(compare(solid(0), solid(255)), 0.0)

    def test_score_formula_on_uniform_buffers(self):
        # avgDiff = 127 / 255, score = (1 - avgDiff) * 100 rounded to 2 places.
        self.assertAlmostEqual(compare(solid(255), solid(128)), 50.2, places=2)

    def test_monotone_under_uniform_difference(self):
        base = solid(40, 200, 50)
        scores = [compare(base, solid(40 + delta, 200, 50)) for delta in range(0, 215, 15)]
        self.assertEqual(scores[0], 100.0)
        for earlier, later in zip(scores, scores[1:]):
            self.assertGreaterEqual(earlier, later)
        self.assertLess(scores[-1], scores[0])

    def test_grayscale_is_plain_channel_mean(self):
        red = np.zeros((10, 10, 3), dtype=np.uint8)
        red[..., 0] = 255
        green = np.zeros((10, 10, 3), dtype=np.uint8)
        green[..., 1] = 255
        # Same channel mean, so the metric cannot tell them apart.
        self.assertEqual(compare(red, green), 100.0)
        self.assertAlmostEqual(float(grayscale(red.astype(np.float32))[0, 0]), 85.0)

    def test_different_sizes_are_resampled(self):
        self.assertEqual(compare(solid(200, 800, 200), solid(200, 30, 10)), 100.0)

    def test_accepts_grayscale_and_rgba(self):
        gray = np.full((20, 20), 255, dtype=np.uint8)
        transparent = np.zeros((20, 20, 4), dtype=np.uint8)
        # Fully transparent pixels are composited onto white.
        self.assertEqual(compare(gray, transparent), 100.0)


class TestSimilarityScorer(unittest.TestCase):

    def test_reference_is_normalized_once_and_read_only(self):
        scorer = SimilarityScorer(text_like_region(), size=64)
        self.assertEqual(scorer.reference.shape, (64, 64, 3))
        self.assertFalse(scorer.reference.flags.writeable)

    def test_matches_compare(self):
        region = text_like_region()
        sample = solid(230, 800, 200)
        scorer = SimilarityScorer(region)
        self.assertEqual(scorer.score(sample), compare(region, sample))

    def test_resample_output_shape(self):
        self.assertEqual(resample(solid(10, 800, 200), 400).shape, (400, 400, 3))
        self.assertEqual(resample(solid(10, 5, 5), 400).dtype, np.float32)


if __name__ == '__main__':
    unittest.main()
