"""Unit tests for fontlens.core.ranking."""

import unittest

from fontlens.core.ranking import rank
from fontlens.models import FontCandidate, SimilarityScore


def scored(family, value):
    return SimilarityScore(FontCandidate(family), value)


class TestRank(unittest.TestCase):

    def test_ties_broken_by_catalog_order(self):
        # Catalog order is B, A, C, D; A and B tie.
        scores = [scored("B", 92.4), scored("A", 92.4), scored("C", 81.0), scored("D", 40.0)]
        result = rank(scores)
        self.assertEqual([s.candidate.family for s in result], ["B", "A", "C"])
        self.assertEqual([s.score for s in result], [92.4, 92.4, 81.0])

    def test_at_most_three_descending(self):
        scores = [scored(name, value) for name, value in
                  [("a", 10.0), ("b", 70.5), ("c", 33.3), ("d", 99.0), ("e", 70.6)]]
        result = rank(scores)
        self.assertEqual(len(result), 3)
        values = [s.score for s in result]
        self.assertEqual(values, sorted(values, reverse=True))
        self.assertEqual([s.candidate.family for s in result], ["d", "e", "b"])

    def test_never_pads(self):
        self.assertEqual(len(rank([scored("only", 50.0)])), 1)
        self.assertEqual(tuple(rank([])), ())

    def test_only_input_candidates(self):
        scores = [scored(name, float(i)) for i, name in enumerate("abcdef")]
        inputs = {id(s) for s in scores}
        self.assertTrue(all(id(s) in inputs for s in rank(scores)))

    def test_custom_top_n(self):
        scores = [scored(name, float(i)) for i, name in enumerate("abcdef")]
        self.assertEqual(len(rank(scores, top_n=5)), 5)
        self.assertEqual(rank(scores, top_n=0), ())


if __name__ == '__main__':
    unittest.main()
