# -*- coding: utf-8 -*-
"""
src/fontlens/core/ranking.py

Reduces the scored candidates of a run to the final shortlist.
"""

from typing import Iterable, Sequence

from ..models import SimilarityScore

DEFAULT_TOP_N = 3


def rank(scores: Iterable[SimilarityScore], top_n: int = DEFAULT_TOP_N) -> Sequence[SimilarityScore]:
    """
    Returns the best `top_n` scores, highest first.

    `scores` must be in catalog order. Python's sort is stable, so candidates
    with equal scores keep their catalog order. Fewer than `top_n` inputs
    yield a shorter list; nothing is padded.
    """
    if top_n <= 0:
        return ()
    ordered = sorted(scores, key=lambda item: item.score, reverse=True)
    return tuple(ordered[:top_n])
