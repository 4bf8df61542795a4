# -*- coding: utf-8 -*-
"""
src/fontlens/core/font_matcher.py

This module defines the FontMatcher class, responsible for rendering the
extracted text in every candidate font, scoring each rendering against the
selected region, and keeping the best matches.
"""

import asyncio
import logging
import time
from typing import Callable, List, Optional, Sequence

import numpy as np

from ..errors import RenderError
from ..models import FontCandidate, MatchResult, SimilarityScore
from .ranking import DEFAULT_TOP_N, rank
from .renderer import Renderer
from .similarity import DEFAULT_COMPARE_SIZE, SimilarityScorer

logger = logging.getLogger(__name__)

# Called before each candidate with (index, total, candidate).
ProgressCallback = Callable[[int, int, FontCandidate], None]


class FontMatcher:
    """
    Runs the render/score loop over the candidates of one run.

    Candidates are processed one at a time; control returns to the event loop
    between candidates so progress events can be delivered.
    """

    def __init__(self, renderer: Renderer, top_n: int = DEFAULT_TOP_N,
                 compare_size: int = DEFAULT_COMPARE_SIZE):
        self.renderer = renderer
        self.top_n = top_n
        self.compare_size = compare_size

    async def find_best_matches(
        self,
        reference_pixels: np.ndarray,
        text: str,
        candidates: Sequence[FontCandidate],
        on_progress: Optional[ProgressCallback] = None,
        is_current: Callable[[], bool] = lambda: True,
    ) -> Optional[MatchResult]:
        """
        Finds the top N candidates for the given text and region.

        Args:
            reference_pixels (np.ndarray): The selected region.
            text (str): The confirmed text to render.
            candidates (Sequence[FontCandidate]): Loaded candidates in catalog order.
            on_progress: Optional callback invoked before each candidate.
            is_current: Returns False once the run has been superseded.

        Returns:
            The MatchResult, or None if the run was superseded mid-loop.
        """
        started = time.perf_counter()
        scorer = SimilarityScorer(reference_pixels, self.compare_size)

        top: List[SimilarityScore] = []
        failed = 0
        total = len(candidates)

        for index, candidate in enumerate(candidates):
            if on_progress is not None:
                on_progress(index, total, candidate)

            try:
                sample = self.renderer.render(text, candidate)
            except RenderError as e:
                failed += 1
                logger.warning(f"Skipping {candidate}: {e}")
            else:
                value = scorer.score(sample.pixels)
                logger.debug(f"{candidate}: {value:.2f}")
                # Only the running top N keep their samples; the rest are dropped here.
                top = list(rank(top + [SimilarityScore(candidate, value, sample)], self.top_n))

            await asyncio.sleep(0)
            if not is_current():
                logger.debug("Matching superseded; abandoning loop.")
                return None

        elapsed = time.perf_counter() - started
        logger.info(
            f"Matched {total - failed}/{total} candidates in {elapsed * 1000:.0f}ms "
            f"({failed} failed to render)."
        )
        return MatchResult(matches=tuple(top), tested=total, failed=failed, elapsed=elapsed)
