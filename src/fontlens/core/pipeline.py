# -*- coding: utf-8 -*-
"""
src/fontlens/core/pipeline.py

The pipeline orchestrator: the state machine that drives one font
identification session from a selected region to a ranked MatchResult.

    IDLE -> REGION_READY -> TEXT_EXTRACTED -> MATCHING -> COMPLETED
                 |                |               |
                 +--------------> FAILED <--------+

`reset()` returns to IDLE from any state. Each run carries a generation
token; asynchronous continuations capture the token when they start and
become no-ops once it is no longer current. This is how a reset or a new
submission cancels stale work.
"""

import asyncio
import dataclasses
import logging
from typing import Callable, List, Optional

from ..catalog.barrier import CatalogBarrier
from ..catalog.base import FontCatalogProvider
from ..errors import (
    ENGINE_ERROR,
    NO_TEXT_DETECTED,
    TIMEOUT,
    CatalogError,
    ExtractionError,
    InputError,
    InvalidStateError,
    LowConfidenceWarning,
)
from ..models import ExtractedText, FontCandidate, MatchResult, PipelineEvent, SourceRegion, Stage
from ..utils.text_utils import normalize_text
from .font_matcher import FontMatcher
from .image_processor import TextExtractor
from .ranking import DEFAULT_TOP_N
from .renderer import Renderer

logger = logging.getLogger(__name__)

Listener = Callable[[PipelineEvent], None]

LOW_CONFIDENCE_THRESHOLD = 70.0
OCR_TIMEOUT = 30.0


class FontIdentificationPipeline:
    """
    Coordinates OCR, the catalog load barrier, rendering, scoring and ranking.

    Attributes:
        state (Stage): The current state.
        generation (int): Token of the current run.
        region (SourceRegion): The region of the current run.
        extracted (ExtractedText): OCR output of the current run.
        confirmed (ExtractedText): The text confirmed for matching.
        result (MatchResult): The terminal result once COMPLETED.
        error (Exception): The cause of the FAILED state.
        warnings (list): Non-fatal warnings raised during the run.
        notices (list): Degraded-mode notices raised during the run.
    """

    def __init__(
        self,
        extractor: TextExtractor,
        renderer: Renderer,
        catalog: FontCatalogProvider,
        fallback_catalog: Optional[FontCatalogProvider] = None,
        top_n: int = DEFAULT_TOP_N,
        compare_size: int = 400,
        ocr_timeout: float = OCR_TIMEOUT,
        low_confidence_threshold: float = LOW_CONFIDENCE_THRESHOLD,
    ):
        self.extractor = extractor
        self.catalog = catalog
        self.fallback_catalog = fallback_catalog
        if top_n > DEFAULT_TOP_N:
            logger.warning(f"At most {DEFAULT_TOP_N} matches are kept; ignoring top_n={top_n}.")
            top_n = DEFAULT_TOP_N
        self.matcher = FontMatcher(renderer, top_n=top_n, compare_size=compare_size)
        self.ocr_timeout = ocr_timeout
        self.low_confidence_threshold = low_confidence_threshold

        self.state = Stage.IDLE
        self.generation = 0
        self._listeners: List[Listener] = []
        self._barrier: Optional[CatalogBarrier] = None
        self._clear_run()

    # --- Events ---

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, percent: float = 0.0, label: str = "", **details) -> None:
        event = PipelineEvent(
            stage=self.state,
            percent_complete=percent,
            label=label,
            generation=self.generation,
            **details,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Pipeline listener failed: {e}", exc_info=True)

    def _set_state(self, state: Stage, percent: float = 0.0, label: str = "", **details) -> None:
        logger.info(f"[gen {self.generation}] {self.state.value} -> {state.value}")
        self.state = state
        self._emit(percent, label, **details)

    # --- Generation bookkeeping ---

    def _clear_run(self) -> None:
        self.region: Optional[SourceRegion] = None
        self.extracted: Optional[ExtractedText] = None
        self.confirmed: Optional[ExtractedText] = None
        self.result: Optional[MatchResult] = None
        self.error: Optional[Exception] = None
        self.warnings: List[Warning] = []
        self.notices: List[str] = []

    def _next_generation(self) -> int:
        self.generation += 1
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def _ensure_barrier(self) -> CatalogBarrier:
        if self._barrier is None or self._barrier.failed:
            self._barrier = CatalogBarrier(self.catalog, self.fallback_catalog)
            self._barrier.start()
        return self._barrier

    def _fail(self, generation: int, error: Exception) -> bool:
        if not self.is_current(generation):
            return False
        self.error = error
        self._set_state(Stage.FAILED, label=str(error), error=error)
        return True

    # --- Public surface ---

    async def submit_region(self, region) -> Optional[ExtractedText]:
        """
        Starts a run for `region` and extracts its text.

        Args:
            region: A SourceRegion or a raw pixel array.

        Returns:
            The extracted text, or None if extraction failed (the pipeline is
            then FAILED) or the run was superseded.

        Raises:
            InputError: If the region is missing or empty.
            InvalidStateError: If the pipeline is not IDLE.
        """
        if region is None:
            raise InputError("No region was selected.")
        if self.state is not Stage.IDLE:
            raise InvalidStateError(f"submit_region is not valid in state {self.state.value}.")
        if not isinstance(region, SourceRegion):
            region = SourceRegion(region)

        generation = self._next_generation()
        self.region = region
        self._set_state(Stage.REGION_READY, label="Recognizing text")
        # Font loading overlaps with OCR; the barrier is awaited before rendering.
        self._ensure_barrier()
        return await self._run_extraction(generation)

    async def retry_extraction(self) -> Optional[ExtractedText]:
        """Re-runs OCR on the same region after an extraction failure."""
        if self.state is not Stage.FAILED or self.region is None \
                or not isinstance(self.error, ExtractionError):
            raise InvalidStateError("Only a failed extraction can be retried.")

        generation = self._next_generation()
        self.error = None
        self._set_state(Stage.REGION_READY, label="Recognizing text")
        self._ensure_barrier()
        return await self._run_extraction(generation)

    async def _run_extraction(self, generation: int) -> Optional[ExtractedText]:
        loop = asyncio.get_running_loop()
        try:
            extracted = await asyncio.wait_for(
                loop.run_in_executor(None, self.extractor.extract, self.region.pixels),
                timeout=self.ocr_timeout,
            )
        except asyncio.TimeoutError:
            self.on_extraction_failure(generation, TIMEOUT, f"OCR took longer than {self.ocr_timeout}s.")
            return None
        except ExtractionError as e:
            self.on_extraction_failure(generation, e.kind, str(e))
            return None
        except Exception as e:
            logger.error(f"OCR adapter raised an unexpected error: {e}", exc_info=True)
            self.on_extraction_failure(generation, ENGINE_ERROR, str(e))
            return None

        if self.on_extraction_result(generation, extracted.text, extracted.confidence):
            return self.extracted
        return None

    def on_extraction_result(self, generation: int, text: str, confidence: float) -> bool:
        """
        Accepts OCR output for run `generation`.

        Returns:
            bool: False if the result was stale or arrived in the wrong state.
        """
        if not self.is_current(generation) or self.state is not Stage.REGION_READY:
            logger.debug(f"Discarding stale extraction result for generation {generation}.")
            return False

        try:
            extracted = ExtractedText(text=normalize_text(text), confidence=confidence)
        except InputError:
            self.on_extraction_failure(generation, NO_TEXT_DETECTED, "No text was recognized in the image.")
            return False

        self.extracted = extracted
        warning = None
        if extracted.confidence < self.low_confidence_threshold:
            warning = LowConfidenceWarning(extracted.confidence, self.low_confidence_threshold)
            self.warnings.append(warning)
            logger.warning(str(warning))

        self._set_state(Stage.TEXT_EXTRACTED, percent=100.0, label=extracted.text,
                        text=extracted, warning=warning)
        return True

    def on_extraction_failure(self, generation: int, kind: str, message: str = "") -> bool:
        """Records an OCR failure for run `generation`. Stale failures are ignored."""
        if not self.is_current(generation) or self.state is not Stage.REGION_READY:
            logger.debug(f"Discarding stale extraction failure for generation {generation}.")
            return False
        logger.warning(f"Text extraction failed ({kind}): {message}")
        return self._fail(generation, ExtractionError(kind, message))

    async def confirm_text(self, text: str) -> Optional[MatchResult]:
        """
        Confirms the (possibly user-corrected) text and runs matching.

        Returns:
            The MatchResult, or None if the run failed or was superseded.

        Raises:
            InvalidStateError: If no extracted text is awaiting confirmation.
            InputError: If the text is empty after trimming.
        """
        if self.state is not Stage.TEXT_EXTRACTED:
            raise InvalidStateError(f"confirm_text is not valid in state {self.state.value}.")
        normalized = normalize_text(text)
        if not normalized:
            raise InputError("The confirmed text is empty.")

        generation = self.generation
        self.confirmed = self.extracted.with_text(normalized)
        self._set_state(Stage.MATCHING, label="Loading fonts")

        barrier = self._ensure_barrier()
        try:
            readiness = await barrier.wait()
        except CatalogError as e:
            logger.error(f"No fonts available for matching: {e}")
            self._fail(generation, e)
            return None
        except asyncio.CancelledError:
            if not self.is_current(generation):
                return None
            raise
        except Exception as e:
            logger.error(f"Font loading failed: {e}", exc_info=True)
            self._fail(generation, CatalogError(f"Font loading failed: {e}"))
            return None

        if not self.is_current(generation):
            return None
        if readiness.notice:
            self.notices.append(readiness.notice)
            self._emit(label=readiness.notice, notices=tuple(self.notices))

        def on_progress(index: int, total: int, candidate: FontCandidate) -> None:
            if self.is_current(generation):
                self._emit(percent=100.0 * index / total if total else 0.0,
                           label=candidate.display_name)

        try:
            result = await self.matcher.find_best_matches(
                self.region.pixels,
                self.confirmed.text,
                readiness.candidates,
                on_progress=on_progress,
                is_current=lambda: self.is_current(generation),
            )
        except Exception as e:
            logger.error(f"Matching failed: {e}", exc_info=True)
            self._fail(generation, e)
            raise

        if result is None:
            return None
        result = dataclasses.replace(result, degraded=readiness.degraded)
        if self.on_matching_complete(generation, result):
            return result
        return None

    def on_matching_complete(self, generation: int, result: MatchResult) -> bool:
        """Stores the terminal result for run `generation`. Stale results are ignored."""
        if not self.is_current(generation) or self.state is not Stage.MATCHING:
            logger.debug(f"Discarding stale match result for generation {generation}.")
            return False
        self.result = result
        if result.is_empty:
            label = "No candidate could be scored"
        else:
            label = f"Best match: {result.best.candidate.display_name}"
        self._set_state(Stage.COMPLETED, percent=100.0, label=label, result=result,
                        notices=tuple(self.notices))
        return True

    def reset(self) -> None:
        """Discards all in-flight work and returns to IDLE."""
        self._next_generation()
        if self._barrier is not None:
            self._barrier.cancel()
            self._barrier = None
        self._clear_run()
        self._set_state(Stage.IDLE, label="Reset")
