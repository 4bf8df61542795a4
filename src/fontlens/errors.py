# -*- coding: utf-8 -*-
"""
src/fontlens/errors.py

Exception hierarchy for the font identification engine.

Session-level failures (extraction, catalog exhaustion) move the pipeline to
its FAILED state. Per-candidate failures (RenderError) are isolated by the
matcher and never abort a run.
"""

# Failure kinds reported by an OCR adapter.
NO_TEXT_DETECTED = "no-text-detected"
ENGINE_ERROR = "engine-error"
TIMEOUT = "timeout"

EXTRACTION_FAILURE_KINDS = (NO_TEXT_DETECTED, ENGINE_ERROR, TIMEOUT)


class FontLensError(Exception):
    """Base class for all errors raised by FontLens."""


class InputError(FontLensError):
    """A missing region or an empty confirmed text. The pipeline does not advance."""


class InvalidStateError(InputError):
    """An operation was invoked from a state that does not accept it."""


class ExtractionError(FontLensError):
    """The OCR adapter could not produce text for the region."""

    def __init__(self, kind: str, message: str = ""):
        if kind not in EXTRACTION_FAILURE_KINDS:
            raise ValueError(f"Unknown extraction failure kind: {kind!r}")
        self.kind = kind
        super().__init__(message or kind)


class CatalogError(FontLensError):
    """The candidate list could not be retrieved or no font could be loaded."""


class RenderError(FontLensError):
    """A single candidate could not be rendered."""

    def __init__(self, candidate, message: str = ""):
        self.candidate = candidate
        super().__init__(message or f"Could not render {candidate}")


class LowConfidenceWarning(UserWarning):
    """
    OCR confidence fell below the configured threshold.

    Never raised by the pipeline; it is attached to the TEXT_EXTRACTED event
    so the caller can ask the user to double-check the text.
    """

    def __init__(self, confidence: float, threshold: float):
        self.confidence = confidence
        self.threshold = threshold
        super().__init__(
            f"Low OCR confidence ({confidence:.1f} < {threshold:.0f}); text may need editing"
        )
