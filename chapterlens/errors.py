"""
Exception taxonomy for chapter analysis.

- Input validation failures are raised before a run starts.
- Extraction failures are normally recovered (empty graph) by the engine.
- Evaluator failures are isolated unless isolation is disabled in settings.
- Cancellation is a distinct terminal state, not an error.
"""
from __future__ import annotations


class ChapterLensError(Exception):
    """Base class for all chapterlens errors."""
    pass


class InputValidationError(ChapterLensError):
    """Raised when a chapter is rejected before analysis starts."""
    pass


class ChapterTooShortError(InputValidationError):
    """Raised when a chapter has fewer words than the configured minimum."""

    def __init__(self, word_count: int, min_words: int):
        self.word_count = word_count
        self.min_words = min_words
        super().__init__(
            f"Chapter should be at least {min_words} words (got {word_count})"
        )


class SectionBoundaryError(InputValidationError):
    """Raised by strict section validation on malformed offsets."""
    pass


class ExtractionError(ChapterLensError):
    """Raised when concept extraction fails unexpectedly."""
    pass


class EvaluatorError(ChapterLensError):
    """Raised when a principle evaluator fails and isolation is disabled."""

    def __init__(self, principle: str, cause: BaseException):
        self.principle = principle
        self.cause = cause
        super().__init__(f"{principle} evaluator failed: {cause}")


class AnalysisFailedError(ChapterLensError):
    """Raised to the caller when a worker run ended with an error message."""
    pass


class AnalysisCancelledError(ChapterLensError):
    """Raised when a result is requested from a cancelled run."""
    pass
