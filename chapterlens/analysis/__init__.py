"""
Analysis orchestration and derived analytics.
"""

from .engine import AnalysisEngine, PipelineState, overall_score
from .validation import sanitize_chapter, validate_chapter

__all__ = [
    "AnalysisEngine",
    "PipelineState",
    "overall_score",
    "sanitize_chapter",
    "validate_chapter",
]
