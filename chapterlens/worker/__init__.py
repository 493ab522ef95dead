"""
Background execution with an ordered progress channel.
"""

from .messages import AnalysisRequest, CompleteMessage, ErrorMessage, ProgressMessage, WorkerMessage
from .runner import AnalysisWorker, WorkerState, run_analysis

__all__ = [
    "AnalysisRequest",
    "AnalysisWorker",
    "CompleteMessage",
    "ErrorMessage",
    "ProgressMessage",
    "WorkerMessage",
    "WorkerState",
    "run_analysis",
]
