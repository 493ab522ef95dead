"""
Worker message protocol.

Caller -> worker: one AnalysisRequest.
Worker -> caller: ProgressMessage*, then exactly one CompleteMessage or
ErrorMessage. Nothing follows the terminal message.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Union

from chapterlens.extraction.library import ConceptDefinition
from chapterlens.models.analysis import ChapterAnalysis
from chapterlens.models.chapter import Chapter


@dataclass(frozen=True)
class AnalysisRequest:
    chapter: Chapter
    domain: Optional[str] = None  # overrides chapter.metadata.domain when set
    include_cross_domain: bool = True
    custom_concepts: tuple[ConceptDefinition, ...] = ()


@dataclass(frozen=True)
class ProgressMessage:
    step: str
    detail: str = ""
    type: Literal["progress"] = "progress"


@dataclass(frozen=True)
class CompleteMessage:
    result: ChapterAnalysis
    type: Literal["complete"] = "complete"


@dataclass(frozen=True)
class ErrorMessage:
    message: str
    type: Literal["error"] = "error"


WorkerMessage = Union[ProgressMessage, CompleteMessage, ErrorMessage]


def is_terminal(message: WorkerMessage) -> bool:
    return isinstance(message, (CompleteMessage, ErrorMessage))
