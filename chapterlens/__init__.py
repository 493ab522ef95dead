"""
chapterlens: evidence-based pedagogy analysis for instructional chapters.

Extracts a concept graph from chapter text, scores the chapter against ten
learning principles and assembles a report with findings, suggestions and
derived curves.
"""

__version__ = "0.1.0"

from chapterlens.analysis.engine import AnalysisEngine, PipelineState
from chapterlens.content.parser import ChapterParser
from chapterlens.extraction.lexical import LexicalConceptExtractor
from chapterlens.models import Chapter, ChapterAnalysis, ConceptGraph, Principle, PrincipleEvaluation, Section
from chapterlens.worker.messages import AnalysisRequest
from chapterlens.worker.runner import AnalysisWorker, run_analysis

__all__ = [
    "AnalysisEngine",
    "AnalysisRequest",
    "AnalysisWorker",
    "Chapter",
    "ChapterAnalysis",
    "ChapterParser",
    "ConceptGraph",
    "LexicalConceptExtractor",
    "PipelineState",
    "Principle",
    "PrincipleEvaluation",
    "Section",
    "__version__",
    "run_analysis",
]
