"""
Analysis Engine.

Runs one stateless pass over a chapter:

    received -> extracting-concepts -> evaluating-principles (x10)
             -> building-visualizations -> finalizing -> complete

`error` is terminal and reachable from any step. A progress callback, when
given, receives (state, detail) in pipeline order.

Usage:
    engine = AnalysisEngine()
    analysis = engine.analyze_chapter(chapter, on_progress=print)
"""
from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Sequence

from loguru import logger

from chapterlens.analysis.concept_map import concept_map
from chapterlens.analysis.interleaving import interleaving_pattern
from chapterlens.analysis.load_curve import cognitive_load_curve
from chapterlens.analysis.recommendations import promote_recommendations
from chapterlens.analysis.spacing import review_schedule
from chapterlens.analysis.structure import concept_analysis, concept_density, structure_analysis
from chapterlens.analysis.validation import sanitize_chapter
from chapterlens.config import Settings, get_settings
from chapterlens.errors import (
    AnalysisCancelledError,
    AnalysisFailedError,
    ChapterLensError,
    EvaluatorError,
    ExtractionError,
)
from chapterlens.extraction.base import ConceptExtractor, empty_graph, safe_extract
from chapterlens.extraction.lexical import LexicalConceptExtractor
from chapterlens.extraction.library import load_custom_concepts
from chapterlens.models.analysis import (
    AnalysisVisualization,
    ChapterAnalysis,
    ChapterMetrics,
    PrincipleScoreSummary,
)
from chapterlens.models.chapter import Chapter
from chapterlens.models.concepts import ConceptGraph
from chapterlens.models.evaluation import (
    Evidence,
    EvidenceQuality,
    EvidenceType,
    Finding,
    FindingType,
    PrincipleEvaluation,
)
from chapterlens.principles.base import safe_ratio
from chapterlens.principles.registry import EVALUATORS, RegisteredEvaluator

SUMMARY_SIZE = 3


class PipelineState(str, Enum):
    RECEIVED = "received"
    EXTRACTING_CONCEPTS = "extracting-concepts"
    EVALUATING_PRINCIPLES = "evaluating-principles"
    BUILDING_VISUALIZATIONS = "building-visualizations"
    FINALIZING = "finalizing"
    COMPLETE = "complete"
    ERROR = "error"


ProgressCallback = Callable[[PipelineState, str], None]


def overall_score(evaluations: Sequence[PrincipleEvaluation]) -> int:
    """Weight-normalised mean of principle scores, rounded half up; 0 without weights."""
    total_weight = sum(e.weight for e in evaluations)
    if total_weight <= 0:
        return 0
    mean = sum(e.score * e.weight for e in evaluations) / total_weight
    return max(0, min(100, math.floor(mean + 0.5)))


def unavailable_evaluation(evaluator: RegisteredEvaluator, error: BaseException) -> PrincipleEvaluation:
    """Stand-in result for an evaluator that raised."""
    return PrincipleEvaluation(
        principle=evaluator.principle,
        score=0.0,
        weight=evaluator.weight,
        findings=(
            Finding(
                type=FindingType.CRITICAL,
                message=f"{evaluator.name} could not be evaluated",
                severity=1.0,
                evidence=f"{type(error).__name__}: {error}",
            ),
        ),
        evidence=(
            Evidence(
                type=EvidenceType.METRIC,
                metric="evaluation_unavailable",
                value=0.0,
                quality=EvidenceQuality.WEAK,
            ),
        ),
    )


def score_summary(evaluations: Sequence[PrincipleEvaluation], overall: int) -> PrincipleScoreSummary:
    ranked = sorted(evaluations, key=lambda e: -e.score)  # stable: ties keep report order
    return PrincipleScoreSummary(
        scores=tuple((e.principle, e.score) for e in evaluations),
        overall_weighted_score=overall,
        strongest_principles=tuple(e.principle for e in ranked[:SUMMARY_SIZE]),
        weakest_principles=tuple(e.principle for e in reversed(ranked[-SUMMARY_SIZE:])),
    )


class AnalysisEngine:
    """Orchestrates extraction, the ten evaluators and report assembly."""

    def __init__(
        self,
        extractor: Optional[ConceptExtractor] = None,
        settings: Optional[Settings] = None,
        evaluators: Sequence[RegisteredEvaluator] = EVALUATORS,
    ):
        self.settings = settings or get_settings()
        self.extractor = extractor or self._default_extractor()
        self.evaluators = tuple(evaluators)

    def _default_extractor(self) -> LexicalConceptExtractor:
        custom = ()
        if self.settings.custom_concepts_path:
            custom = load_custom_concepts(self.settings.custom_concepts_path)
        return LexicalConceptExtractor(
            domain=self.settings.default_domain,
            include_cross_domain=self.settings.include_cross_domain,
            custom_concepts=custom,
        )

    # =========================================================================
    # Public API
    # =========================================================================

    def analyze_chapter(
        self,
        chapter: Chapter,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ChapterAnalysis:
        """
        Run the full pipeline.

        Raises:
            AnalysisCancelledError: if the progress callback cancelled the run
            EvaluatorError: if an evaluator failed and isolation is disabled
            AnalysisFailedError: on any other unexpected failure
        """
        def notify(state: PipelineState, detail: str = "") -> None:
            logger.debug("[{}] {}", state.value, detail)
            if on_progress is not None:
                on_progress(state, detail)

        notify(PipelineState.RECEIVED, chapter.title)
        try:
            analysis = self._run(chapter, notify)
        except AnalysisCancelledError:
            raise
        except ChapterLensError as exc:
            notify(PipelineState.ERROR, str(exc))
            raise
        except Exception as exc:
            notify(PipelineState.ERROR, str(exc))
            raise AnalysisFailedError(f"Analysis failed: {exc}") from exc

        notify(PipelineState.COMPLETE, f"overall score {analysis.overall_score}")
        return analysis

    def extract_concepts(self, chapter: Chapter) -> ConceptGraph:
        """Extract the concept graph, falling back to an empty graph on failure."""
        try:
            return safe_extract(self.extractor, chapter.content, chapter.sections)
        except ExtractionError as exc:
            logger.warning("Continuing with an empty concept graph: {}", exc)
            return empty_graph()

    def evaluate_principles(
        self,
        chapter: Chapter,
        graph: ConceptGraph,
        notify: Optional[Callable[[PipelineState, str], None]] = None,
    ) -> tuple[PrincipleEvaluation, ...]:
        """Run every evaluator; results come back in registry order."""
        total = len(self.evaluators)
        results: dict[int, PrincipleEvaluation] = {}

        def done(index: int, evaluation: PrincipleEvaluation) -> None:
            results[index] = evaluation
            if notify is not None:
                notify(
                    PipelineState.EVALUATING_PRINCIPLES,
                    f"{len(results)}/{total} {self.evaluators[index].name}",
                )

        if self.settings.max_workers <= 1:
            for index, evaluator in enumerate(self.evaluators):
                done(index, self._run_evaluator(evaluator, chapter, graph))
        else:
            with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
                future_to_index = {
                    executor.submit(self._run_evaluator, evaluator, chapter, graph): index
                    for index, evaluator in enumerate(self.evaluators)
                }
                for future in as_completed(future_to_index):
                    done(future_to_index[future], future.result())

        return tuple(results[i] for i in range(total))

    # =========================================================================
    # Pipeline
    # =========================================================================

    def _run(self, chapter: Chapter, notify: Callable[[PipelineState, str], None]) -> ChapterAnalysis:
        chapter = sanitize_chapter(chapter)

        notify(PipelineState.EXTRACTING_CONCEPTS, f"{chapter.word_count} words, {len(chapter.sections)} sections")
        graph = self.extract_concepts(chapter)
        logger.info("Concept graph: {} concepts, {} relationships", len(graph.concepts), len(graph.relationships))

        evaluations = self.evaluate_principles(chapter, graph, notify)
        overall = overall_score(evaluations)

        notify(PipelineState.BUILDING_VISUALIZATIONS, "")
        visualizations = AnalysisVisualization(
            concept_map=concept_map(graph),
            cognitive_load_curve=cognitive_load_curve(chapter, graph),
            interleaving_pattern=interleaving_pattern(graph),
            review_schedule=review_schedule(graph),
            principle_scores=score_summary(evaluations, overall),
        )

        notify(PipelineState.FINALIZING, "")
        structure = structure_analysis(chapter)
        metrics = ChapterMetrics(
            total_words=chapter.word_count,
            reading_time_minutes=math.ceil(safe_ratio(chapter.word_count, self.settings.reading_words_per_minute)),
            average_section_length=structure.avg_section_length,
            concept_density=concept_density(len(graph.concepts), chapter.word_count),
        )

        return ChapterAnalysis(
            chapter_id=chapter.id,
            overall_score=overall,
            principles=evaluations,
            concept_analysis=concept_analysis(chapter, graph),
            structure_analysis=structure,
            recommendations=promote_recommendations(evaluations),
            visualizations=visualizations,
            metrics=metrics,
            concept_graph=graph,
            generated_at=datetime.now(timezone.utc),
        )

    def _run_evaluator(
        self,
        evaluator: RegisteredEvaluator,
        chapter: Chapter,
        graph: ConceptGraph,
    ) -> PrincipleEvaluation:
        try:
            return evaluator.evaluate(chapter, graph)
        except Exception as exc:
            if not self.settings.isolate_evaluator_failures:
                raise EvaluatorError(evaluator.principle.value, exc) from exc
            logger.warning("{} evaluator failed, scoring it 0: {}", evaluator.principle.value, exc)
            return unavailable_evaluation(evaluator, exc)
