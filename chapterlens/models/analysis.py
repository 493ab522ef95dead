"""
Aggregate analysis records.

ChapterAnalysis is the terminal, immutable product of one analysis run.
Everything else in this module is a component of it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from chapterlens.models.concepts import ConceptGraph
from chapterlens.models.evaluation import Principle, PrincipleEvaluation, Priority


class Pacing(str, Enum):
    FAST = "fast"
    MODERATE = "moderate"
    SLOW = "slow"


# =============================================================================
# Concept / structure summaries
# =============================================================================


@dataclass(frozen=True)
class ReviewPattern:
    """How one concept is revisited across the chapter."""
    concept_id: str
    review_points: tuple[int, ...]
    ideal_spacing: tuple[int, ...]
    score: float  # mean gap alignment, 0-1


@dataclass(frozen=True)
class ConceptAnalysis:
    total_concepts_identified: int
    core_concept_count: int
    concept_density: float  # concepts per 1000 words
    novel_concepts_per_section: tuple[int, ...]
    review_patterns: tuple[ReviewPattern, ...]
    hierarchy_balance: float
    orphan_concepts: tuple[str, ...]


@dataclass(frozen=True)
class Scaffolding:
    has_introduction: bool = False
    has_summary: bool = False
    has_review: bool = False


@dataclass(frozen=True)
class StructureAnalysis:
    section_count: int
    avg_section_length: float
    section_length_variance: float
    pacing: Pacing
    scaffolding: Scaffolding
    transition_quality: float


@dataclass(frozen=True)
class Recommendation:
    """A suggestion promoted to report level."""
    id: str
    principle: Principle
    priority: Priority
    category: str
    title: str
    description: str
    affected_concepts: tuple[str, ...] = ()
    action_items: tuple[str, ...] = ()
    expected_outcome: str = ""


# =============================================================================
# Visualization payloads
# =============================================================================


@dataclass(frozen=True)
class ConceptNode:
    id: str
    label: str
    importance: str
    size: int
    first_mention: int
    category: Optional[str] = None


@dataclass(frozen=True)
class ConceptLink:
    source: str
    target: str
    type: str
    strength: float


@dataclass(frozen=True)
class ConceptCluster:
    name: str
    concept_ids: tuple[str, ...]


@dataclass(frozen=True)
class ConceptMap:
    nodes: tuple[ConceptNode, ...] = ()
    links: tuple[ConceptLink, ...] = ()
    clusters: tuple[ConceptCluster, ...] = ()


@dataclass(frozen=True)
class LoadFactors:
    novel_concepts: float
    concept_density: float
    sentence_complexity: float
    technical_terms: float


@dataclass(frozen=True)
class CognitiveLoadPoint:
    section_id: str
    heading: str
    position: float  # section start as a fraction of the chapter
    load: float
    factors: LoadFactors


@dataclass(frozen=True)
class BlockingSegment:
    concept_id: str
    start_position: int
    end_position: int
    length: int
    issue: str


@dataclass(frozen=True)
class InterleavingPattern:
    concept_sequence: tuple[str, ...] = ()
    blocking_segments: tuple[BlockingSegment, ...] = ()
    blocking_ratio: float = 0.0
    topic_switches: int = 0
    avg_block_size: float = 0.0
    recommendation: str = ""


@dataclass(frozen=True)
class ConceptReview:
    concept_id: str
    concept_name: str
    mentions: tuple[int, ...]
    gaps: tuple[int, ...]
    average_gap: float
    is_optimal: bool


@dataclass(frozen=True)
class ReviewSchedule:
    concepts: tuple[ConceptReview, ...] = ()
    optimal_spacing: float = 0.0
    current_avg_spacing: float = 0.0


@dataclass(frozen=True)
class PrincipleScoreSummary:
    scores: tuple[tuple[Principle, float], ...] = ()
    overall_weighted_score: int = 0
    strongest_principles: tuple[Principle, ...] = ()
    weakest_principles: tuple[Principle, ...] = ()


@dataclass(frozen=True)
class AnalysisVisualization:
    concept_map: ConceptMap = field(default_factory=ConceptMap)
    cognitive_load_curve: tuple[CognitiveLoadPoint, ...] = ()
    interleaving_pattern: InterleavingPattern = field(default_factory=InterleavingPattern)
    review_schedule: ReviewSchedule = field(default_factory=ReviewSchedule)
    principle_scores: PrincipleScoreSummary = field(default_factory=PrincipleScoreSummary)


@dataclass(frozen=True)
class ChapterMetrics:
    total_words: int
    reading_time_minutes: int
    average_section_length: float
    concept_density: float


# =============================================================================
# Terminal aggregate
# =============================================================================


@dataclass(frozen=True)
class ChapterAnalysis:
    chapter_id: str
    overall_score: int
    principles: tuple[PrincipleEvaluation, ...]
    concept_analysis: ConceptAnalysis
    structure_analysis: StructureAnalysis
    recommendations: tuple[Recommendation, ...]
    visualizations: AnalysisVisualization
    metrics: ChapterMetrics
    concept_graph: ConceptGraph
    generated_at: datetime

    def get_principle(self, principle: Principle | str) -> Optional[PrincipleEvaluation]:
        principle = Principle(principle)
        for evaluation in self.principles:
            if evaluation.principle == principle:
                return evaluation
        return None
