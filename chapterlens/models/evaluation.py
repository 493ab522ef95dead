"""
Evaluation records produced by the principle evaluators.

Three tiers of output per principle:
- Evidence: a raw measurement (count or metric) with a quality judgment
- Finding: a human-readable judgment derived from evidence
- Suggestion: an actionable remediation tied to one principle
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Principle(str, Enum):
    """The ten learning principles, in stable report order."""
    DEEP_PROCESSING = "deep_processing"
    SPACED_REPETITION = "spaced_repetition"
    RETRIEVAL_PRACTICE = "retrieval_practice"
    INTERLEAVING = "interleaving"
    DUAL_CODING = "dual_coding"
    GENERATIVE_LEARNING = "generative_learning"
    METACOGNITION = "metacognition"
    SCHEMA_BUILDING = "schema_building"
    COGNITIVE_LOAD = "cognitive_load"
    EMOTION_RELEVANCE = "emotion_relevance"

    @property
    def display_name(self) -> str:
        return PRINCIPLE_DISPLAY_NAMES[self]


PRINCIPLE_DISPLAY_NAMES = {
    Principle.DEEP_PROCESSING: "Deep Processing & Elaboration",
    Principle.SPACED_REPETITION: "Spaced Repetition",
    Principle.RETRIEVAL_PRACTICE: "Retrieval Practice",
    Principle.INTERLEAVING: "Interleaving",
    Principle.DUAL_CODING: "Dual Coding",
    Principle.GENERATIVE_LEARNING: "Generative Learning",
    Principle.METACOGNITION: "Metacognition",
    Principle.SCHEMA_BUILDING: "Schema Building",
    Principle.COGNITIVE_LOAD: "Cognitive Load",
    Principle.EMOTION_RELEVANCE: "Emotion & Relevance",
}


class EvidenceType(str, Enum):
    METRIC = "metric"
    COUNT = "count"


class EvidenceQuality(str, Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"


class FindingType(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    POSITIVE = "positive"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort key: high first."""
        return {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}[self]


@dataclass(frozen=True)
class Evidence:
    """One quantitative observation."""
    type: EvidenceType
    metric: str
    value: float
    quality: EvidenceQuality
    threshold: Optional[float] = None


@dataclass(frozen=True)
class Finding:
    """Commentary derived from evidence. Severity is 0 for positive findings."""
    type: FindingType
    message: str
    severity: float
    evidence: str = ""


@dataclass(frozen=True)
class Suggestion:
    """A remediation for one principle."""
    id: str
    principle: Principle
    priority: Priority
    title: str
    description: str
    implementation: str = ""
    expected_impact: str = ""
    related_concepts: tuple[str, ...] = ()
    examples: tuple[str, ...] = ()
    position: Optional[int] = None  # character offset the suggestion anchors to


@dataclass(frozen=True)
class PrincipleEvaluation:
    """Result of one evaluator invocation."""
    principle: Principle
    score: float
    weight: float
    findings: tuple[Finding, ...] = field(default_factory=tuple)
    suggestions: tuple[Suggestion, ...] = field(default_factory=tuple)
    evidence: tuple[Evidence, ...] = field(default_factory=tuple)

    @property
    def critical_findings(self) -> list[Finding]:
        return [f for f in self.findings if f.type == FindingType.CRITICAL]

    def get_evidence(self, metric: str) -> Optional[Evidence]:
        """Look up evidence by metric name."""
        for item in self.evidence:
            if item.metric == metric:
                return item
        return None
