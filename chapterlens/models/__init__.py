"""
Immutable data model for chapter analysis.
"""

from chapterlens.models.analysis import (
    AnalysisVisualization,
    BlockingSegment,
    ChapterAnalysis,
    ChapterMetrics,
    CognitiveLoadPoint,
    ConceptAnalysis,
    ConceptCluster,
    ConceptLink,
    ConceptMap,
    ConceptNode,
    ConceptReview,
    InterleavingPattern,
    LoadFactors,
    Pacing,
    PrincipleScoreSummary,
    Recommendation,
    ReviewPattern,
    ReviewSchedule,
    Scaffolding,
    StructureAnalysis,
)
from chapterlens.models.chapter import Chapter, ChapterMetadata, Section
from chapterlens.models.concepts import (
    Concept,
    ConceptGraph,
    ConceptHierarchy,
    ConceptRelationship,
    ImportanceTier,
    Mention,
    RelationshipType,
)
from chapterlens.models.evaluation import (
    Evidence,
    EvidenceQuality,
    EvidenceType,
    Finding,
    FindingType,
    Principle,
    PrincipleEvaluation,
    Priority,
    Suggestion,
)

__all__ = [
    "AnalysisVisualization",
    "BlockingSegment",
    "Chapter",
    "ChapterAnalysis",
    "ChapterMetadata",
    "ChapterMetrics",
    "CognitiveLoadPoint",
    "Concept",
    "ConceptAnalysis",
    "ConceptCluster",
    "ConceptGraph",
    "ConceptHierarchy",
    "ConceptLink",
    "ConceptMap",
    "ConceptNode",
    "ConceptRelationship",
    "ConceptReview",
    "Evidence",
    "EvidenceQuality",
    "EvidenceType",
    "Finding",
    "FindingType",
    "ImportanceTier",
    "InterleavingPattern",
    "LoadFactors",
    "Mention",
    "Pacing",
    "Principle",
    "PrincipleEvaluation",
    "PrincipleScoreSummary",
    "Priority",
    "Recommendation",
    "RelationshipType",
    "ReviewPattern",
    "ReviewSchedule",
    "Scaffolding",
    "Section",
    "StructureAnalysis",
    "Suggestion",
]
