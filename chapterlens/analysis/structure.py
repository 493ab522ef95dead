"""
Concept and structure summaries for the report.
"""
from __future__ import annotations

import re
import statistics

from chapterlens.analysis.load_curve import novel_concepts_per_section
from chapterlens.analysis.spacing import review_patterns
from chapterlens.models.analysis import ConceptAnalysis, Pacing, Scaffolding, StructureAnalysis
from chapterlens.models.chapter import Chapter, Section
from chapterlens.models.concepts import ConceptGraph
from chapterlens.principles.base import safe_ratio
from chapterlens.principles.schema_building import hierarchy_balance, orphan_concepts

FAST_PACING_WORDS = 300
MODERATE_PACING_WORDS = 800
TRANSITION_WINDOW = 200

INTRODUCTION_HEADING = re.compile(r"\b(?:introduction|intro|overview|getting started|preface)\b", re.IGNORECASE)
SUMMARY_HEADING = re.compile(r"\b(?:summary|conclusions?|key takeaways?|wrap[- ]up|recap)\b", re.IGNORECASE)
REVIEW_HEADING = re.compile(r"\b(?:review|practice|exercises?|self[- ]check|quiz|questions)\b", re.IGNORECASE)

TRANSITION_PATTERN = re.compile(
    r"\b(?:now that|building on|next,|in the previous|as we saw|having (?:seen|learned|covered)|"
    r"let's (?:now|turn)|turning to|moving on|in contrast|similarly|furthermore|however|"
    r"with that in mind|so far)\b",
    re.IGNORECASE,
)


def concept_density(concept_count: int, word_count: int) -> float:
    """Concepts per 1000 words."""
    return round(safe_ratio(concept_count, word_count) * 1000, 2)


def concept_analysis(chapter: Chapter, graph: ConceptGraph) -> ConceptAnalysis:
    return ConceptAnalysis(
        total_concepts_identified=len(graph.concepts),
        core_concept_count=len(graph.hierarchy.core),
        concept_density=concept_density(len(graph.concepts), chapter.word_count),
        novel_concepts_per_section=tuple(novel_concepts_per_section(chapter, graph)),
        review_patterns=review_patterns(graph),
        hierarchy_balance=round(hierarchy_balance(graph), 4),
        orphan_concepts=tuple(orphan_concepts(graph)),
    )


def pacing_for(average_section_words: float) -> Pacing:
    if average_section_words < FAST_PACING_WORDS:
        return Pacing.FAST
    if average_section_words <= MODERATE_PACING_WORDS:
        return Pacing.MODERATE
    return Pacing.SLOW


def scaffolding_for(sections: tuple[Section, ...]) -> Scaffolding:
    headings = [s.heading for s in sections]
    return Scaffolding(
        has_introduction=any(INTRODUCTION_HEADING.search(h) for h in headings),
        has_summary=any(SUMMARY_HEADING.search(h) for h in headings),
        has_review=any(REVIEW_HEADING.search(h) for h in headings),
    )


def section_opening(section: Section) -> str:
    """The first TRANSITION_WINDOW characters of a section body, heading line excluded."""
    return section.body.lstrip()[:TRANSITION_WINDOW]


def transition_quality(sections: tuple[Section, ...]) -> float:
    """Share of sections after the first that open with a transition phrase."""
    later = sections[1:]
    return safe_ratio(sum(1 for s in later if TRANSITION_PATTERN.search(section_opening(s))), len(later))


def structure_analysis(chapter: Chapter) -> StructureAnalysis:
    lengths = [s.word_count for s in chapter.sections]
    average = statistics.fmean(lengths) if lengths else 0.0
    variance = statistics.pvariance(lengths) if lengths else 0.0
    return StructureAnalysis(
        section_count=len(chapter.sections),
        avg_section_length=round(average, 2),
        section_length_variance=round(variance, 2),
        pacing=pacing_for(average),
        scaffolding=scaffolding_for(chapter.sections),
        transition_quality=round(transition_quality(chapter.sections), 4),
    )
