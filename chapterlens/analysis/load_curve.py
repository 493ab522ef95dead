"""
Cognitive-load curve.

Per section, a weighted sum of four factors, each normalised to [0, 1]:
- novelty: concepts first mentioned in the section, over the chapter maximum
- density: concept mentions per 100 words, over the densest section
- sentence complexity: average sentence length mapped onto SENTENCE_BAND
- technicality: share of technical tokens, over TECHNICAL_CEILING
"""
from __future__ import annotations

from chapterlens.models.analysis import CognitiveLoadPoint, LoadFactors
from chapterlens.models.chapter import Chapter, Section
from chapterlens.models.concepts import ConceptGraph
from chapterlens.principles.base import average_sentence_length, safe_ratio, technical_density

NOVELTY_WEIGHT = 0.30
DENSITY_WEIGHT = 0.25
SENTENCE_WEIGHT = 0.25
TECHNICAL_WEIGHT = 0.20

SENTENCE_BAND = (10, 30)
TECHNICAL_CEILING = 0.20


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _in_section(position: int, section: Section) -> bool:
    return section.start_position <= position < section.end_position


def novel_concepts_per_section(chapter: Chapter, graph: ConceptGraph) -> list[int]:
    """Number of concepts whose first mention falls inside each section."""
    return [
        sum(1 for c in graph.concepts if _in_section(c.first_mention_position, section))
        for section in chapter.sections
    ]


def mention_density(section: Section, graph: ConceptGraph) -> float:
    """Concept mentions per 100 words of the section."""
    mentions = sum(
        1 for c in graph.concepts for p in c.mention_positions if _in_section(p, section)
    )
    return safe_ratio(mentions, section.word_count) * 100


def sentence_complexity(text: str) -> float:
    low, high = SENTENCE_BAND
    average = average_sentence_length(text)
    if average <= 0:
        return 0.0
    return _clamp((average - low) / (high - low))


def cognitive_load_curve(chapter: Chapter, graph: ConceptGraph) -> tuple[CognitiveLoadPoint, ...]:
    if not chapter.sections:
        return ()

    novel = novel_concepts_per_section(chapter, graph)
    densities = [mention_density(s, graph) for s in chapter.sections]
    max_novel = max(novel)
    max_density = max(densities)
    length = len(chapter.content)

    points = []
    for section, novel_count, density in zip(chapter.sections, novel, densities):
        factors = LoadFactors(
            novel_concepts=round(safe_ratio(novel_count, max_novel), 4),
            concept_density=round(safe_ratio(density, max_density), 4),
            sentence_complexity=round(sentence_complexity(section.body), 4),
            technical_terms=round(_clamp(technical_density(section.body) / TECHNICAL_CEILING), 4),
        )
        load = (
            factors.novel_concepts * NOVELTY_WEIGHT
            + factors.concept_density * DENSITY_WEIGHT
            + factors.sentence_complexity * SENTENCE_WEIGHT
            + factors.technical_terms * TECHNICAL_WEIGHT
        )
        points.append(
            CognitiveLoadPoint(
                section_id=section.id,
                heading=section.heading,
                position=round(safe_ratio(section.start_position, length), 4),
                load=round(_clamp(load), 4),
                factors=factors,
            )
        )
    return tuple(points)
