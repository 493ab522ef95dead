"""
Cognitive Load evaluator.

Point budgets:
- average section length   60
- sentence length          25
- segmenting aids          15
"""
from __future__ import annotations

import re

from loguru import logger

from chapterlens.models.chapter import Chapter
from chapterlens.models.concepts import ConceptGraph
from chapterlens.models.evaluation import EvidenceQuality, FindingType, Principle, PrincipleEvaluation, Priority
from chapterlens.principles.base import (
    EvaluationBuilder,
    average_sentence_length,
    compile_table,
    count_matches,
    safe_ratio,
    scaled_threshold,
)

PRINCIPLE = Principle.COGNITIVE_LOAD
WEIGHT = 0.80

SECTION_CEILING = 800
LONG_SECTION = 1000

# (upper bound on average section words, points)
SECTION_LENGTH_BANDS = ((600, 60), (800, 45), (1000, 25))
SECTION_LENGTH_FLOOR = 10

SEGMENTING_PATTERNS = compile_table([
    (r"^\s*[-*+]\s+\S", "bullet"),
    (r"^\s*\d+[.)]\s+\S", "numbered_item"),
    (r"^#{2,6}\s+\S", "subheading"),
    (r"\bstep \d+\b", "step"),
], flags=re.IGNORECASE | re.MULTILINE)


def section_length_points(average_words: float) -> float:
    for bound, points in SECTION_LENGTH_BANDS:
        if average_words < bound:
            return points
    return SECTION_LENGTH_FLOOR


def sentence_length_points(average_words: float) -> tuple[float, EvidenceQuality]:
    if average_words <= 0:
        return 0, EvidenceQuality.WEAK
    if 12 <= average_words <= 20:
        return 25, EvidenceQuality.STRONG
    if average_words <= 25:
        return 18, EvidenceQuality.MODERATE
    if average_words <= 30:
        return 10, EvidenceQuality.WEAK
    return 5, EvidenceQuality.WEAK


def evaluate(chapter: Chapter, graph: ConceptGraph) -> PrincipleEvaluation:
    builder = EvaluationBuilder(PRINCIPLE, WEIGHT)
    sections = chapter.sections

    # Section length
    average_section = safe_ratio(sum(s.word_count for s in sections), len(sections))
    if sections:
        points = section_length_points(average_section)
        quality = (
            EvidenceQuality.STRONG if average_section < 600
            else EvidenceQuality.MODERATE if average_section < SECTION_CEILING
            else EvidenceQuality.WEAK
        )
        builder.add_points(points, 60)
    else:
        quality = EvidenceQuality.WEAK
    builder.add_evidence("average_section_words", round(average_section, 1), quality, SECTION_CEILING)

    long_sections = [s for s in sections if s.word_count > LONG_SECTION]
    if long_sections:
        builder.add_finding(
            FindingType.WARNING,
            f"{len(long_sections)} sections run over {LONG_SECTION} words",
            evidence=", ".join(s.heading for s in long_sections[:5]),
        )
        for section in long_sections[:3]:
            builder.suggest(
                Priority.MEDIUM,
                f"Split '{section.heading}'",
                f"This section has {section.word_count} words. Break it into shorter sections of at most "
                f"{SECTION_CEILING} words, each with its own heading.",
                position=section.start_position,
            )
    elif sections and average_section < 600:
        builder.add_finding(FindingType.POSITIVE, "Sections are short enough to process in one sitting")

    # Sentence length
    average_sentence = average_sentence_length(chapter.content)
    sentence_points, sentence_quality = sentence_length_points(average_sentence)
    builder.add_evidence("average_sentence_words", round(average_sentence, 1), sentence_quality, 20)
    builder.add_points(sentence_points, 25)
    if average_sentence > 25:
        builder.add_finding(
            FindingType.WARNING,
            f"Sentences average {average_sentence:.0f} words",
        )
        builder.suggest(
            Priority.LOW,
            "Shorten long sentences",
            "Split sentences over 25 words so readers can hold each idea in working memory.",
        )

    # Segmenting aids
    aids = count_matches(SEGMENTING_PATTERNS, chapter.content)
    aid_threshold = scaled_threshold(len(sections), 2)
    builder.add_count("segmenting_aids", aids, aid_threshold)
    builder.add_fraction(safe_ratio(aids, aid_threshold), 15)

    if not sections:
        builder.add_finding(FindingType.WARNING, "Chapter has no sections to segment the material")

    evaluation = builder.build()
    logger.debug(
        "cognitive_load score={} avg_section={:.0f} avg_sentence={:.1f}",
        evaluation.score, average_section, average_sentence,
    )
    return evaluation
