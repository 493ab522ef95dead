"""
Dual Coding evaluator.

Point budgets:
- visual references             60
- visual-opportunity coverage   40
"""
from __future__ import annotations

from loguru import logger

from chapterlens.models.chapter import Chapter
from chapterlens.models.concepts import ConceptGraph
from chapterlens.models.evaluation import EvidenceQuality, FindingType, Principle, PrincipleEvaluation, Priority
from chapterlens.principles.base import EvaluationBuilder, count_matches, grade, safe_ratio, scaled_threshold
from chapterlens.principles.visuals import (
    VISUAL_REFERENCE_PATTERNS,
    detect_visual_opportunities,
    paragraphs,
)

PRINCIPLE = Principle.DUAL_CODING
WEIGHT = 0.80

MAX_POSITIONED_SUGGESTIONS = 5


def evaluate(chapter: Chapter, graph: ConceptGraph) -> PrincipleEvaluation:
    text = chapter.content
    builder = EvaluationBuilder(PRINCIPLE, WEIGHT)

    references = count_matches(VISUAL_REFERENCE_PATTERNS, text)
    threshold = scaled_threshold(len(chapter.sections), 2)
    builder.add_count("visual_references", references, threshold)
    builder.add_fraction(safe_ratio(references, threshold), 60)

    opportunities = detect_visual_opportunities(text)
    uncovered = [o for o in opportunities if not o.covered]
    has_paragraphs = bool(paragraphs(text))

    if opportunities:
        coverage = 1 - len(uncovered) / len(opportunities)
        builder.add_evidence("visual_opportunity_coverage", round(coverage, 3), grade(coverage, 0.7, 0.4), 0.7)
        builder.add_fraction(coverage, 40)
    elif has_paragraphs:
        # Nothing calls for a visual
        builder.add_evidence("visual_opportunity_coverage", 1.0, EvidenceQuality.MODERATE, 0.7)
        builder.add_points(40, 40)
    else:
        builder.add_evidence("visual_opportunity_coverage", 0.0, EvidenceQuality.WEAK, 0.7)

    if references == 0:
        builder.add_finding(
            FindingType.CRITICAL,
            "No diagrams, figures or other visuals are referenced",
            evidence=f"0 visual references (expected {threshold})",
        )
    elif references < threshold:
        builder.add_finding(
            FindingType.WARNING,
            f"{references} visual references across {len(chapter.sections)} sections",
        )
    else:
        builder.add_finding(FindingType.POSITIVE, f"{references} visual references pair words with images")

    if uncovered:
        builder.add_finding(
            FindingType.WARNING,
            f"{len(uncovered)} passages would benefit from a visual",
            evidence=", ".join(sorted({o.kind.value for o in uncovered})),
        )
    for opportunity in uncovered[:MAX_POSITIONED_SUGGESTIONS]:
        builder.suggest(
            Priority.MEDIUM,
            f"Add a visual ({opportunity.kind.value.replace('_', ' ')})",
            opportunity.reason,
            implementation=f"Place it next to: \"{opportunity.excerpt}\"",
            expected_impact="Words paired with images are encoded through two channels",
            position=opportunity.position,
        )

    evaluation = builder.build()
    logger.debug(
        "dual_coding score={} references={} opportunities={} uncovered={}",
        evaluation.score, references, len(opportunities), len(uncovered),
    )
    return evaluation
