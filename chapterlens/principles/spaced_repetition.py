"""
Spaced Repetition evaluator.

Character offsets stand in for time: the gap between two mentions of a
concept is measured in characters. The targets below are calibrated
heuristics, not a temporal model.

Point budgets:
- gap alignment with target spacing   35
- forgetting prevention               20
- distributed (not massed) mentions   20
- mentions per concept                15
- share of concepts revisited         10
"""
from __future__ import annotations

from typing import Sequence

from loguru import logger

from chapterlens.models.chapter import Chapter
from chapterlens.models.concepts import ConceptGraph, ImportanceTier
from chapterlens.models.evaluation import (
    EvidenceQuality,
    EvidenceType,
    FindingType,
    Principle,
    PrincipleEvaluation,
    Priority,
)
from chapterlens.principles.base import EvaluationBuilder, grade, inverse_grade, safe_ratio

PRINCIPLE = Principle.SPACED_REPETITION
WEIGHT = 0.90

TARGET_GAPS = (500, 2000, 5000)  # short / medium / long review spacing
FORGETTING_THRESHOLD = 3000
MASSED_GAP = 1000
MASSED_RUN = 3
IDEAL_MENTIONS = (2, 5)


def mention_gaps(positions: Sequence[int]) -> list[int]:
    """Distances between successive mentions."""
    return [b - a for a, b in zip(positions, positions[1:])]


def gap_alignment(gap: int) -> float:
    """Best min/max ratio of a gap against the target spacings."""
    if gap <= 0:
        return 0.0
    return max(min(gap, target) / max(gap, target) for target in TARGET_GAPS)


def alignment_score(gaps: Sequence[int]) -> float:
    return safe_ratio(sum(gap_alignment(g) for g in gaps), len(gaps))


def forgetting_prevention(gaps: Sequence[int]) -> float:
    """Share of gaps short enough to catch the reader before they forget."""
    return safe_ratio(sum(1 for g in gaps if g <= FORGETTING_THRESHOLD), len(gaps))


def massed_mentions(positions: Sequence[int]) -> int:
    """Mentions inside runs of at least MASSED_RUN mentions spaced <= MASSED_GAP apart."""
    massed = 0
    run = 1
    for gap in mention_gaps(positions):
        if gap <= MASSED_GAP:
            run += 1
            continue
        if run >= MASSED_RUN:
            massed += run
        run = 1
    if run >= MASSED_RUN:
        massed += run
    return massed


def evaluate(chapter: Chapter, graph: ConceptGraph) -> PrincipleEvaluation:
    builder = EvaluationBuilder(PRINCIPLE, WEIGHT)

    all_gaps: list[int] = []
    massed = 0
    revisited = 0
    for concept in graph.concepts:
        positions = concept.mention_positions
        all_gaps.extend(mention_gaps(positions))
        massed += massed_mentions(positions)
        if len(positions) >= 2:
            revisited += 1

    total_mentions = graph.total_mentions
    concept_count = len(graph.concepts)

    # Alignment with target spacing
    alignment = alignment_score(all_gaps)
    builder.add_evidence("spacing_alignment", alignment, grade(alignment, 0.7, 0.4), 0.7)
    builder.add_fraction(alignment, 35)

    # Forgetting prevention
    prevention = forgetting_prevention(all_gaps)
    builder.add_evidence("forgetting_prevention", prevention, grade(prevention, 0.7, 0.4), 0.7)
    builder.add_fraction(prevention, 20)

    # Massed vs distributed
    massed_ratio = safe_ratio(massed, total_mentions)
    if total_mentions:
        builder.add_evidence("massed_ratio", massed_ratio, inverse_grade(massed_ratio, 0.2, 0.4), 0.4)
        builder.add_fraction(1 - massed_ratio, 20)
    else:
        builder.add_evidence("massed_ratio", 0.0, EvidenceQuality.WEAK, 0.4)

    # Mentions per concept
    average_mentions = safe_ratio(total_mentions, concept_count)
    low, high = IDEAL_MENTIONS
    if low <= average_mentions <= high:
        mentions_quality, mention_points = EvidenceQuality.STRONG, 15
    elif average_mentions > high:
        mentions_quality, mention_points = EvidenceQuality.MODERATE, 10
    elif average_mentions > 0:
        mentions_quality, mention_points = EvidenceQuality.WEAK, 5
    else:
        mentions_quality, mention_points = EvidenceQuality.WEAK, 0
    builder.add_evidence("average_mentions_per_concept", round(average_mentions, 2), mentions_quality, low)
    builder.add_points(mention_points, 15)

    # Revisited concepts
    revisited_share = safe_ratio(revisited, concept_count)
    builder.add_evidence(
        "revisited_concepts", revisited, grade(revisited_share, 0.6, 0.3), concept_count or None,
        EvidenceType.COUNT,
    )
    builder.add_fraction(revisited_share, 10)

    # Findings
    if not all_gaps:
        builder.add_finding(
            FindingType.CRITICAL,
            "No concept is revisited after it is introduced",
            evidence=f"{concept_count} concepts, {total_mentions} mentions",
        )
    elif alignment < 0.4:
        builder.add_finding(
            FindingType.WARNING,
            f"Revisits are poorly spaced (alignment {alignment:.2f})",
            evidence=f"{len(all_gaps)} gaps measured",
        )
    elif alignment >= 0.7:
        builder.add_finding(FindingType.POSITIVE, f"Concept revisits are well spaced (alignment {alignment:.2f})")

    if total_mentions and massed_ratio > 0.4:
        builder.add_finding(
            FindingType.WARNING,
            f"{massed_ratio:.0%} of mentions are massed together",
            evidence=f"{massed}/{total_mentions} mentions in tight clusters",
        )
        builder.suggest(
            Priority.MEDIUM,
            "Spread out clustered mentions",
            "Several concepts are repeated many times in quick succession and then dropped. "
            "Move some of those repetitions to later sections.",
            expected_impact="Distributed review improves long-term retention",
        )

    unrevisited_core = sorted(
        c.name for c in graph.concepts_in_tier(ImportanceTier.CORE) if len(c.mentions) < 2
    )
    if unrevisited_core:
        builder.suggest(
            Priority.HIGH,
            "Revisit core concepts later in the chapter",
            "Core concepts mentioned only once are likely to be forgotten. "
            "Bring them back in a later section, example or review question.",
            implementation="Reference each core concept again at least one section after it is introduced.",
            related_concepts=unrevisited_core[:5],
        )

    evaluation = builder.build()
    logger.debug("spaced_repetition score={} gaps={} alignment={:.3f}", evaluation.score, len(all_gaps), alignment)
    return evaluation
