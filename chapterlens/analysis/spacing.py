"""
Review schedule and per-concept review patterns.
"""
from __future__ import annotations

import statistics

from chapterlens.models.analysis import ConceptReview, ReviewPattern, ReviewSchedule
from chapterlens.models.concepts import ConceptGraph
from chapterlens.principles.spaced_repetition import TARGET_GAPS, alignment_score, mention_gaps


def closest_target(gap: int) -> int:
    """The target spacing a gap aligns with best."""
    return max(TARGET_GAPS, key=lambda target: (gap_alignment_to(gap, target), -target))


def gap_alignment_to(gap: int, target: int) -> float:
    if gap <= 0:
        return 0.0
    return min(gap, target) / max(gap, target)


def review_patterns(graph: ConceptGraph) -> tuple[ReviewPattern, ...]:
    patterns = []
    for concept in graph.concepts:
        positions = concept.mention_positions
        if len(positions) < 2:
            continue
        gaps = mention_gaps(positions)
        patterns.append(
            ReviewPattern(
                concept_id=concept.id,
                review_points=tuple(positions),
                ideal_spacing=tuple(closest_target(g) for g in gaps),
                score=round(alignment_score(gaps), 4),
            )
        )
    return tuple(patterns)


def review_schedule(graph: ConceptGraph) -> ReviewSchedule:
    """
    Gap statistics for every concept mentioned at least twice.

    A concept's spacing counts as optimal when the variance of its gaps is
    below the square of its mean gap.
    """
    reviews = []
    for concept in graph.concepts:
        positions = concept.mention_positions
        if len(positions) < 2:
            continue
        gaps = mention_gaps(positions)
        average = statistics.fmean(gaps)
        variance = statistics.pvariance(gaps)
        reviews.append(
            ConceptReview(
                concept_id=concept.id,
                concept_name=concept.name,
                mentions=tuple(positions),
                gaps=tuple(gaps),
                average_gap=round(average, 2),
                is_optimal=variance < average ** 2,
            )
        )

    if not reviews:
        return ReviewSchedule()

    averages = [r.average_gap for r in reviews]
    return ReviewSchedule(
        concepts=tuple(reviews),
        optimal_spacing=round(statistics.median(averages), 2),
        current_avg_spacing=round(statistics.fmean(averages), 2),
    )
