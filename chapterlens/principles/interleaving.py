"""
Interleaving evaluator.

Walks the position-ordered mention sequence. A run is a maximal stretch of
consecutive mentions of one concept; it breaks on a different concept or on
a positional gap larger than RUN_GAP (a revisit after a long gap is spacing,
not blocking). Runs of BLOCKING_RUN or more mentions are blocking segments.

Point budgets:
- low blocking ratio       50
- topic switch rate        20
- per-section diversity    30
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from loguru import logger

from chapterlens.models.chapter import Chapter
from chapterlens.models.concepts import ConceptGraph
from chapterlens.models.evaluation import (
    EvidenceQuality,
    EvidenceType,
    FindingType,
    Principle,
    PrincipleEvaluation,
    Priority,
)
from chapterlens.principles.base import EvaluationBuilder, grade, inverse_grade, safe_ratio

PRINCIPLE = Principle.INTERLEAVING
WEIGHT = 0.85

BLOCKING_RUN = 3
RUN_GAP = 1000
TARGET_SECTION_DIVERSITY = 3
MIN_MENTIONS = 5
MAX_SEGMENT_SUGGESTIONS = 3


@dataclass(frozen=True)
class Run:
    """Consecutive mentions of one concept."""
    concept_id: str
    start_position: int
    end_position: int
    length: int

    @property
    def is_blocking(self) -> bool:
        return self.length >= BLOCKING_RUN


def mention_events(graph: ConceptGraph) -> list[tuple[int, str]]:
    """Every mention as (position, concept id), ordered by position then id."""
    return sorted(
        (position, concept.id)
        for concept in graph.concepts
        for position in concept.mention_positions
    )


def concept_runs(events: Sequence[tuple[int, str]]) -> list[Run]:
    runs: list[Run] = []
    if not events:
        return runs

    start, current = events[0]
    last = start
    length = 1
    for position, concept_id in events[1:]:
        if concept_id == current and position - last <= RUN_GAP:
            length += 1
        else:
            runs.append(Run(current, start, last, length))
            start, current, length = position, concept_id, 1
        last = position
    runs.append(Run(current, start, last, length))
    return runs


def blocking_ratio(runs: Sequence[Run]) -> float:
    """Mentions inside blocking runs over all mentions."""
    total = sum(r.length for r in runs)
    return safe_ratio(sum(r.length for r in runs if r.is_blocking), total)


def topic_switches(events: Sequence[tuple[int, str]]) -> int:
    return sum(1 for (_, a), (_, b) in zip(events, events[1:]) if a != b)


def section_diversity(chapter: Chapter, events: Sequence[tuple[int, str]]) -> float:
    """Distinct concepts per section over the target, capped at 1, averaged."""
    if not chapter.sections:
        return 0.0
    scores = []
    for section in chapter.sections:
        distinct = {cid for pos, cid in events if section.start_position <= pos < section.end_position}
        scores.append(min(len(distinct) / TARGET_SECTION_DIVERSITY, 1.0))
    return sum(scores) / len(scores)


def evaluate(chapter: Chapter, graph: ConceptGraph) -> PrincipleEvaluation:
    builder = EvaluationBuilder(PRINCIPLE, WEIGHT)

    events = mention_events(graph)
    runs = concept_runs(events)
    ratio = blocking_ratio(runs)
    switches = topic_switches(events)
    switch_rate = safe_ratio(switches, len(events) - 1) if len(events) > 1 else 0.0
    diversity = section_diversity(chapter, events)

    if events:
        builder.add_evidence("blocking_ratio", round(ratio, 3), inverse_grade(ratio, 0.3, 0.5), 0.3)
        builder.add_fraction(1 - ratio, 50)
    else:
        builder.add_evidence("blocking_ratio", 0.0, EvidenceQuality.WEAK, 0.3)

    builder.add_evidence("topic_switch_rate", round(switch_rate, 3), grade(switch_rate, 0.6, 0.3), 0.5)
    builder.add_fraction(switch_rate, 20)

    builder.add_evidence("section_diversity", round(diversity, 3), grade(diversity, 0.8, 0.5), 1.0)
    builder.add_fraction(diversity, 30)

    builder.add_evidence("mention_count", len(events), grade(len(events), MIN_MENTIONS, 1), MIN_MENTIONS, EvidenceType.COUNT)

    if len(events) < MIN_MENTIONS:
        builder.add_finding(
            FindingType.WARNING,
            "Too few concept mentions to judge interleaving",
            evidence=f"{len(events)} mentions (need {MIN_MENTIONS})",
        )
    elif ratio > 0.5:
        builder.add_finding(
            FindingType.CRITICAL,
            f"{ratio:.0%} of mentions are blocked: concepts are covered one at a time",
            evidence=f"{sum(1 for r in runs if r.is_blocking)} blocking segments",
        )
    elif ratio > 0.3:
        builder.add_finding(
            FindingType.WARNING,
            f"Moderate blocking ({ratio:.0%} of mentions)",
        )
    else:
        builder.add_finding(FindingType.POSITIVE, "Concepts are well interleaved")

    blocking = sorted((r for r in runs if r.is_blocking), key=lambda r: (-r.length, r.start_position))
    for run in blocking[:MAX_SEGMENT_SUGGESTIONS]:
        concept = graph.get(run.concept_id)
        name = concept.name if concept else run.concept_id
        builder.suggest(
            Priority.HIGH if ratio > 0.5 else Priority.MEDIUM,
            f"Interleave '{name}' with related concepts",
            f"'{name}' is mentioned {run.length} times in a row. Mix in related concepts "
            "or contrast it with another idea before continuing.",
            expected_impact="Interleaving improves discrimination between concepts",
            related_concepts=(name,),
            position=run.start_position,
        )

    if chapter.sections and diversity < 0.5:
        builder.suggest(
            Priority.LOW,
            "Mix more concepts within each section",
            f"Sections touch few distinct concepts. Aim for at least {TARGET_SECTION_DIVERSITY} per section.",
        )

    evaluation = builder.build()
    logger.debug("interleaving score={} blocking={:.2f} switches={}", evaluation.score, ratio, switches)
    return evaluation
