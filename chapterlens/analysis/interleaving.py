"""
Interleaving pattern for the report, built on the evaluator's run detection.
"""
from __future__ import annotations

from chapterlens.models.analysis import BlockingSegment, InterleavingPattern
from chapterlens.models.concepts import ConceptGraph
from chapterlens.principles.base import safe_ratio
from chapterlens.principles.interleaving import (
    MIN_MENTIONS,
    blocking_ratio,
    concept_runs,
    mention_events,
    topic_switches,
)

HIGH_BLOCKING = 0.5
MODERATE_BLOCKING = 0.3


def interleaving_recommendation(ratio: float, mention_count: int) -> str:
    if mention_count < MIN_MENTIONS:
        return f"Insufficient data: fewer than {MIN_MENTIONS} concept mentions to assess interleaving."
    if ratio > HIGH_BLOCKING:
        return "High blocking: concepts are covered one at a time. Alternate between related concepts."
    if ratio > MODERATE_BLOCKING:
        return "Moderate blocking: some concepts are repeated in long runs. Mix in related ideas."
    return "Good interleaving: concepts are revisited in a mixed order."


def interleaving_pattern(graph: ConceptGraph) -> InterleavingPattern:
    events = mention_events(graph)
    runs = concept_runs(events)
    ratio = blocking_ratio(runs)

    segments = []
    for run in runs:
        if not run.is_blocking:
            continue
        concept = graph.get(run.concept_id)
        name = concept.name if concept else run.concept_id
        segments.append(
            BlockingSegment(
                concept_id=run.concept_id,
                start_position=run.start_position,
                end_position=run.end_position,
                length=run.length,
                issue=f"'{name}' is mentioned {run.length} times in a row",
            )
        )

    return InterleavingPattern(
        concept_sequence=tuple(cid for _, cid in events),
        blocking_segments=tuple(segments),
        blocking_ratio=round(ratio, 4),
        topic_switches=topic_switches(events),
        avg_block_size=round(safe_ratio(sum(r.length for r in runs), len(runs)), 4),
        recommendation=interleaving_recommendation(ratio, len(events)),
    )
