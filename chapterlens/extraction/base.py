"""
Concept extractor contract.

An extractor turns chapter text plus section boundaries into a ConceptGraph.
Guarantees every implementation must keep:
- mention positions are valid offsets into the text, strictly increasing per concept
- the hierarchy covers exactly the concept ids, with no overlap
- len(sequence) == total mention count
- empty or too-short text yields an empty graph; extract() never raises for it
"""
from __future__ import annotations

from typing import Iterable, Protocol, Sequence, runtime_checkable

from chapterlens.errors import ExtractionError
from chapterlens.models.chapter import Section
from chapterlens.models.concepts import Concept, ConceptGraph, ConceptHierarchy, ImportanceTier


@runtime_checkable
class ConceptExtractor(Protocol):
    """Anything that can build a concept graph for a chapter."""

    def extract(self, text: str, sections: Sequence[Section]) -> ConceptGraph:
        ...


def empty_graph() -> ConceptGraph:
    return ConceptGraph()


def hierarchy_for(concepts: Iterable[Concept]) -> ConceptHierarchy:
    """Partition concept ids by the tier stored on each concept."""
    tiers: dict[ImportanceTier, list[str]] = {tier: [] for tier in ImportanceTier}
    for concept in concepts:
        tiers[concept.importance].append(concept.id)
    return ConceptHierarchy(
        core=tuple(tiers[ImportanceTier.CORE]),
        supporting=tuple(tiers[ImportanceTier.SUPPORTING]),
        detail=tuple(tiers[ImportanceTier.DETAIL]),
    )


def sequence_for(concepts: Iterable[Concept]) -> tuple[str, ...]:
    """Flatten all mentions into one list of concept ids ordered by position."""
    events = [
        (mention.position, concept.id)
        for concept in concepts
        for mention in concept.mentions
    ]
    events.sort()
    return tuple(concept_id for _, concept_id in events)


def check_graph(graph: ConceptGraph, text_length: int | None = None) -> list[str]:
    """
    Return a list of invariant violations (empty when the graph is valid).
    """
    problems: list[str] = []
    ids = [c.id for c in graph.concepts]

    if len(ids) != len(set(ids)):
        problems.append("concept ids are not unique")

    for concept in graph.concepts:
        positions = concept.mention_positions
        if any(b <= a for a, b in zip(positions, positions[1:])):
            problems.append(f"{concept.id}: mentions not strictly increasing")
        if text_length is not None and any(p < 0 or p >= text_length for p in positions):
            problems.append(f"{concept.id}: mention outside text")
        if graph.hierarchy.tier_of(concept.id) != concept.importance:
            problems.append(f"{concept.id}: hierarchy disagrees with importance")

    partition = list(graph.hierarchy.core) + list(graph.hierarchy.supporting) + list(graph.hierarchy.detail)
    if sorted(partition) != sorted(ids):
        problems.append("hierarchy is not a partition of the concept ids")

    if len(graph.sequence) != graph.total_mentions:
        problems.append(
            f"sequence length {len(graph.sequence)} != total mentions {graph.total_mentions}"
        )

    return problems


def safe_extract(extractor: ConceptExtractor, text: str, sections: Sequence[Section]) -> ConceptGraph:
    """
    Run an extractor and verify its output.

    Raises:
        ExtractionError: if the extractor raised or produced an invalid graph
    """
    try:
        graph = extractor.extract(text, sections)
    except Exception as exc:
        raise ExtractionError(f"{type(extractor).__name__} failed: {exc}") from exc

    problems = check_graph(graph, len(text))
    if problems:
        raise ExtractionError("Invalid concept graph: " + "; ".join(problems[:5]))
    return graph
