"""
Concept map payload: nodes, links and category clusters.
"""
from __future__ import annotations

from chapterlens.models.analysis import ConceptCluster, ConceptLink, ConceptMap, ConceptNode
from chapterlens.models.concepts import ConceptGraph, ImportanceTier

UNCATEGORIZED = "Uncategorized"


def concept_map(graph: ConceptGraph) -> ConceptMap:
    nodes = tuple(
        ConceptNode(
            id=c.id,
            label=c.name,
            importance=c.importance.value,
            size=len(c.mentions),
            first_mention=c.first_mention_position,
            category=c.category,
        )
        for c in graph.concepts
    )
    links = tuple(
        ConceptLink(source=r.source, target=r.target, type=r.type.value, strength=r.strength)
        for r in graph.relationships
    )

    # Library concepts cluster by category; the rest by tier
    clusters: dict[str, list[str]] = {}
    for concept in graph.concepts:
        if concept.category:
            name = concept.category
        elif concept.importance == ImportanceTier.CORE:
            name = "Core concepts"
        else:
            name = UNCATEGORIZED
        clusters.setdefault(name, []).append(concept.id)

    return ConceptMap(
        nodes=nodes,
        links=links,
        clusters=tuple(ConceptCluster(name=name, concept_ids=tuple(ids)) for name, ids in sorted(clusters.items())),
    )
