"""
Schema Building evaluator.

An ideal concept hierarchy is 20% core, 30% supporting, 50% detail.

Point budgets:
- hierarchy balance        50
- relationship coverage    30
- advance organisers       20
"""
from __future__ import annotations

from loguru import logger

from chapterlens.models.chapter import Chapter
from chapterlens.models.concepts import ConceptGraph
from chapterlens.models.evaluation import FindingType, Principle, PrincipleEvaluation, Priority
from chapterlens.principles.base import EvaluationBuilder, compile_table, count_matches, grade, safe_ratio

PRINCIPLE = Principle.SCHEMA_BUILDING
WEIGHT = 0.90

IDEAL_DISTRIBUTION = (0.2, 0.3, 0.5)  # core, supporting, detail

ORGANIZER_PATTERNS = compile_table([
    (r"\boverview\b", "overview"),
    (r"\bin this chapter\b", "in_this_chapter"),
    (r"\boutline\b", "outline"),
    (r"\broadmap\b", "roadmap"),
    (r"\bbig picture\b", "big_picture"),
    (r"\bbuilds? on\b", "builds_on"),
    (r"\bconnects? to\b", "connects_to"),
    (r"\bas we will see\b", "as_we_will_see"),
    (r"\b(?:framework|preview)\b", "framework"),
])


def hierarchy_balance(graph: ConceptGraph) -> float:
    """1 minus half the total deviation from the ideal split, floored at 0."""
    total = len(graph.concepts)
    if not total:
        return 0.0
    actual = (
        len(graph.hierarchy.core) / total,
        len(graph.hierarchy.supporting) / total,
        len(graph.hierarchy.detail) / total,
    )
    deviation = sum(abs(a - ideal) for a, ideal in zip(actual, IDEAL_DISTRIBUTION))
    return max(0.0, 1 - deviation / 2)


def orphan_concepts(graph: ConceptGraph) -> list[str]:
    """Ids of concepts with no relationships."""
    linked = {r.source for r in graph.relationships} | {r.target for r in graph.relationships}
    return [c.id for c in graph.concepts if c.id not in linked]


def evaluate(chapter: Chapter, graph: ConceptGraph) -> PrincipleEvaluation:
    builder = EvaluationBuilder(PRINCIPLE, WEIGHT)

    balance = hierarchy_balance(graph)
    builder.add_evidence("hierarchy_balance", round(balance, 3), grade(balance, 0.8, 0.5), 0.8)
    builder.add_fraction(balance, 50)

    orphans = orphan_concepts(graph)
    connectivity = safe_ratio(len(graph.concepts) - len(orphans), len(graph.concepts))
    builder.add_evidence("relationship_coverage", round(connectivity, 3), grade(connectivity, 0.7, 0.4), 0.7)
    builder.add_fraction(connectivity, 30)

    organizers = count_matches(ORGANIZER_PATTERNS, chapter.content)
    builder.add_count("advance_organizers", organizers, 2)
    builder.add_fraction(organizers / 2, 20)

    if graph.is_empty:
        builder.add_finding(FindingType.WARNING, "No concepts were identified, so no schema can be assessed")
    elif balance < 0.5:
        builder.add_finding(
            FindingType.WARNING,
            f"Concept hierarchy is unbalanced ({balance:.2f})",
            evidence=(
                f"core={len(graph.hierarchy.core)}, supporting={len(graph.hierarchy.supporting)}, "
                f"detail={len(graph.hierarchy.detail)}"
            ),
        )
    else:
        builder.add_finding(FindingType.POSITIVE, "Concepts form a balanced hierarchy")

    if graph.concepts and connectivity < 0.4:
        names = [graph.get(cid).name for cid in orphans[:5]]
        builder.add_finding(
            FindingType.WARNING,
            f"{len(orphans)} concepts are not connected to any other concept",
        )
        builder.suggest(
            Priority.MEDIUM,
            "Connect isolated concepts",
            "Explain how isolated concepts relate to the chapter's core ideas.",
            related_concepts=names,
        )

    if organizers == 0:
        builder.suggest(
            Priority.MEDIUM,
            "Add an advance organiser",
            "Open with an overview of how the chapter's ideas fit together before going into detail.",
            examples=("In this chapter, we build on... and connect it to...",),
        )

    evaluation = builder.build()
    logger.debug("schema_building score={} balance={:.2f} orphans={}", evaluation.score, balance, len(orphans))
    return evaluation
