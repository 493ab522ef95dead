"""
Promotion of evaluator suggestions to report-level recommendations.

A suggestion is promoted when it is high priority or when its principle
scored below PROMOTION_SCORE. Recommendations are ordered high, medium,
low and then by principle order.
"""
from __future__ import annotations

from typing import Iterable

from chapterlens.models.analysis import Recommendation
from chapterlens.models.evaluation import Principle, PrincipleEvaluation, Priority

PROMOTION_SCORE = 70


def promote_recommendations(evaluations: Iterable[PrincipleEvaluation]) -> tuple[Recommendation, ...]:
    order = list(Principle)
    promoted = []
    for evaluation in evaluations:
        for suggestion in evaluation.suggestions:
            if suggestion.priority != Priority.HIGH and evaluation.score >= PROMOTION_SCORE:
                continue
            promoted.append(
                Recommendation(
                    id=f"rec-{suggestion.id}",
                    principle=suggestion.principle,
                    priority=suggestion.priority,
                    category=suggestion.principle.display_name,
                    title=suggestion.title,
                    description=suggestion.description,
                    affected_concepts=suggestion.related_concepts,
                    action_items=tuple(
                        item for item in (suggestion.implementation, *suggestion.examples) if item
                    ),
                    expected_outcome=suggestion.expected_impact,
                )
            )
    promoted.sort(key=lambda r: (r.priority.rank, order.index(r.principle)))
    return tuple(promoted)
