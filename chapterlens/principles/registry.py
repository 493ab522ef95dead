"""
Ordered registry of the ten principle evaluators.

Report order is the order of Principle; it never changes between runs.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Callable

from chapterlens.models.chapter import Chapter
from chapterlens.models.concepts import ConceptGraph
from chapterlens.models.evaluation import Principle, PrincipleEvaluation
from chapterlens.principles import (
    cognitive_load,
    deep_processing,
    dual_coding,
    emotion_relevance,
    generative_learning,
    interleaving,
    metacognition,
    retrieval_practice,
    schema_building,
    spaced_repetition,
)

EvaluateFn = Callable[[Chapter, ConceptGraph], PrincipleEvaluation]


@dataclass(frozen=True)
class RegisteredEvaluator:
    principle: Principle
    weight: float
    evaluate: EvaluateFn

    @property
    def name(self) -> str:
        return self.principle.display_name


def _register(module: ModuleType) -> RegisteredEvaluator:
    return RegisteredEvaluator(principle=module.PRINCIPLE, weight=module.WEIGHT, evaluate=module.evaluate)


EVALUATORS: tuple[RegisteredEvaluator, ...] = tuple(
    sorted(
        (
            _register(module)
            for module in (
                deep_processing,
                spaced_repetition,
                retrieval_practice,
                interleaving,
                dual_coding,
                generative_learning,
                metacognition,
                schema_building,
                cognitive_load,
                emotion_relevance,
            )
        ),
        key=lambda e: list(Principle).index(e.principle),
    )
)


def get_evaluator(principle: Principle | str) -> RegisteredEvaluator:
    """
    Look up a registered evaluator by principle or principle id.

    Raises:
        KeyError: if no evaluator is registered for it
    """
    try:
        principle = Principle(principle)
    except ValueError:
        raise KeyError(principle) from None
    for evaluator in EVALUATORS:
        if evaluator.principle == principle:
            return evaluator
    raise KeyError(principle)


def principle_weights() -> dict[Principle, float]:
    return {e.principle: e.weight for e in EVALUATORS}
