"""
Principle evaluators.

Each module exposes PRINCIPLE, WEIGHT, its pattern tables and a pure
`evaluate(chapter, graph) -> PrincipleEvaluation`.
"""

from .base import PATTERN_TABLE_VERSION, EvaluationBuilder
from .registry import EVALUATORS, RegisteredEvaluator, get_evaluator, principle_weights

__all__ = [
    "EVALUATORS",
    "PATTERN_TABLE_VERSION",
    "EvaluationBuilder",
    "RegisteredEvaluator",
    "get_evaluator",
    "principle_weights",
]
