"""
Generative Learning evaluator.

Point budgets:
- generative prompts    70
- practice activities   30
"""
from __future__ import annotations

from loguru import logger

from chapterlens.models.chapter import Chapter
from chapterlens.models.concepts import ConceptGraph
from chapterlens.models.evaluation import FindingType, Principle, PrincipleEvaluation, Priority
from chapterlens.principles.base import (
    EvaluationBuilder,
    compile_table,
    count_matches,
    safe_ratio,
    scaled_threshold,
)

PRINCIPLE = Principle.GENERATIVE_LEARNING
WEIGHT = 0.85

GENERATIVE_PATTERNS = compile_table([
    (r"\bpredict\b", "predict"),
    (r"\bgenerate\b", "generate"),
    (r"\bcreate\b", "create"),
    (r"\bwrite (?:a|an|down|out|your)\b", "write"),
    (r"\bconstruct\b", "construct"),
    (r"\bsolve\b", "solve"),
    (r"\bdesign\b", "design"),
    (r"\b(?:draw|sketch)\b", "draw"),
    (r"\bteach (?:it|this|someone|a friend)\b", "teach"),
])

PRACTICE_PATTERNS = compile_table([
    (r"\bexercises?\b", "exercise"),
    (r"\btry it\b", "try_it"),
    (r"\byour turn\b", "your_turn"),
    (r"\bactivity\b", "activity"),
    (r"\bpractice problems?\b", "practice_problem"),
])


def evaluate(chapter: Chapter, graph: ConceptGraph) -> PrincipleEvaluation:
    text = chapter.content
    builder = EvaluationBuilder(PRINCIPLE, WEIGHT)

    prompts = count_matches(GENERATIVE_PATTERNS, text)
    prompt_threshold = scaled_threshold(chapter.word_count, 750)
    builder.add_count("generative_prompts", prompts, prompt_threshold)
    builder.add_fraction(safe_ratio(prompts, prompt_threshold), 70)

    activities = count_matches(PRACTICE_PATTERNS, text)
    activity_threshold = scaled_threshold(len(chapter.sections), 3)
    builder.add_count("practice_activities", activities, activity_threshold)
    builder.add_fraction(safe_ratio(activities, activity_threshold), 30)

    if prompts == 0:
        builder.add_finding(
            FindingType.CRITICAL,
            "Readers are never asked to generate anything themselves",
            evidence=f"0 generative prompts (expected {prompt_threshold})",
        )
        builder.suggest(
            Priority.HIGH,
            "Ask readers to produce something",
            "Prompts to predict, explain, draw or solve make readers generate the material instead of just reading it.",
            implementation="Before revealing a result, ask readers to predict it.",
            expected_impact="The generation effect improves recall of self-produced material",
            examples=("Before reading on, predict what happens when...", "Sketch how these parts connect."),
        )
    elif prompts < prompt_threshold:
        builder.add_finding(
            FindingType.WARNING,
            f"{prompts} generative prompts for {chapter.word_count} words",
            evidence=f"{prompts}/{prompt_threshold}",
        )
    else:
        builder.add_finding(FindingType.POSITIVE, f"{prompts} generative prompts engage readers actively")

    if activities == 0:
        builder.suggest(
            Priority.MEDIUM,
            "Add practice activities",
            "A short exercise after each major section lets readers apply what they just read.",
            examples=("Your turn: apply the method to the example below.",),
        )

    evaluation = builder.build()
    logger.debug("generative_learning score={} prompts={} activities={}", evaluation.score, prompts, activities)
    return evaluation
