"""
Metacognition evaluator.

Point budgets:
- metacognitive prompts   70
- learning objectives     30
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
    first_match_position,
    safe_ratio,
    scaled_threshold,
)

PRINCIPLE = Principle.METACOGNITION
WEIGHT = 0.75

EARLY_OBJECTIVE_SHARE = 0.2

METACOGNITIVE_PATTERNS = compile_table([
    (r"\bcheck your understanding\b", "check_understanding"),
    (r"\breflect(?:ion|ing)?\b", "reflect"),
    (r"\bself[- ](?:test|assess(?:ment)?|check)\b|\btest yourself\b", "self_test"),
    (r"\bmisconceptions?\b", "misconception"),
    (r"\bconfus(?:ed|ing|ion)\b", "confusion"),
    (r"\bhow confident\b", "confidence"),
    (r"\bask yourself\b", "ask_yourself"),
    (r"\bwhat do you (?:already )?know\b", "prior_knowledge"),
    (r"\bmonitor your\b", "monitor"),
    (r"\bthink about (?:how|what|why) you\b", "think_about"),
])

OBJECTIVE_PATTERNS = compile_table([
    (r"\blearning (?:objectives?|outcomes?|goals?)\b", "objectives"),
    (r"\bby the end of this (?:chapter|section)\b", "by_the_end"),
    (r"\byou (?:will|should) be able to\b", "able_to"),
    (r"\bin this chapter,? (?:you|we) will\b", "in_this_chapter"),
])


def evaluate(chapter: Chapter, graph: ConceptGraph) -> PrincipleEvaluation:
    text = chapter.content
    builder = EvaluationBuilder(PRINCIPLE, WEIGHT)

    prompts = count_matches(METACOGNITIVE_PATTERNS, text)
    threshold = scaled_threshold(len(chapter.sections), 3)
    builder.add_count("metacognitive_prompts", prompts, threshold)
    builder.add_fraction(safe_ratio(prompts, threshold), 70)

    objectives = count_matches(OBJECTIVE_PATTERNS, text)
    builder.add_count("learning_objectives", objectives, 1)
    builder.add_fraction(min(objectives, 1), 30)

    if prompts == 0:
        builder.add_finding(
            FindingType.WARNING,
            "No prompts help readers monitor their own understanding",
            evidence=f"0 metacognitive prompts (expected {threshold})",
        )
        builder.suggest(
            Priority.MEDIUM,
            "Add self-check prompts",
            "Invite readers to pause and judge how well they understand what they just read.",
            examples=(
                "Check your understanding: could you explain this to a classmate?",
                "How confident are you that you could solve a similar problem?",
            ),
        )
    elif prompts >= threshold:
        builder.add_finding(FindingType.POSITIVE, f"{prompts} prompts support self-monitoring")

    if objectives == 0:
        builder.suggest(
            Priority.LOW,
            "State learning objectives",
            "Open the chapter with what readers will be able to do afterwards, so they can check progress against it.",
            examples=("By the end of this chapter, you will be able to...",),
        )
    else:
        position = first_match_position(OBJECTIVE_PATTERNS, text)
        if position is not None and position > len(text) * EARLY_OBJECTIVE_SHARE:
            builder.add_finding(
                FindingType.WARNING,
                "Learning objectives appear late in the chapter",
                evidence=f"first objective at offset {position} of {len(text)}",
            )

    evaluation = builder.build()
    logger.debug("metacognition score={} prompts={} objectives={}", evaluation.score, prompts, objectives)
    return evaluation
