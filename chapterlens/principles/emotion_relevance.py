"""
Emotion & Relevance evaluator.

Point budgets:
- emotional and narrative elements   50
- relevance statements               50
"""
from __future__ import annotations

from loguru import logger

from chapterlens.models.chapter import Chapter
from chapterlens.models.concepts import ConceptGraph
from chapterlens.models.evaluation import FindingType, Principle, PrincipleEvaluation, Priority
from chapterlens.principles.base import EvaluationBuilder, compile_table, count_matches, safe_ratio, scaled_threshold

PRINCIPLE = Principle.EMOTION_RELEVANCE
WEIGHT = 0.70

EMOTIONAL_PATTERNS = compile_table([
    (r"\bstor(?:y|ies)\b", "story"),
    (r"\bimagine\b", "imagine"),
    (r"\bsurpris(?:e|ed|ing|ingly)\b", "surprise"),
    (r"\bfascinat(?:ing|ed)\b", "fascinating"),
    (r"\bcurio(?:us|sity)\b", "curiosity"),
    (r"\bmyster(?:y|ious)\b", "mystery"),
    (r"\byou might wonder\b", "wonder"),
    (r"\bremarkabl[ey]\b", "remarkable"),
    (r"\bexcit(?:ing|ed)\b", "exciting"),
    (r"\bdiscover(?:ed|y)?\b", "discovery"),
    (r"\bjourney\b", "journey"),
])

RELEVANCE_PATTERNS = compile_table([
    (r"\bin your (?:life|career|daily|work|job)\b", "your_life"),
    (r"\breal[- ]world\b", "real_world"),
    (r"\beveryday\b", "everyday"),
    (r"\bmatters because\b|\bwhy (?:this|it) matters\b", "why_it_matters"),
    (r"\byou will use\b", "you_will_use"),
    (r"\bpractical\b", "practical"),
    (r"\brelevant\b", "relevant"),
    (r"\bapplies to (?:you|your)\b", "applies_to_you"),
])


def evaluate(chapter: Chapter, graph: ConceptGraph) -> PrincipleEvaluation:
    text = chapter.content
    builder = EvaluationBuilder(PRINCIPLE, WEIGHT)
    threshold = scaled_threshold(chapter.word_count, 500)

    emotional = count_matches(EMOTIONAL_PATTERNS, text)
    builder.add_count("emotional_elements", emotional, threshold)
    builder.add_fraction(safe_ratio(emotional, threshold), 50)

    relevance = count_matches(RELEVANCE_PATTERNS, text)
    builder.add_count("relevance_statements", relevance, threshold)
    builder.add_fraction(safe_ratio(relevance, threshold), 50)

    if emotional == 0:
        builder.add_finding(FindingType.WARNING, "No stories or curiosity hooks engage the reader")
        builder.suggest(
            Priority.LOW,
            "Add a hook",
            "Open with a short story, a surprising fact or a puzzle the chapter will resolve.",
            examples=("Imagine you are the engineer who first noticed...",),
        )
    if relevance == 0:
        builder.add_finding(
            FindingType.WARNING,
            "The chapter never says why the material matters to the reader",
        )
        builder.suggest(
            Priority.MEDIUM,
            "Explain why this matters",
            "Tie the material to situations readers care about.",
            examples=("This matters because you will use it whenever...",),
        )
    if emotional >= threshold and relevance >= threshold:
        builder.add_finding(FindingType.POSITIVE, "Material is framed with stories and clear relevance")

    evaluation = builder.build()
    logger.debug("emotion_relevance score={} emotional={} relevance={}", evaluation.score, emotional, relevance)
    return evaluation
