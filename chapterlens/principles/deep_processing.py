"""
Deep Processing & Elaboration evaluator.

Looks for text that pushes readers past recognition: why/how questions,
higher-order question types, concepts explained several ways, links to
prior knowledge and analogies.

Point budgets:
- why/how questions          20
- higher-order questions     25
- explanation depth          25
- explanation variety        15
- prior-knowledge links      10
- analogies                   5
"""
from __future__ import annotations

from loguru import logger

from chapterlens.models.chapter import Chapter
from chapterlens.models.concepts import Concept, ConceptGraph, ImportanceTier
from chapterlens.models.evaluation import FindingType, Principle, PrincipleEvaluation, Priority
from chapterlens.principles.base import (
    EvaluationBuilder,
    compile_table,
    count_matches,
    grade,
    matches_by_code,
    safe_ratio,
    scaled_threshold,
)

PRINCIPLE = Principle.DEEP_PROCESSING
WEIGHT = 0.95

EXPLANATION_WINDOW = 300
HIGHER_ORDER_BUCKETS = ("analyze", "evaluate", "create")

WHY_HOW_PATTERNS = compile_table([
    (r"\bwhy\b\s*\??", "why"),
    (r"\bhow\b\s*\??", "how"),
    (r"\bwhat causes\b\s*\??", "what_causes"),
    (r"\bwhat would happen if\b\s*\??", "what_if"),
])

# Bloom-style question taxonomy, one code per bucket
QUESTION_TAXONOMY = compile_table([
    (r"\b(?:what is|define|list|name|identify|recall|state)\b", "remember"),
    (r"\b(?:explain|describe|summari[sz]e|interpret|paraphrase|in your own words)\b", "understand"),
    (r"\b(?:apply|calculate|compute|solve|demonstrate|implement|use this to)\b", "apply"),
    (r"\b(?:analy[sz]e|compare|contrast|differentiate|distinguish|examine|investigate|break down)\b", "analyze"),
    (r"\b(?:evaluate|justify|critique|assess|judge|defend|argue|which is better)\b", "evaluate"),
    (r"\b(?:design|create|construct|propose|invent|formulate|compose|devise)\b", "create"),
])

# Explanation-depth ladder, checked within a window around each core concept mention
DEFINITION_CUES = compile_table([
    (r"\b(?:is|are) (?:a|an|the)\b", "is_a"),
    (r"\b(?:defined as|refers to|means|is called|known as)\b", "defined"),
])
EXAMPLE_CUES = compile_table([
    (r"\b(?:for example|for instance|such as|e\.g\.|consider)\b", "example"),
])
MECHANISM_CUES = compile_table([
    (r"\b(?:because|causes?|results? in|leads? to|therefore|due to|works by|mechanism)\b", "mechanism"),
])
APPLICATION_CUES = compile_table([
    (r"\b(?:appl(?:y|ied|ication)|used? to|in practice|real[- ]world)\b", "application"),
])

EXPLANATION_METHODS = compile_table([
    (r"\b(?:defined as|refers to|is called|known as)\b", "definition"),
    (r"\b(?:for example|for instance|such as|e\.g\.)\b", "example"),
    (r"\b(?:like a|similar to|analogous|just as)\b", "analogy"),
    (r"\b(?:unlike|in contrast|whereas|on the other hand)\b", "comparison"),
    (r"\b(?:because|therefore|as a result|consequently)\b", "cause_effect"),
    (r"\b(?:first,|second,|then|finally|step \d+)", "procedure"),
])

PRIOR_KNOWLEDGE_PATTERNS = compile_table([
    (r"\brecall that\b", "recall_that"),
    (r"\bas we (?:saw|discussed|learned)\b", "as_we_saw"),
    (r"\b(?:previously|earlier)\b", "previously"),
    (r"\byou (?:may|might) already know\b", "already_know"),
    (r"\bremember (?:that|when|how)\b", "remember"),
    (r"\bbuilds? on\b", "builds_on"),
    (r"\bin chapter \d+\b", "chapter_reference"),
])

ANALOGY_PATTERNS = compile_table([
    (r"\blike a\b", "like_a"),
    (r"\bsimilar to\b", "similar_to"),
    (r"\banalog(?:ous|y|ies)\b", "analogy"),
    (r"\bjust as\b", "just_as"),
    (r"\bthink of\b.{0,40}?\bas\b", "think_of_as"),
    (r"\bmetaphor\b", "metaphor"),
])


def explanation_depth(concept: Concept, text: str, graph: ConceptGraph) -> int:
    """0-5 ladder: definition, example, mechanism, relationship, application."""
    windows = " ".join(
        text[max(0, p - EXPLANATION_WINDOW): p + EXPLANATION_WINDOW]
        for p in concept.mention_positions
    )
    depth = 0
    for cues in (DEFINITION_CUES, EXAMPLE_CUES, MECHANISM_CUES):
        if count_matches(cues, windows):
            depth += 1
    if graph.relationship_count(concept.id) >= 1:
        depth += 1
    if count_matches(APPLICATION_CUES, windows):
        depth += 1
    return depth


def evaluate(chapter: Chapter, graph: ConceptGraph) -> PrincipleEvaluation:
    text = chapter.content
    builder = EvaluationBuilder(PRINCIPLE, WEIGHT)

    # Why/how questions
    why_how = count_matches(WHY_HOW_PATTERNS, text)
    why_how_threshold = scaled_threshold(chapter.word_count, 500)
    builder.add_count("why_how_questions", why_how, why_how_threshold)
    builder.add_fraction(safe_ratio(why_how, why_how_threshold), 20)

    if why_how == 0:
        builder.add_finding(
            FindingType.CRITICAL,
            "No why/how questions prompt readers to explain causes or mechanisms",
            evidence=f"0 why/how questions (expected {why_how_threshold})",
        )
        builder.suggest(
            Priority.HIGH,
            "Add elaborative why/how questions",
            "Ask readers to explain why things happen and how they work after key explanations.",
            implementation="Close each major section with one 'Why does...?' or 'How would...?' question.",
            expected_impact="Encourages elaborative encoding and deeper understanding",
            examples=("Why does this approach work better than the alternative?",),
        )
    elif why_how < why_how_threshold:
        builder.add_finding(
            FindingType.WARNING,
            f"Only {why_how} why/how questions for {chapter.word_count} words",
            evidence=f"{why_how}/{why_how_threshold}",
        )
    else:
        builder.add_finding(FindingType.POSITIVE, f"{why_how} why/how questions encourage elaboration")

    # Question taxonomy
    buckets = matches_by_code(QUESTION_TAXONOMY, text)
    total = sum(buckets.values())
    higher_order = sum(buckets[b] for b in HIGHER_ORDER_BUCKETS)
    higher_order_pct = safe_ratio(higher_order, total) * 100
    builder.add_evidence("higher_order_percentage", round(higher_order_pct, 2), grade(higher_order_pct, 50, 25), 25)
    builder.add_fraction(higher_order_pct / 70, 25)

    if total == 0:
        builder.add_finding(FindingType.WARNING, "No question prompts of any level were found")
    elif higher_order_pct < 25:
        builder.add_finding(
            FindingType.CRITICAL,
            f"Only {higher_order_pct:.0f}% of prompts target analysis, evaluation or creation",
            evidence=", ".join(f"{k}={v}" for k, v in buckets.items() if v),
        )
        builder.suggest(
            Priority.MEDIUM,
            "Raise the cognitive level of prompts",
            "Most prompts ask readers to remember or restate. Add prompts that ask them to compare, judge or design.",
            examples=("Compare the two approaches and justify which fits this case better.",),
        )
    elif higher_order_pct > 70:
        builder.add_finding(FindingType.POSITIVE, f"{higher_order_pct:.0f}% of prompts are higher-order")

    # Explanation depth of core concepts
    core = graph.concepts_in_tier(ImportanceTier.CORE)
    depths = {c.name: explanation_depth(c, text, graph) for c in core}
    average_depth = safe_ratio(sum(depths.values()), len(depths))
    builder.add_evidence("explanation_depth", round(average_depth, 2), grade(average_depth, 3.5, 2), 3)
    builder.add_fraction(average_depth / 5, 25)

    shallow = sorted(name for name, depth in depths.items() if depth < 2)
    if core and average_depth < 2:
        builder.add_finding(
            FindingType.WARNING,
            f"Core concepts are explained shallowly (average depth {average_depth:.1f}/5)",
        )
    elif core and average_depth >= 3.5:
        builder.add_finding(FindingType.POSITIVE, "Core concepts are explained in depth")
    if shallow:
        builder.suggest(
            Priority.MEDIUM,
            "Deepen explanations of core concepts",
            "Give each core concept a definition, an example, a mechanism and an application.",
            related_concepts=shallow[:5],
        )

    # Explanation variety
    methods = matches_by_code(EXPLANATION_METHODS, text)
    variety = sum(1 for count in methods.values() if count)
    builder.add_count("explanation_variety", variety, 4)
    builder.add_fraction(variety / len(methods), 15)
    if variety <= 2:
        builder.suggest(
            Priority.LOW,
            "Vary how concepts are explained",
            "Mix definitions, examples, analogies, comparisons, cause-and-effect and step-by-step walkthroughs.",
        )

    # Prior knowledge
    prior = count_matches(PRIOR_KNOWLEDGE_PATTERNS, text)
    builder.add_count("prior_knowledge_connections", prior, 2)
    builder.add_fraction(prior / 2, 10)
    if prior == 0:
        builder.suggest(
            Priority.LOW,
            "Connect to prior knowledge",
            "Point back to what readers already know before introducing new ideas.",
            examples=("Recall that...", "As we saw in the previous section..."),
        )

    # Analogies
    analogies = count_matches(ANALOGY_PATTERNS, text)
    builder.add_count("analogies", analogies, 1)
    builder.add_fraction(min(analogies, 1), 5)

    evaluation = builder.build()
    logger.debug("deep_processing score={} why_how={} depth={:.2f}", evaluation.score, why_how, average_depth)
    return evaluation
