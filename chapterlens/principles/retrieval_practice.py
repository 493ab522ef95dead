"""
Retrieval Practice evaluator.

Point budgets:
- recall vs recognition prompts   25
- prompt difficulty               20
- direct questions                25
- summary prompts                 15
- application scenarios           15
"""
from __future__ import annotations

import re

from loguru import logger

from chapterlens.models.chapter import Chapter
from chapterlens.models.concepts import ConceptGraph
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

PRINCIPLE = Principle.RETRIEVAL_PRACTICE
WEIGHT = 0.95

DIFFICULTY_WEIGHTS = {"easy": 0.2, "moderate": 0.5, "challenging": 1.0}

RECOGNITION_PATTERNS = compile_table([
    (r"\bmultiple[- ]choice\b", "multiple_choice"),
    (r"\btrue (?:or|/) ?false\b|\btrue-false\b", "true_false"),
    (r"\bmatch(?:ing)? the following\b", "matching"),
    (r"\bwhich of the following\b", "which_of_following"),
    (r"\bselect the (?:correct|best)\b", "select"),
])

RECALL_PATTERNS = compile_table([
    (r"\bexplain\b", "explain"),
    (r"\bdescribe\b", "describe"),
    (r"\bdefine\b", "define"),
    (r"\blist\b", "list"),
    (r"\bin your own words\b", "own_words"),
    (r"\bwrite down\b", "write_down"),
    (r"\bwithout looking\b", "without_looking"),
])

DIFFICULTY_PATTERNS = compile_table([
    (r"\b(?:identify|recall|list|name|define)\b", "easy"),
    (r"\b(?:explain|describe|compare|summari[sz]e|classify)\b", "moderate"),
    (r"\b(?:analy[sz]e|evaluate|design|justify|predict|create)\b", "challenging"),
])

EXPLICIT_PROMPTS = compile_table([
    (r"\b(?:quiz|test) yourself\b", "test_yourself"),
    (r"\bcheck your understanding\b", "check_understanding"),
    (r"\btry to (?:recall|remember)\b", "try_to_recall"),
    (r"\bcan you (?:explain|remember|recall|name)\b", "can_you"),
    (r"\bpractice questions?\b", "practice_questions"),
])

QUESTION_MARK = re.compile(r"\?")

SUMMARY_PROMPTS = compile_table([
    (r"\bsummari[sz]e\b", "summarize"),
    (r"\bin summary\b", "in_summary"),
    (r"\bkey takeaways?\b", "takeaways"),
    (r"\breview questions?\b", "review_questions"),
    (r"\brecap\b", "recap"),
    (r"\bto sum up\b", "sum_up"),
])

APPLICATION_SCENARIOS = compile_table([
    (r"\bscenario\b", "scenario"),
    (r"\bcase study\b", "case_study"),
    (r"\breal[- ]world\b", "real_world"),
    (r"\bin practice\b", "in_practice"),
    (r"\bsuppose\b", "suppose"),
    (r"\bimagine you\b", "imagine_you"),
])


def difficulty_weighting(counts: dict[str, int]) -> float:
    """easy*0.2 + moderate*0.5 + challenging*1.0, normalised by total matches."""
    total = sum(counts.values())
    weighted = sum(DIFFICULTY_WEIGHTS[level] * counts.get(level, 0) for level in DIFFICULTY_WEIGHTS)
    return safe_ratio(weighted, total)


def evaluate(chapter: Chapter, graph: ConceptGraph) -> PrincipleEvaluation:
    text = chapter.content
    builder = EvaluationBuilder(PRINCIPLE, WEIGHT)

    # Recall vs recognition
    recognition = count_matches(RECOGNITION_PATTERNS, text)
    recall = count_matches(RECALL_PATTERNS, text)
    recall_ratio = safe_ratio(recall, recall + recognition)
    builder.add_evidence("recall_ratio", round(recall_ratio, 3), grade(recall_ratio, 0.6, 0.3), 0.6)
    builder.add_fraction(recall_ratio, 25)

    # Difficulty
    difficulty = matches_by_code(DIFFICULTY_PATTERNS, text)
    weighting = difficulty_weighting(difficulty)
    builder.add_evidence("difficulty_weighting", round(weighting, 3), grade(weighting, 0.6, 0.35), 0.5)
    builder.add_fraction(weighting, 20)

    # Direct questions
    questions = len(QUESTION_MARK.findall(text)) + count_matches(EXPLICIT_PROMPTS, text)
    question_threshold = scaled_threshold(len(chapter.sections), 2)
    builder.add_count("retrieval_questions", questions, question_threshold)
    builder.add_fraction(safe_ratio(questions, question_threshold), 25)

    # Summary prompts
    summaries = count_matches(SUMMARY_PROMPTS, text)
    builder.add_count("summary_prompts", summaries, 2)
    builder.add_fraction(summaries / 2, 15)

    # Application
    scenarios = count_matches(APPLICATION_SCENARIOS, text)
    builder.add_count("application_scenarios", scenarios, 2)
    builder.add_fraction(scenarios / 2, 15)

    if questions == 0:
        builder.add_finding(
            FindingType.CRITICAL,
            "No retrieval questions give readers a chance to practise recall",
            evidence=f"0 questions (expected {question_threshold})",
        )
        builder.suggest(
            Priority.HIGH,
            "Add retrieval questions",
            "Readers remember more when they try to recall material rather than re-read it.",
            implementation="End each section with a question answered without looking back.",
            expected_impact="The testing effect strengthens long-term retention",
            examples=("Without looking back, explain the main idea of this section in two sentences.",),
        )
    elif questions < question_threshold:
        builder.add_finding(
            FindingType.WARNING,
            f"{questions} retrieval questions across {len(chapter.sections)} sections",
            evidence=f"{questions}/{question_threshold}",
        )
    else:
        builder.add_finding(FindingType.POSITIVE, f"{questions} retrieval questions support recall practice")

    if recognition and recall_ratio < 0.3:
        builder.add_finding(
            FindingType.WARNING,
            "Prompts favour recognition (multiple choice, true/false) over free recall",
            evidence=f"recall={recall}, recognition={recognition}",
        )
        builder.suggest(
            Priority.MEDIUM,
            "Convert recognition prompts to recall prompts",
            "Ask readers to produce answers instead of picking them.",
            examples=("Instead of 'Which of the following...', ask 'List the three...'",),
        )

    if summaries == 0:
        builder.suggest(
            Priority.LOW,
            "Ask readers to summarise",
            "A short summary prompt at the end of the chapter turns review into retrieval.",
            examples=("Summarize the key takeaways of this chapter in your own words.",),
        )

    evaluation = builder.build()
    logger.debug("retrieval_practice score={} questions={} recall_ratio={:.2f}", evaluation.score, questions, recall_ratio)
    return evaluation
