"""
Shared toolkit for the principle evaluators.

Every evaluator follows the same shape:
1. Run a battery of named regex patterns over the chapter text
2. Turn each count or ratio into Evidence with a threshold and quality
3. Derive Findings from fixed severity thresholds
4. Sum capped point contributions into a score clamped to [0, 100]
5. Emit Suggestions keyed by which findings fired

Pattern tables are module-level tuples of (compiled pattern, code) so they can
be tested independently of the scoring arithmetic.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from chapterlens.models.evaluation import (
    Evidence,
    EvidenceQuality,
    EvidenceType,
    Finding,
    FindingType,
    Principle,
    PrincipleEvaluation,
    Priority,
    Suggestion,
)

PATTERN_TABLE_VERSION = "1.0.0"

PatternTable = tuple[tuple[re.Pattern, str], ...]

SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
WORD = re.compile(r"\S+")
# Long words, words with digits, hyphenated compounds
TECHNICAL_TOKEN = re.compile(r"^(?:[A-Za-z]{12,}|\S*\d\S*|[A-Za-z]+-[A-Za-z-]+)$")


def compile_table(entries: Iterable[tuple[str, str]], flags: int = re.IGNORECASE) -> PatternTable:
    """Compile (regex, code) pairs into a pattern table."""
    return tuple((re.compile(pattern, flags), code) for pattern, code in entries)


def count_matches(table: PatternTable, text: str) -> int:
    """Total non-overlapping matches of every pattern in the table."""
    return sum(1 for pattern, _ in table for _ in pattern.finditer(text))


def matches_by_code(table: PatternTable, text: str) -> dict[str, int]:
    """Match counts keyed by pattern code (codes may repeat across patterns)."""
    counts: dict[str, int] = {}
    for pattern, code in table:
        counts[code] = counts.get(code, 0) + sum(1 for _ in pattern.finditer(text))
    return counts


def first_match_position(table: PatternTable, text: str) -> Optional[int]:
    positions = [m.start() for pattern, _ in table if (m := pattern.search(text))]
    return min(positions) if positions else None


def safe_ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def scaled_threshold(amount: int, per: int) -> int:
    """One expected occurrence per `per` units, never less than one."""
    return max(1, math.ceil(amount / per))


def grade(value: float, strong: float, moderate: float) -> EvidenceQuality:
    """Higher is better: value >= strong is strong, >= moderate is moderate."""
    if value >= strong:
        return EvidenceQuality.STRONG
    if value >= moderate and value > 0:
        return EvidenceQuality.MODERATE
    return EvidenceQuality.WEAK


def inverse_grade(value: float, strong: float, moderate: float) -> EvidenceQuality:
    """Lower is better: value <= strong is strong, <= moderate is moderate."""
    if value <= strong:
        return EvidenceQuality.STRONG
    if value <= moderate:
        return EvidenceQuality.MODERATE
    return EvidenceQuality.WEAK


def count_quality(count: int, threshold: float) -> EvidenceQuality:
    """Strong at the threshold, moderate at half of it, weak below (or at zero)."""
    return grade(count, threshold, threshold / 2)


def sentences(text: str) -> list[str]:
    return [s for s in SENTENCE_SPLIT.split(text.strip()) if WORD.search(s)]


def average_sentence_length(text: str) -> float:
    """Mean words per sentence, 0 for text without sentences."""
    parts = sentences(text)
    if not parts:
        return 0.0
    return sum(len(WORD.findall(s)) for s in parts) / len(parts)


def technical_density(text: str) -> float:
    """Share of tokens that look technical, 0 for empty text."""
    tokens = [t.strip(".,;:!?()[]{}\"'*_`") for t in WORD.findall(text)]
    tokens = [t for t in tokens if t]
    if not tokens:
        return 0.0
    return sum(1 for t in tokens if TECHNICAL_TOKEN.match(t)) / len(tokens)


@dataclass
class EvaluationBuilder:
    """
    Mutable accumulator used while one evaluator runs.

    build() freezes it into a PrincipleEvaluation with the score clamped to [0, 100].
    """
    principle: Principle
    weight: float
    score: float = 0.0
    evidence: list[Evidence] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)

    def add_points(self, points: float, budget: float) -> float:
        """Add a contribution capped to its point budget. Returns the points added."""
        awarded = max(0.0, min(points, budget))
        self.score += awarded
        return awarded

    def add_fraction(self, fraction: float, budget: float) -> float:
        """Award `fraction` (0..1) of a point budget."""
        return self.add_points(fraction * budget, budget)

    def add_evidence(
        self,
        metric: str,
        value: float,
        quality: EvidenceQuality,
        threshold: Optional[float] = None,
        type: EvidenceType = EvidenceType.METRIC,
    ) -> Evidence:
        item = Evidence(type=type, metric=metric, value=value, quality=quality, threshold=threshold)
        self.evidence.append(item)
        return item

    def add_count(self, metric: str, count: int, threshold: float) -> Evidence:
        """Count evidence graded against its threshold."""
        return self.add_evidence(
            metric, count, count_quality(count, threshold), threshold, EvidenceType.COUNT
        )

    def add_finding(
        self,
        type: FindingType,
        message: str,
        severity: Optional[float] = None,
        evidence: str = "",
    ) -> Finding:
        if severity is None:
            severity = {FindingType.CRITICAL: 0.8, FindingType.WARNING: 0.5, FindingType.POSITIVE: 0.0}[type]
        item = Finding(type=type, message=message, severity=severity, evidence=evidence)
        self.findings.append(item)
        return item

    def suggest(
        self,
        priority: Priority,
        title: str,
        description: str,
        implementation: str = "",
        expected_impact: str = "",
        related_concepts: Sequence[str] = (),
        examples: Sequence[str] = (),
        position: Optional[int] = None,
    ) -> Suggestion:
        item = Suggestion(
            id=f"{self.principle.value}-{len(self.suggestions) + 1}",
            principle=self.principle,
            priority=priority,
            title=title,
            description=description,
            implementation=implementation,
            expected_impact=expected_impact,
            related_concepts=tuple(related_concepts),
            examples=tuple(examples),
            position=position,
        )
        self.suggestions.append(item)
        return item

    def build(self) -> PrincipleEvaluation:
        score = self.score if math.isfinite(self.score) else 0.0
        return PrincipleEvaluation(
            principle=self.principle,
            score=round(max(0.0, min(100.0, score)), 2),
            weight=self.weight,
            findings=tuple(self.findings),
            suggestions=tuple(self.suggestions),
            evidence=tuple(self.evidence),
        )
