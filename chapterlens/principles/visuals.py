"""
Visual-opportunity detection for dual coding.

Scans each paragraph for content that would benefit from a visual:
spatial layouts, multi-step processes, quantitative data, abstract
concepts, technically dense prose and system descriptions. An opportunity
is covered when the paragraph or one of its neighbours already references a
visual.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from chapterlens.content.parser import HEADING_PATTERN, PARAGRAPH_PATTERN
from chapterlens.principles.base import compile_table, count_matches, technical_density

VISUAL_REFERENCE_PATTERNS = compile_table([
    (r"\b(?:diagram|chart|graph|image|figure|illustration|infographic)s?\b", "visual_noun"),
    (r"\bvisuali[sz](?:e|ed|ation)\b", "visualize"),
    (r"\bfig\.\s*\d+", "figure_number"),
    (r"\btable\s+\d+", "table_number"),
    (r"!\[[^\]]*\]\([^)]*\)", "markdown_image"),
])

MIN_PARAGRAPH_WORDS = 20
MAX_EXCERPT = 120


class OpportunityKind(str, Enum):
    SPATIAL = "spatial"
    PROCESS = "process"
    QUANTITATIVE = "quantitative"
    ABSTRACT_CONCEPT = "abstract_concept"
    TECHNICAL_DENSITY = "technical_density"
    SYSTEM_DESCRIPTION = "system_description"


# (kind, pattern table, minimum hits)
OPPORTUNITY_DETECTORS = (
    (OpportunityKind.SPATIAL, compile_table([
        (r"\b(?:above|below|adjacent|beneath|inside|outside|surrounds?|arranged|layer(?:s|ed)?|located)\b", "position"),
        (r"\b(?:left|right|top|bottom) (?:side|of)\b", "side"),
    ]), 2),
    (OpportunityKind.PROCESS, compile_table([
        (r"\b(?:first|then|next|after that|finally|subsequently)\b", "sequence"),
        (r"\b(?:step|stage|phase) \d+\b", "numbered_step"),
    ]), 3),
    (OpportunityKind.QUANTITATIVE, compile_table([
        (r"\b\d+(?:\.\d+)?\s*(?:%|percent|kg|km|cm|mm|ms|mb|gb|hz)\b", "measurement"),
        (r"\b\d+(?:\.\d+)?%", "percentage"),
        (r"\b(?:increase|decrease|ratio|rate|proportion|trend)s?\b", "quantity_word"),
    ]), 3),
    (OpportunityKind.ABSTRACT_CONCEPT, compile_table([
        (r"\b(?:concept|theory|principle|model|framework|abstract(?:ion)?)s?\b", "abstract"),
    ]), 2),
    (OpportunityKind.SYSTEM_DESCRIPTION, compile_table([
        (r"\b(?:component|interacts?|connects?|input|output|flows?|network|pipeline|architecture)s?\b", "system"),
        (r"\brelationship between\b", "relationship"),
    ]), 3),
)

TECHNICAL_DENSITY_CUTOFF = 0.15
TECHNICAL_MIN_WORDS = 40

REASONS = {
    OpportunityKind.SPATIAL: "Describes a spatial arrangement that a labelled diagram would show at a glance",
    OpportunityKind.PROCESS: "Walks through a multi-step process that suits a flowchart",
    OpportunityKind.QUANTITATIVE: "Presents quantitative data that a chart or table would make comparable",
    OpportunityKind.ABSTRACT_CONCEPT: "Explains abstract ideas that a concept map could ground",
    OpportunityKind.TECHNICAL_DENSITY: "Dense technical prose that a labelled illustration could break up",
    OpportunityKind.SYSTEM_DESCRIPTION: "Describes interacting parts that a system diagram would clarify",
}


@dataclass(frozen=True)
class VisualOpportunity:
    position: int
    paragraph_index: int
    kind: OpportunityKind
    reason: str
    excerpt: str
    covered: bool


def paragraphs(text: str) -> list[tuple[int, str]]:
    """(start offset, text) for every paragraph that is not just a heading."""
    blocks = []
    for match in PARAGRAPH_PATTERN.finditer(text):
        body = HEADING_PATTERN.sub("", match.group(0)).strip()
        if body:
            blocks.append((match.start(), match.group(0)))
    return blocks


def has_visual_reference(text: str) -> bool:
    return count_matches(VISUAL_REFERENCE_PATTERNS, text) > 0


def detect_opportunity(paragraph: str) -> OpportunityKind | None:
    """The first detector that fires for a paragraph, or None."""
    if len(paragraph.split()) < MIN_PARAGRAPH_WORDS:
        return None
    for kind, table, minimum in OPPORTUNITY_DETECTORS:
        if count_matches(table, paragraph) >= minimum:
            return kind
    if len(paragraph.split()) >= TECHNICAL_MIN_WORDS and technical_density(paragraph) >= TECHNICAL_DENSITY_CUTOFF:
        return OpportunityKind.TECHNICAL_DENSITY
    return None


def detect_visual_opportunities(text: str) -> list[VisualOpportunity]:
    blocks = paragraphs(text)
    referenced = [has_visual_reference(body) for _, body in blocks]

    opportunities = []
    for index, (start, body) in enumerate(blocks):
        kind = detect_opportunity(body)
        if kind is None:
            continue
        covered = any(referenced[max(0, index - 1): index + 2])
        excerpt = re.sub(r"\s+", " ", body).strip()[:MAX_EXCERPT]
        opportunities.append(
            VisualOpportunity(
                position=start,
                paragraph_index=index,
                kind=kind,
                reason=REASONS[kind],
                excerpt=excerpt,
                covered=covered,
            )
        )
    return opportunities
