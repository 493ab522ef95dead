"""
Lexical Concept Extractor.

Builds a ConceptGraph from chapter text with regex heuristics only, in six phases:
1. Identify candidates (library terms, inline definitions, emphasis, headings,
   capitalised phrases, frequent bigrams and repeated technical words)
2. Score and filter candidates
3. Create concepts with every whole-word mention
4. Establish relationships from co-occurrence windows
5. Assign importance tiers (20% core / 30% supporting / 50% detail)
6. Flatten mentions into the position-ordered sequence

No NLP models are involved; the graph is deterministic for a given input.
"""
from __future__ import annotations

import bisect
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from loguru import logger

from chapterlens.content.parser import UNTITLED_HEADING, count_words, validate_sections
from chapterlens.extraction.base import empty_graph, hierarchy_for, sequence_for
from chapterlens.extraction.library import ConceptDefinition, build_library
from chapterlens.models.chapter import Section
from chapterlens.models.concepts import (
    Concept,
    ConceptGraph,
    ConceptRelationship,
    ImportanceTier,
    Mention,
    RelationshipType,
)

# =============================================================================
# Constants
# =============================================================================

MIN_EXTRACTION_WORDS = 20
MIN_CANDIDATE_SCORE = 20
CO_OCCURRENCE_WINDOW = 200  # characters either side of a mention
CORE_SHARE = 0.2
SUPPORTING_SHARE = 0.3
SUBSUMED_SHARE = 0.2

STOPWORDS = frozenset("""
a about above after again against all also am an and any are as at be because been before being
below between both but by can could did do does doing down during each either else even every few
for from further had has have having he her here hers him his how however i if in into is it its
itself just least less let like made make many may me might more most much must my neither no nor
not now of off often on once one only or other others our out over own per rather same she should
since so some still such than that the their them then there these they this those though through
thus to too under until up upon us very was we well were what when where whether which while who
whom whose why will with within without would yet you your yours
""".split())

COMMON_NON_CONCEPTS = frozenset("""
example examples chapter chapters section sections figure figures table tables page pages way ways
thing things lot lots part parts kind kinds sort use uses used using time times number numbers
question questions answer answers student students reader readers learner learners note notes
step steps summary introduction review overview conclusion exercise exercises idea ideas point points
case cases fact facts result results first second third next last new different important
related explain explains describe define understand remember without possible several single simple
better always really usually already little rather should because through between
following another something someone everyone people person today course lesson lessons end
""".split())

GENERIC_TERMS = frozenset({
    "object", "objects", "property", "properties", "value", "values", "data",
    "type", "types", "method", "methods", "information", "process", "system",
})

# Inline definitions: "X is defined as", "X are known as"
DEFINED_SUBJECT_PATTERN = re.compile(
    r"\b([A-Za-z][\w-]*(?:[ \t]+[A-Za-z][\w-]*){0,2})[ \t]+(?:is|are)[ \t]+"
    r"(?:defined as|called|known as|the term for)\b",
    re.IGNORECASE,
)
# Introduced terms: "called X", "known as X", "referred to as X"
INTRODUCED_TERM_PATTERN = re.compile(
    r"\b(?:called|known as|termed|referred to as|defined as)[ \t]+(?:an?[ \t]+|the[ \t]+)?"
    r"[\"'“*_]*([A-Za-z][\w-]*(?:[ \t]+[A-Za-z][\w-]*)?)",
    re.IGNORECASE,
)
EMPHASIS_PATTERN = re.compile(r"\*\*([^*\n]{2,60})\*\*|__([^_\n]{2,60})__")
CAPITALIZED_PHRASE_PATTERN = re.compile(r"\b([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)+)\b")
WORD_PATTERN = re.compile(r"[A-Za-z][A-Za-z-]*[A-Za-z]")
SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
EXPLANATORY_PATTERN = re.compile(
    r"\b(because|therefore|thus|means?|involves?|enables?|allows?|provides?|"
    r"results? in|leads to|characterized by)\b",
    re.IGNORECASE,
)
HEADING_NUMBERING = re.compile(r"^[\d.\s:)-]+")

PREREQUISITE_CUES = (
    "before {other}", "requires {other}", "depends on {other}", "builds on {other}",
    "assumes {other}", "first learn {other}", "understanding of {other}",
    "prerequisite", "foundation",
)
EXAMPLE_CUES = ("example", "instance")
CONTRAST_CUES = ("contrasts", "unlike", "whereas")
EXTENSION_CUES = ("extends", "builds")


@dataclass
class _Candidate:
    """Working record for a candidate term during phases 1-2."""
    term: str
    normalized: str
    positions: list[int] = field(default_factory=list)
    from_heading: int = 0
    inline_definitions: list[str] = field(default_factory=list)
    library: Optional[ConceptDefinition] = None
    is_definition_pattern: bool = False
    score: float = 0.0

    @property
    def frequency(self) -> int:
        return len(self.positions)


def term_pattern(terms: Iterable[str]) -> re.Pattern:
    """Case-insensitive whole-word pattern matching any of the given terms."""
    ordered = sorted({t.strip() for t in terms if t.strip()}, key=len, reverse=True)
    alternation = "|".join(re.escape(t).replace(r"\ ", r"\s+") for t in ordered)
    return re.compile(rf"(?<![\w-])(?:{alternation})(?![\w-])", re.IGNORECASE)


def dynamic_concept_cap(word_count: int) -> int:
    """Concept cap that grows sublinearly with chapter length, clamped to 180..900."""
    raw = round(180 + math.sqrt(max(1, word_count)) * 2)
    return min(900, max(180, raw))


def _normalize(term: str) -> str:
    words = term.lower().split()
    while words and words[0] in STOPWORDS:
        words.pop(0)
    while words and words[-1] in STOPWORDS:
        words.pop()
    return " ".join(words)


class LexicalConceptExtractor:
    """
    Heuristic concept extractor.

    Usage:
        extractor = LexicalConceptExtractor(include_cross_domain=True)
        graph = extractor.extract(chapter.content, chapter.sections)
    """

    def __init__(
        self,
        domain: str = "general",
        include_cross_domain: bool = True,
        custom_concepts: Sequence[ConceptDefinition] = (),
    ):
        self.domain = domain
        self.include_cross_domain = include_cross_domain
        self.custom_concepts = tuple(custom_concepts)
        self.library = build_library(include_cross_domain, self.custom_concepts)

    # =========================================================================
    # Public API
    # =========================================================================

    def extract(self, text: str, sections: Sequence[Section]) -> ConceptGraph:
        """Extract the concept graph. Too-short text yields an empty graph."""
        word_count = count_words(text)
        if word_count < MIN_EXTRACTION_WORDS:
            logger.debug("Text too short for extraction ({} words)", word_count)
            return empty_graph()

        sections = validate_sections(text, sections)

        candidates = self._identify_candidates(text, sections)
        logger.debug("Phase 1: {} candidates", len(candidates))

        scored = self._score_and_filter(candidates, text, word_count)
        logger.debug("Phase 2: {} candidates kept", len(scored))

        mention_map = self._collect_mentions(scored, text, sections)
        logger.debug("Phase 3: {} concepts with mentions", len(mention_map))

        if not mention_map:
            return empty_graph()

        concepts = self._create_concepts(mention_map)
        relationships = self._establish_relationships(concepts, text)
        logger.debug("Phase 4: {} relationships", len(relationships))

        graph = ConceptGraph(
            concepts=tuple(concepts),
            relationships=tuple(relationships),
            hierarchy=hierarchy_for(concepts),
            sequence=sequence_for(concepts),
        )
        logger.info(
            "Extracted {} concepts ({} core), {} mentions",
            len(graph.concepts), len(graph.hierarchy.core), len(graph.sequence),
        )
        return graph

    # =========================================================================
    # Phase 1: candidates
    # =========================================================================

    def _identify_candidates(self, text: str, sections: Sequence[Section]) -> dict[str, _Candidate]:
        candidates: dict[str, _Candidate] = {}

        def add(term: str, position: int | None = None) -> Optional[_Candidate]:
            normalized = _normalize(term)
            if not self._is_valid_term(normalized):
                return None
            candidate = candidates.get(normalized)
            if candidate is None:
                candidate = _Candidate(term=term.strip(), normalized=normalized)
                candidates[normalized] = candidate
            if position is not None:
                candidate.positions.append(position)
            return candidate

        # Library concepts are registered as given, short names like "AI" included
        for definition in dict.fromkeys(self.library.values()):
            matches = list(term_pattern(definition.terms).finditer(text))
            if matches:
                normalized = " ".join(definition.name.lower().split())
                candidate = candidates.setdefault(
                    normalized, _Candidate(term=definition.name.strip(), normalized=normalized)
                )
                candidate.library = definition
                candidate.positions.extend(m.start() for m in matches)

        # Inline definitions
        for pattern in (DEFINED_SUBJECT_PATTERN, INTRODUCED_TERM_PATTERN):
            for match in pattern.finditer(text):
                candidate = add(match.group(1), match.start(1))
                if candidate is not None:
                    candidate.is_definition_pattern = True
                    candidate.inline_definitions.append(self._sentence_around(text, match.start()))

        # Emphasised terms
        for match in EMPHASIS_PATTERN.finditer(text):
            term = match.group(1) or match.group(2)
            add(term, match.start())

        # Heading terms
        for section in sections:
            if section.heading == UNTITLED_HEADING:
                continue
            heading = HEADING_NUMBERING.sub("", section.heading)
            normalized = _normalize(heading)
            if normalized and len(normalized.split()) <= 3:
                candidate = add(heading)
                if candidate is not None:
                    candidate.from_heading += 1

        # Capitalised multi-word phrases
        for match in CAPITALIZED_PHRASE_PATTERN.finditer(text):
            add(match.group(1), match.start())

        # Frequent bigrams and repeated technical words
        tokens = [(m.group(0).lower(), m.start(), m.end()) for m in WORD_PATTERN.finditer(text)]
        bigrams: Counter[str] = Counter()
        words: Counter[str] = Counter()
        for (w1, s1, e1), (w2, s2, _) in zip(tokens, tokens[1:]):
            if (
                w1 not in STOPWORDS and w2 not in STOPWORDS
                and len(w1) >= 3 and len(w2) >= 3
                and text[e1:s2].strip() == ""
            ):
                bigrams[f"{w1} {w2}"] += 1
        for word, _, _ in tokens:
            if len(word) >= 6 and word not in STOPWORDS:
                words[word] += 1
        for bigram, count in bigrams.items():
            if count >= 3:
                add(bigram)
        for word, count in words.items():
            if count >= 3:
                add(word)

        return candidates

    # =========================================================================
    # Phase 2: scoring
    # =========================================================================

    def _score_and_filter(
        self,
        candidates: dict[str, _Candidate],
        text: str,
        word_count: int,
    ) -> list[_Candidate]:
        # Frequencies are recounted from whole-word matches so every source is comparable
        for candidate in candidates.values():
            terms = candidate.library.terms if candidate.library else (candidate.normalized,)
            candidate.positions = sorted({m.start() for m in term_pattern(terms).finditer(text)})

        for candidate in candidates.values():
            candidate.score = self._score(candidate, text, word_count)

        kept = [c for c in candidates.values() if c.positions and c.score > MIN_CANDIDATE_SCORE]
        kept = self._drop_subsumed(kept, text)
        kept.sort(key=lambda c: (-c.score, c.normalized))
        return kept[: dynamic_concept_cap(word_count)]

    def _score(self, candidate: _Candidate, text: str, word_count: int) -> float:
        if not candidate.positions:
            return 0.0

        score = 0.0
        term_words = len(candidate.normalized.split())

        score += min(candidate.frequency / word_count * 100, 30)
        score += candidate.from_heading * 25
        if candidate.inline_definitions:
            score += 30
        score += min(term_words * 5, 15)
        if candidate.positions[0] < len(text) * 0.1:
            score += 10
        if candidate.frequency > 1:
            score += min(candidate.frequency * 3, 20)
        if candidate.library is not None:
            score += 50
        if candidate.is_definition_pattern:
            score += 20
        if candidate.frequency >= 3:
            spread = candidate.positions[-1] - candidate.positions[0]
            if spread > len(text) * 0.3:
                score += 10

        explained = sum(
            1 for p in candidate.positions
            if EXPLANATORY_PATTERN.search(text[max(0, p - 100): p + 100])
        )
        if explained >= 2:
            score += 12

        if term_words == 1 and len(candidate.normalized) <= 4 and candidate.frequency < 3 and candidate.library is None:
            score -= 10
        if (
            candidate.normalized in GENERIC_TERMS
            and candidate.from_heading == 0
            and not candidate.inline_definitions
            and candidate.library is None
        ):
            score -= 30

        return score

    @staticmethod
    def _drop_subsumed(candidates: list[_Candidate], text: str) -> list[_Candidate]:
        """Drop single words that rarely occur outside the longer phrases containing them."""
        phrases = [c for c in candidates if " " in c.normalized]
        kept = []
        for candidate in candidates:
            if " " not in candidate.normalized and candidate.library is None:
                word = re.compile(rf"\b{re.escape(candidate.normalized)}\b")
                containing = [p.normalized for p in phrases if word.search(p.normalized)]
                if containing:
                    residual = term_pattern(containing).sub(" ", text)
                    standalone = len(term_pattern([candidate.normalized]).findall(residual))
                    if standalone < max(2, candidate.frequency * SUBSUMED_SHARE):
                        continue
            kept.append(candidate)
        return kept

    # =========================================================================
    # Phase 3: concepts and mentions
    # =========================================================================

    def _collect_mentions(
        self,
        scored: list[_Candidate],
        text: str,
        sections: Sequence[Section],
    ) -> dict[str, tuple[_Candidate, list[Mention]]]:
        starts = [s.start_position for s in sections]
        mention_map: dict[str, tuple[_Candidate, list[Mention]]] = {}

        for candidate in scored:
            terms = candidate.library.terms if candidate.library else (candidate.normalized,)
            seen: set[int] = set()
            mentions: list[Mention] = []
            for match in term_pattern(terms).finditer(text):
                if match.start() in seen:
                    continue
                seen.add(match.start())
                section_id = None
                index = bisect.bisect_right(starts, match.start()) - 1
                if index >= 0 and sections[index].contains(match.start()):
                    section_id = sections[index].id
                mentions.append(Mention(position=match.start(), text=match.group(0), section_id=section_id))
            if mentions:
                mention_map[candidate.normalized] = (candidate, mentions)

        return mention_map

    def _create_concepts(self, mention_map: dict[str, tuple[_Candidate, list[Mention]]]) -> list[Concept]:
        """Assign ids in first-mention order and fix each concept's tier."""
        ordered = sorted(
            mention_map.values(),
            key=lambda item: (item[1][0].position, item[0].normalized),
        )
        ids = {candidate.normalized: f"concept-{i}" for i, (candidate, _) in enumerate(ordered)}
        tiers = self._rank_tiers(ordered, ids)

        concepts = []
        for candidate, mentions in ordered:
            definition = candidate.library
            concept_id = ids[candidate.normalized]
            if definition is not None:
                description = definition.description or definition.category
            elif candidate.inline_definitions:
                description = candidate.inline_definitions[0]
            else:
                description = f"A key concept in this material (mentioned {len(mentions)} times)"
            concepts.append(
                Concept(
                    id=concept_id,
                    name=definition.name if definition else candidate.normalized,
                    importance=tiers[concept_id],
                    mentions=tuple(mentions),
                    first_mention_position=mentions[0].position,
                    aliases=definition.aliases if definition else (),
                    category=definition.category if definition else None,
                    definition=description,
                )
            )
        return concepts

    # =========================================================================
    # Phase 4: relationships
    # =========================================================================

    def _establish_relationships(self, concepts: list[Concept], text: str) -> list[ConceptRelationship]:
        positions = {c.id: c.mention_positions for c in concepts}
        links: dict[tuple[str, str], ConceptRelationship] = {}

        for concept in concepts:
            for position in concept.mention_positions:
                lo = position - CO_OCCURRENCE_WINDOW
                hi = position + CO_OCCURRENCE_WINDOW
                context = text[max(0, lo): hi].lower()
                for other in concepts:
                    if other.id == concept.id:
                        continue
                    other_positions = positions[other.id]
                    index = bisect.bisect_left(other_positions, lo)
                    if index >= len(other_positions) or other_positions[index] > hi:
                        continue

                    key = (concept.id, other.id)
                    existing = links.get(key)
                    if existing is not None:
                        links[key] = ConceptRelationship(
                            source=existing.source,
                            target=existing.target,
                            type=existing.type,
                            strength=round(min(existing.strength + 0.1, 1.0), 2),
                        )
                    else:
                        links[key] = ConceptRelationship(
                            source=concept.id,
                            target=other.id,
                            type=self._relationship_type(context, other.name.lower()),
                            strength=0.5,
                        )

        return list(links.values())

    @staticmethod
    def _relationship_type(context: str, other_name: str) -> RelationshipType:
        if any(cue.format(other=other_name) in context for cue in PREREQUISITE_CUES):
            return RelationshipType.PREREQUISITE
        if any(cue in context for cue in EXAMPLE_CUES):
            return RelationshipType.EXAMPLE
        if any(cue in context for cue in CONTRAST_CUES):
            return RelationshipType.CONTRASTS
        if any(cue in context for cue in EXTENSION_CUES):
            return RelationshipType.EXTENDS
        return RelationshipType.RELATED

    # =========================================================================
    # Phase 5: hierarchy
    # =========================================================================

    @staticmethod
    def _rank_tiers(
        ordered: list[tuple[_Candidate, list[Mention]]],
        ids: dict[str, str],
    ) -> dict[str, ImportanceTier]:
        total = len(ordered)
        core_count = math.ceil(total * CORE_SHARE)
        supporting_count = math.ceil(total * SUPPORTING_SHARE)

        ranked = sorted(
            ordered,
            key=lambda item: (
                -(len(item[1]) * 10 + (1000 - item[1][0].position) * 0.01),
                ids[item[0].normalized],
            ),
        )
        tiers: dict[str, ImportanceTier] = {}
        for rank, (candidate, _) in enumerate(ranked):
            if rank < core_count:
                tier = ImportanceTier.CORE
            elif rank < core_count + supporting_count:
                tier = ImportanceTier.SUPPORTING
            else:
                tier = ImportanceTier.DETAIL
            tiers[ids[candidate.normalized]] = tier
        return tiers

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _is_valid_term(normalized: str) -> bool:
        if not normalized or len(normalized) < 3 or len(normalized) > 60:
            return False
        words = normalized.split()
        if len(words) > 4:
            return False
        if normalized in STOPWORDS or normalized in COMMON_NON_CONCEPTS:
            return False
        if all(w in STOPWORDS or w in COMMON_NON_CONCEPTS for w in words):
            return False
        return any(ch.isalpha() for ch in normalized)

    @staticmethod
    def _sentence_around(text: str, position: int) -> str:
        start = max(text.rfind(".", 0, position), text.rfind("\n", 0, position)) + 1
        end_candidates = [i for i in (text.find(".", position), text.find("\n", position)) if i != -1]
        end = min(end_candidates) + 1 if end_candidates else len(text)
        return text[start:end].strip()[:160]
