"""
Concept graph records.

Invariants maintained by extractors (checked by extraction.base.check_graph):
- every concept's mention positions are strictly increasing
- the hierarchy partitions the concept ids into core/supporting/detail and
  agrees with each concept's importance tier
- len(sequence) equals the total mention count across all concepts

Relationships may form cycles; consumers must not assume a DAG.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ImportanceTier(str, Enum):
    CORE = "core"
    SUPPORTING = "supporting"
    DETAIL = "detail"


class RelationshipType(str, Enum):
    PREREQUISITE = "prerequisite"
    RELATED = "related"
    CONTRASTS = "contrasts"
    EXTENDS = "extends"
    EXAMPLE = "example"


@dataclass(frozen=True)
class Mention:
    """A single occurrence of a concept in the chapter text."""
    position: int
    text: str = ""
    section_id: Optional[str] = None


@dataclass(frozen=True)
class Concept:
    """A named concept and everywhere it is mentioned."""
    id: str
    name: str
    importance: ImportanceTier
    mentions: tuple[Mention, ...]
    first_mention_position: int
    aliases: tuple[str, ...] = ()
    category: Optional[str] = None
    definition: str = ""

    @property
    def mention_positions(self) -> list[int]:
        return [m.position for m in self.mentions]


@dataclass(frozen=True)
class ConceptRelationship:
    source: str
    target: str
    type: RelationshipType
    strength: float


@dataclass(frozen=True)
class ConceptHierarchy:
    """Partition of concept ids by importance tier."""
    core: tuple[str, ...] = ()
    supporting: tuple[str, ...] = ()
    detail: tuple[str, ...] = ()

    def tier_of(self, concept_id: str) -> Optional[ImportanceTier]:
        if concept_id in self.core:
            return ImportanceTier.CORE
        if concept_id in self.supporting:
            return ImportanceTier.SUPPORTING
        if concept_id in self.detail:
            return ImportanceTier.DETAIL
        return None


@dataclass(frozen=True)
class ConceptGraph:
    """Concepts, relationships, hierarchy and the mention-ordered sequence."""
    concepts: tuple[Concept, ...] = ()
    relationships: tuple[ConceptRelationship, ...] = ()
    hierarchy: ConceptHierarchy = field(default_factory=ConceptHierarchy)
    sequence: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.concepts

    @property
    def total_mentions(self) -> int:
        return sum(len(c.mentions) for c in self.concepts)

    def get(self, concept_id: str) -> Optional[Concept]:
        for concept in self.concepts:
            if concept.id == concept_id:
                return concept
        return None

    def concepts_in_tier(self, tier: ImportanceTier) -> list[Concept]:
        return [c for c in self.concepts if c.importance == tier]

    def relationship_count(self, concept_id: str) -> int:
        """Number of relationships touching a concept, either direction."""
        return sum(
            1 for r in self.relationships
            if r.source == concept_id or r.target == concept_id
        )
