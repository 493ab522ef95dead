"""
Chapter and section value objects.

A Chapter is created once per analysis run and never mutated. Section offsets
index into Chapter.content and satisfy start <= end <= len(content); sections
are ordered by position and do not overlap.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ChapterMetadata:
    """Descriptive metadata supplied by the caller."""
    domain: str = "general"
    reading_level: Optional[str] = None
    source_path: Optional[str] = None


@dataclass(frozen=True)
class Section:
    """A heading plus the slice of chapter text it governs."""
    id: str
    heading: str
    content: str
    start_position: int
    end_position: int
    word_count: int
    depth: int = 1

    def contains(self, position: int) -> bool:
        return self.start_position <= position < self.end_position

    @property
    def body(self) -> str:
        """Section text without its heading line, when the content starts with one."""
        first_line, _, rest = self.content.lstrip().partition("\n")
        if self.heading and first_line.strip().strip("#").strip() == self.heading.strip():
            return rest
        return self.content


@dataclass(frozen=True)
class Chapter:
    """Immutable input to one analysis run."""
    id: str
    title: str
    content: str
    word_count: int
    sections: tuple[Section, ...] = ()
    metadata: ChapterMetadata = field(default_factory=ChapterMetadata)

    def section_at(self, position: int) -> Optional[Section]:
        """Return the section whose range contains a character offset."""
        for section in self.sections:
            if section.contains(position):
                return section
        return None
