"""
Chapter parser for local text files.

Parses plain text and markdown into a Chapter whose sections carry exact
character offsets into the chapter text. The offsets are what the concept
extractor and the section-level metrics rely on, so every section produced
here satisfies 0 <= start <= end <= len(content), in order, without overlap.
"""
from __future__ import annotations

import hashlib
import re
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from chapterlens.errors import SectionBoundaryError
from chapterlens.models.chapter import Chapter, ChapterMetadata, Section

HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t#]*$", re.MULTILINE)
# A block of consecutive non-blank lines
PARAGRAPH_PATTERN = re.compile(r"(?:[^\n]*\S[^\n]*(?:\n|$))+")

UNTITLED_HEADING = "(untitled)"


def count_words(text: str) -> int:
    return len(text.split())


def validate_sections(
    content: str,
    sections: Iterable[Section],
    strict: bool = False,
) -> tuple[Section, ...]:
    """
    Keep only sections whose offsets are valid for `content`.

    Sections are ordered by start position; a section is dropped when its range
    is inverted, falls outside the text, or overlaps the previous kept section.

    Raises:
        SectionBoundaryError: on the first bad section when strict is True
    """
    valid: list[Section] = []
    previous_end = 0
    for section in sorted(sections, key=lambda s: (s.start_position, s.end_position)):
        problem = None
        if section.start_position < 0 or section.end_position > len(content):
            problem = "out of range"
        elif section.start_position > section.end_position:
            problem = "inverted range"
        elif section.start_position < previous_end:
            problem = "overlaps previous section"

        if problem:
            if strict:
                raise SectionBoundaryError(
                    f"Section {section.id!r} [{section.start_position}, {section.end_position}) {problem}"
                )
            logger.warning(
                "Dropping section {} [{}, {}): {}",
                section.id, section.start_position, section.end_position, problem,
            )
            continue

        valid.append(section)
        previous_end = section.end_position
    return tuple(valid)


class ChapterParser:
    """Parser for chapter text and files."""

    def parse_file(
        self,
        path: Path | str,
        title: Optional[str] = None,
        domain: str = "general",
    ) -> Chapter:
        """Parse a .md or .txt file into a Chapter."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Chapter file not found: {path}")

        text = path.read_text(encoding="utf-8")
        return self.parse_text(
            text,
            title=title or None,
            domain=domain,
            source_path=str(path),
            fallback_title=path.stem,
        )

    def parse_text(
        self,
        text: str,
        title: Optional[str] = None,
        chapter_id: Optional[str] = None,
        domain: str = "general",
        source_path: Optional[str] = None,
        fallback_title: str = "Untitled Chapter",
    ) -> Chapter:
        """Build a Chapter from raw text, detecting markdown headings when present."""
        text = text.replace("\r\n", "\n")

        if HEADING_PATTERN.search(text):
            sections = self._markdown_sections(text)
        else:
            sections = self._plaintext_sections(text)

        if title is None:
            title_match = re.search(r"^#[ \t]+(.+?)[ \t#]*$", text, re.MULTILINE)
            title = title_match.group(1).strip() if title_match else fallback_title

        if chapter_id is None:
            chapter_id = "chapter-" + hashlib.sha1(text.encode("utf-8")).hexdigest()[:12]

        return Chapter(
            id=chapter_id,
            title=title,
            content=text,
            word_count=count_words(text),
            sections=validate_sections(text, sections),
            metadata=ChapterMetadata(domain=domain, source_path=source_path),
        )

    def _markdown_sections(self, text: str) -> list[Section]:
        """One section per heading, spanning to the next heading."""
        sections: list[Section] = []
        matches = list(HEADING_PATTERN.finditer(text))

        # Text before the first heading
        if matches and text[: matches[0].start()].strip():
            preamble = text[: matches[0].start()]
            sections.append(
                Section(
                    id="section-0",
                    heading=UNTITLED_HEADING,
                    content=preamble,
                    start_position=0,
                    end_position=matches[0].start(),
                    word_count=count_words(preamble),
                    depth=1,
                )
            )

        for i, match in enumerate(matches):
            start = match.start()
            end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
            body = text[match.end():end]
            sections.append(
                Section(
                    id=f"section-{len(sections)}",
                    heading=match.group(2).strip(),
                    content=text[start:end],
                    start_position=start,
                    end_position=end,
                    word_count=count_words(body),
                    depth=len(match.group(1)),
                )
            )

        return sections

    def _plaintext_sections(self, text: str) -> list[Section]:
        """
        Group paragraphs into sections.

        A paragraph whose first line is short and lacks terminal punctuation,
        and which has more lines after it, opens a new section. Other
        paragraphs join the current section.
        """
        # (heading, start, body_start)
        openings: list[tuple[str, int, int]] = []

        for match in PARAGRAPH_PATTERN.finditer(text):
            lines = match.group(0).rstrip("\n").split("\n")
            first_line = lines[0].strip()
            if (
                len(lines) > 1
                and len(first_line) < 80
                and not first_line.endswith((".", "!", "?", ",", ":", ";"))
            ):
                body_start = match.start() + len(lines[0]) + 1
                openings.append((first_line, match.start(), body_start))

        if not text.strip():
            return []

        if not openings or text[: openings[0][1]].strip():
            openings.insert(0, (UNTITLED_HEADING, 0, 0))

        sections: list[Section] = []
        for i, (heading, start, body_start) in enumerate(openings):
            end = openings[i + 1][1] if i + 1 < len(openings) else len(text)
            sections.append(
                Section(
                    id=f"section-{i}",
                    heading=heading,
                    content=text[start:end],
                    start_position=start,
                    end_position=end,
                    word_count=count_words(text[body_start:end]),
                    depth=2,
                )
            )
        return sections
