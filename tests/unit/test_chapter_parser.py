"""
Unit tests for ChapterParser and section validation.

Section offsets feed every position-based metric, so these tests pin down
the offset invariants.
Run: pytest tests/unit/test_chapter_parser.py -v
"""
import pytest

from chapterlens.content.parser import (
    HEADING_PATTERN,
    UNTITLED_HEADING,
    ChapterParser,
    count_words,
    validate_sections,
)
from chapterlens.errors import SectionBoundaryError
from chapterlens.models.chapter import Section


def assert_valid_offsets(chapter):
    previous_end = 0
    for section in chapter.sections:
        assert 0 <= section.start_position <= section.end_position <= len(chapter.content)
        assert section.start_position >= previous_end
        assert chapter.content[section.start_position:section.end_position] == section.content
        previous_end = section.end_position


class TestHeadingPattern:
    """Markdown heading detection."""

    def test_heading_levels(self):
        content = "# Title\n\n## Section\n\n### Subsection\n"
        matches = list(HEADING_PATTERN.finditer(content))
        assert [len(m.group(1)) for m in matches] == [1, 2, 3]
        assert [m.group(2) for m in matches] == ["Title", "Section", "Subsection"]

    def test_trailing_hashes_are_stripped(self):
        match = HEADING_PATTERN.search("## Closed heading ##\n")
        assert match.group(2) == "Closed heading"

    def test_hash_without_space_is_not_heading(self):
        assert HEADING_PATTERN.search("#hashtag in text") is None


class TestMarkdownParsing:
    """Markdown chapters split on headings."""

    def test_sections_follow_headings(self, sample_chapter):
        headings = [s.heading for s in sample_chapter.sections]
        assert headings == [
            "Memory and Learning",
            "Introduction",
            "How Working Memory Works",
            "Schemas and Long-Term Memory",
            "Practice",
            "Summary",
        ]
        assert sample_chapter.sections[0].depth == 1
        assert sample_chapter.sections[1].depth == 2

    def test_title_from_first_h1(self, sample_chapter):
        assert sample_chapter.title == "Memory and Learning"

    def test_explicit_title_wins(self, parser, sample_text):
        chapter = parser.parse_text(sample_text, title="Chapter 4")
        assert chapter.title == "Chapter 4"

    def test_offsets_are_valid(self, sample_chapter):
        assert_valid_offsets(sample_chapter)
        assert sample_chapter.sections[-1].end_position == len(sample_chapter.content)

    def test_section_word_count_excludes_heading(self, parser):
        chapter = parser.parse_text("# Title\n\none two three\n")
        assert chapter.sections[0].word_count == 3

    def test_preamble_becomes_untitled_section(self, parser):
        chapter = parser.parse_text("Opening words here.\n\n# First\n\nBody text.\n")
        assert chapter.sections[0].heading == UNTITLED_HEADING
        assert chapter.sections[0].start_position == 0
        assert chapter.sections[1].heading == "First"
        assert_valid_offsets(chapter)

    def test_word_count_and_stable_id(self, parser, sample_text):
        first = parser.parse_text(sample_text)
        second = parser.parse_text(sample_text)
        assert first.word_count == count_words(sample_text)
        assert first.id == second.id
        assert first.id.startswith("chapter-")

    def test_crlf_is_normalized(self, parser):
        chapter = parser.parse_text("# Title\r\n\r\nBody\r\n")
        assert "\r" not in chapter.content


class TestSectionBody:
    """Section.body drops the heading line only when the content starts with it."""

    def test_parsed_markdown_section(self, parser):
        chapter = parser.parse_text("## Loops ##\n\nA loop repeats.\n")
        assert chapter.sections[0].body.strip() == "A loop repeats."
        assert count_words(chapter.sections[0].body) == chapter.sections[0].word_count

    def test_parsed_plaintext_section(self, parser):
        chapter = parser.parse_text("Loops\nA loop repeats work.\n")
        assert chapter.sections[0].heading == "Loops"
        assert chapter.sections[0].body == "A loop repeats work.\n"

    def test_content_without_heading_line_is_kept(self):
        section = Section(id="s0", heading="Loops", content="Next, a loop repeats.", start_position=0,
                          end_position=21, word_count=4)
        assert section.body == "Next, a loop repeats."

    def test_untitled_section(self):
        section = Section(id="s0", heading=UNTITLED_HEADING, content="Opening words.", start_position=0,
                          end_position=14, word_count=2)
        assert section.body == "Opening words."


class TestPlaintextParsing:
    """Plain text falls back to paragraph grouping."""

    def test_short_first_line_opens_section(self, parser):
        text = "Introduction\nThis is the body text.\n\nMore text here.\n\nNext Topic\nAnother body.\n"
        chapter = parser.parse_text(text)
        assert [s.heading for s in chapter.sections] == ["Introduction", "Next Topic"]
        assert_valid_offsets(chapter)

    def test_no_headings_gives_single_untitled_section(self, parser):
        text = "Just a sentence. Another one.\n\nSecond paragraph here.\n"
        chapter = parser.parse_text(text)
        assert len(chapter.sections) == 1
        assert chapter.sections[0].heading == UNTITLED_HEADING
        assert chapter.sections[0].end_position == len(text)

    def test_empty_text_has_no_sections(self, parser):
        chapter = parser.parse_text("")
        assert chapter.sections == ()
        assert chapter.word_count == 0


class TestParseFile:
    """Reading chapters from disk."""

    def test_parse_markdown_file(self, parser, sample_chapter_file):
        chapter = parser.parse_file(sample_chapter_file, domain="psychology")
        assert chapter.metadata.domain == "psychology"
        assert chapter.metadata.source_path == str(sample_chapter_file)
        assert len(chapter.sections) == 6

    def test_missing_file_raises(self, parser, tmp_path):
        with pytest.raises(FileNotFoundError):
            parser.parse_file(tmp_path / "missing.md")

    def test_plain_file_falls_back_to_stem_title(self, parser, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("Some plain text without any heading at all.\n", encoding="utf-8")
        assert parser.parse_file(path).title == "notes"


class TestValidateSections:
    """Malformed sections are dropped or rejected."""

    @staticmethod
    def section(section_id, start, end):
        return Section(section_id, section_id, "", start, end, 0)

    def test_valid_sections_kept(self):
        sections = [self.section("a", 0, 5), self.section("b", 5, 10)]
        assert len(validate_sections("x" * 10, sections)) == 2

    def test_out_of_range_dropped(self):
        kept = validate_sections("x" * 10, [self.section("a", 0, 5), self.section("b", 5, 50)])
        assert [s.id for s in kept] == ["a"]

    def test_overlap_dropped(self):
        kept = validate_sections("x" * 10, [self.section("a", 0, 6), self.section("b", 4, 10)])
        assert [s.id for s in kept] == ["a"]

    def test_inverted_dropped(self):
        assert validate_sections("x" * 10, [self.section("a", 8, 2)]) == ()

    def test_unordered_input_is_sorted(self):
        kept = validate_sections("x" * 10, [self.section("b", 5, 10), self.section("a", 0, 5)])
        assert [s.id for s in kept] == ["a", "b"]

    def test_strict_mode_raises(self):
        with pytest.raises(SectionBoundaryError):
            validate_sections("x" * 10, [self.section("a", 0, 50)], strict=True)
