"""
Input validation run before an analysis starts.
"""
from __future__ import annotations

from dataclasses import replace

from loguru import logger

from chapterlens.content.parser import count_words, validate_sections
from chapterlens.errors import ChapterTooShortError, InputValidationError
from chapterlens.models.chapter import Chapter


def validate_chapter(chapter: Chapter, min_word_count: int) -> None:
    """
    Reject chapters that cannot be analysed.

    Raises:
        InputValidationError: if the content is not text
        ChapterTooShortError: if the chapter has fewer than min_word_count words
    """
    if not isinstance(chapter.content, str):
        raise InputValidationError("Chapter content must be text")

    words = count_words(chapter.content)
    if words < min_word_count:
        raise ChapterTooShortError(words, min_word_count)


def sanitize_chapter(chapter: Chapter) -> Chapter:
    """Drop malformed sections and correct the word count."""
    sections = validate_sections(chapter.content, chapter.sections)
    words = count_words(chapter.content)
    if sections == tuple(chapter.sections) and words == chapter.word_count:
        return chapter
    if words != chapter.word_count:
        logger.debug("Correcting word count {} -> {}", chapter.word_count, words)
    return replace(chapter, sections=sections, word_count=words)
