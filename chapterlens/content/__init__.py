"""
Content: turning raw chapter text into a Chapter with section offsets.
"""

from .parser import ChapterParser, count_words, validate_sections

__all__ = [
    "ChapterParser",
    "count_words",
    "validate_sections",
]
