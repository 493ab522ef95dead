"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from chapterlens.config import Settings
from chapterlens.content.parser import ChapterParser, count_words
from chapterlens.extraction.base import hierarchy_for, sequence_for
from chapterlens.models.chapter import Chapter, Section
from chapterlens.models.concepts import (
    Concept,
    ConceptGraph,
    ConceptRelationship,
    ImportanceTier,
    Mention,
    RelationshipType,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


SAMPLE_CHAPTER = """# Memory and Learning

## Introduction

By the end of this chapter, you will be able to explain how working memory and long-term memory cooperate during learning. Why does some material stick while other material fades? In this chapter, we build on the idea of attention from the previous chapter.

## How Working Memory Works

Working memory is defined as the limited-capacity store that holds information while we process it. Because working memory can hold only a few items at once, long explanations overload it. For example, a reader following a five-step derivation must keep every intermediate result in working memory. Figure 1 shows a diagram of this flow from the senses into working memory and then into long-term memory.

How does information move into long-term memory? Rehearsal and elaboration connect new items to an existing schema, which means the new item is stored together with related knowledge.

## Schemas and Long-Term Memory

A schema is an organized framework of knowledge in long-term memory. Unlike working memory, long-term memory has no practical capacity limit. When a schema is activated, working memory can treat a whole group of related ideas as a single item, which frees capacity for new material. Think of a schema as a filing cabinet: each drawer groups related folders.

Feedback helps learners correct a schema that contains a misconception. Ask yourself: how confident are you that you could explain the difference between working memory and long-term memory?

## Practice

1. Explain in your own words why working memory limits how much we can learn at once.
2. Predict what happens to recall when a reader tries to learn ten new terms in one paragraph.
3. Draw a diagram that connects working memory, long-term memory and schema.

Your turn: write a short example from your own studies where a schema helped you learn faster. This matters because you will use these ideas every time you study for a real-world exam.

## Summary

Working memory is small and fast; long-term memory is large and durable. A schema links the two, so that well-organized knowledge in long-term memory reduces the load on working memory. Check your understanding by answering the practice questions without looking back.
"""


def build_graph(
    mentions: dict[str, list[int]],
    tiers: dict[str, ImportanceTier] | None = None,
    relationships: tuple[tuple[str, str], ...] = (),
) -> ConceptGraph:
    """Graph whose concept ids and names are the keys of `mentions`."""
    tiers = tiers or {}
    concepts = tuple(
        Concept(
            id=concept_id,
            name=concept_id,
            importance=tiers.get(concept_id, ImportanceTier.DETAIL),
            mentions=tuple(Mention(position=p) for p in positions),
            first_mention_position=positions[0],
        )
        for concept_id, positions in mentions.items()
    )
    return ConceptGraph(
        concepts=concepts,
        relationships=tuple(
            ConceptRelationship(source=s, target=t, type=RelationshipType.RELATED, strength=0.5)
            for s, t in relationships
        ),
        hierarchy=hierarchy_for(concepts),
        sequence=sequence_for(concepts),
    )


def build_chapter(text: str, sections: tuple[Section, ...] | None = None, chapter_id: str = "test-chapter") -> Chapter:
    """Chapter with one section spanning the text unless sections are given."""
    if sections is None:
        sections = (
            Section(
                id="section-0",
                heading="(untitled)",
                content=text,
                start_position=0,
                end_position=len(text),
                word_count=count_words(text),
            ),
        ) if text else ()
    return Chapter(
        id=chapter_id,
        title="Test Chapter",
        content=text,
        word_count=count_words(text),
        sections=sections,
    )


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def parser():
    return ChapterParser()


@pytest.fixture
def sample_text():
    return SAMPLE_CHAPTER


@pytest.fixture
def sample_chapter(parser):
    """The sample markdown chapter, parsed."""
    return parser.parse_text(SAMPLE_CHAPTER)


@pytest.fixture
def empty_chapter():
    return Chapter(id="empty", title="Empty", content="", word_count=0)


@pytest.fixture
def empty_graph():
    return ConceptGraph()


@pytest.fixture
def make_graph():
    return build_graph


@pytest.fixture
def make_chapter():
    return build_chapter


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def sample_chapter_file(tmp_path):
    path = tmp_path / "memory.md"
    path.write_text(SAMPLE_CHAPTER, encoding="utf-8")
    return path
