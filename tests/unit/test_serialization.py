"""
Unit tests for JSON encoding and decoding at the package boundary.

Run: pytest tests/unit/test_serialization.py -v
"""
import json

import pytest
from pydantic import ValidationError

from chapterlens.analysis import AnalysisEngine
from chapterlens.models.chapter import Section
from chapterlens.models.concepts import ImportanceTier
from chapterlens.models.evaluation import Principle
from chapterlens.models.serialization import (
    analysis_from_json,
    analysis_to_dict,
    analysis_to_json,
    chapter_from_dict,
    graph_from_dict,
)


@pytest.fixture
def analysis(settings, sample_chapter):
    return AnalysisEngine(settings=settings).analyze_chapter(sample_chapter)


class TestChapterPayload:
    def test_camel_case_keys(self):
        chapter = chapter_from_dict({
            "id": "ch-1",
            "title": "Cells",
            "content": "Cells divide. Mitosis follows.",
            "wordCount": 4,
            "sections": [
                {"id": "s0", "heading": "Cells", "content": "Cells divide.", "startPosition": 0,
                 "endPosition": 13, "wordCount": 2},
            ],
            "metadata": {"domain": "biology", "readingLevel": "intro"},
        })

        assert chapter.word_count == 4
        assert chapter.sections == (
            Section(id="s0", heading="Cells", content="Cells divide.", start_position=0, end_position=13, word_count=2),
        )
        assert chapter.metadata.domain == "biology"
        assert chapter.metadata.reading_level == "intro"

    def test_missing_field(self):
        with pytest.raises(ValidationError):
            chapter_from_dict({"id": "ch-1", "content": "text", "wordCount": 1})

    def test_graph_payload(self):
        graph = graph_from_dict({
            "concepts": [{
                "id": "concept-0",
                "name": "mitosis",
                "importance": "core",
                "mentions": [{"position": 14, "text": "Mitosis", "sectionId": "s0"}],
                "firstMentionPosition": 14,
            }],
            "hierarchy": {"core": ["concept-0"]},
            "sequence": ["concept-0"],
        })
        concept = graph.concepts[0]
        assert concept.importance == ImportanceTier.CORE
        assert concept.mentions[0].section_id == "s0"
        assert graph.hierarchy.core == ("concept-0",)


class TestAnalysisPayload:
    def test_dict_uses_plain_values(self, analysis):
        payload = analysis_to_dict(analysis)

        assert payload["overall_score"] == analysis.overall_score
        assert payload["principles"][0]["principle"] == "deep_processing"
        assert payload["structure_analysis"]["pacing"] == "fast"
        assert isinstance(payload["generated_at"], str)
        json.dumps(payload)

    def test_json_text(self, analysis):
        decoded = json.loads(analysis_to_json(analysis))
        assert [p["principle"] for p in decoded["principles"]] == [p.value for p in Principle]
        assert decoded["visualizations"]["principle_scores"]["overall_weighted_score"] == analysis.overall_score

    def test_json_restores_the_analysis(self, analysis):
        assert analysis_from_json(analysis_to_json(analysis, indent=None)) == analysis
