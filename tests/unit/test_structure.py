"""
Unit tests for structure analysis, the cognitive-load curve, the concept map,
recommendation promotion and input validation.

Run: pytest tests/unit/test_structure.py -v
"""
import pytest

from chapterlens.analysis.concept_map import concept_map
from chapterlens.analysis.load_curve import cognitive_load_curve, sentence_complexity
from chapterlens.analysis.recommendations import promote_recommendations
from chapterlens.analysis.structure import (
    concept_analysis,
    concept_density,
    pacing_for,
    structure_analysis,
    transition_quality,
)
from chapterlens.analysis.validation import sanitize_chapter, validate_chapter
from chapterlens.errors import ChapterTooShortError, InputValidationError
from chapterlens.models.analysis import Pacing
from chapterlens.models.chapter import Chapter, Section
from chapterlens.models.concepts import ImportanceTier
from chapterlens.models.evaluation import Principle, PrincipleEvaluation, Priority, Suggestion


def suggestion(principle, priority, number=1, **kwargs):
    return Suggestion(
        id=f"{principle.value}-{number}",
        principle=principle,
        priority=priority,
        title=f"{principle.value} {priority.value}",
        description="",
        **kwargs,
    )


class TestStructureAnalysis:
    def test_sample_chapter(self, sample_chapter):
        structure = structure_analysis(sample_chapter)

        assert structure.section_count == 6
        assert structure.pacing == Pacing.FAST
        assert structure.scaffolding.has_introduction
        assert structure.scaffolding.has_summary
        assert structure.scaffolding.has_review
        assert structure.section_length_variance > 0

    def test_summary_heading_sets_flag(self, parser):
        chapter = parser.parse_text("## Loops\n\nA loop repeats.\n\n## Summary\n\nLoops repeat work.\n")
        assert structure_analysis(chapter).scaffolding.has_summary

    def test_no_scaffolding(self, parser):
        chapter = parser.parse_text("## Loops\n\nA loop repeats.\n\n## Lists\n\nLists hold items.\n")
        scaffolding = structure_analysis(chapter).scaffolding
        assert not (scaffolding.has_introduction or scaffolding.has_summary or scaffolding.has_review)

    @pytest.mark.parametrize("words,pacing", [
        (0, Pacing.FAST), (299, Pacing.FAST), (300, Pacing.MODERATE), (800, Pacing.MODERATE), (801, Pacing.SLOW),
    ])
    def test_pacing(self, words, pacing):
        assert pacing_for(words) == pacing

    def test_transitions_ignore_heading_line(self, parser):
        text = (
            "## One\n\nLoops repeat work.\n\n"
            "## Now that loops are clear\n\nLists hold items.\n\n"
            "## Three\n\nNow that we have lists, we can sort them.\n"
        )
        chapter = parser.parse_text(text)
        assert transition_quality(chapter.sections) == 0.5

    def test_transitions_in_sections_without_heading_lines(self):
        """Caller-built sections whose content starts with body text keep their first line."""
        first_text = "Memory has limits.\nWorking memory holds little."
        second_text = "Building on that idea, attention filters input.\nMore detail here."
        content = first_text + "\n\n" + second_text
        second_start = len(first_text) + 2
        sections = (
            Section(id="s0", heading="Limits", content=first_text, start_position=0,
                    end_position=len(first_text), word_count=7),
            Section(id="s1", heading="Attention", content=second_text, start_position=second_start,
                    end_position=len(content), word_count=10),
        )
        chapter = Chapter(id="ch", title="Memory", content=content, word_count=17, sections=sections)

        assert structure_analysis(chapter).transition_quality == 1.0

    def test_single_line_section_keeps_its_transition(self):
        sections = (
            Section(id="s0", heading="One", content="Loops repeat.", start_position=0,
                    end_position=13, word_count=2),
            Section(id="s1", heading="Two", content="However, lists differ.", start_position=14,
                    end_position=36, word_count=3),
        )
        assert transition_quality(sections) == 1.0

    def test_single_section_has_no_transitions(self, make_chapter):
        assert transition_quality(make_chapter("Only one section here.").sections) == 0.0

    def test_empty_chapter(self, empty_chapter):
        structure = structure_analysis(empty_chapter)
        assert structure.section_count == 0
        assert structure.avg_section_length == 0.0
        assert structure.transition_quality == 0.0


class TestConceptAnalysis:
    def test_density(self):
        assert concept_density(5, 1000) == 5.0
        assert concept_density(3, 0) == 0.0

    def test_summary(self, make_chapter, make_graph):
        chapter = make_chapter("word " * 500)
        graph = make_graph(
            {"a": [0, 1000], "b": [500]},
            tiers={"a": ImportanceTier.CORE},
            relationships=(("a", "b"),),
        )
        analysis = concept_analysis(chapter, graph)

        assert analysis.total_concepts_identified == 2
        assert analysis.core_concept_count == 1
        assert analysis.concept_density == 4.0
        assert analysis.novel_concepts_per_section == (2,)
        assert [p.concept_id for p in analysis.review_patterns] == ["a"]
        assert analysis.orphan_concepts == ()


class TestCognitiveLoadCurve:
    def test_one_point_per_section(self, sample_chapter, make_graph):
        graph = make_graph({"a": [60, 400, 900], "b": [500, 1500], "c": [2000]})
        curve = cognitive_load_curve(sample_chapter, graph)

        assert [p.section_id for p in curve] == [s.id for s in sample_chapter.sections]
        positions = [p.position for p in curve]
        assert positions == sorted(positions)
        for point in curve:
            assert 0.0 <= point.position < 1.0
            assert 0.0 <= point.load <= 1.0
            factors = point.factors
            for value in (factors.novel_concepts, factors.concept_density,
                          factors.sentence_complexity, factors.technical_terms):
                assert 0.0 <= value <= 1.0
        assert max(p.factors.novel_concepts for p in curve) == 1.0

    def test_no_sections(self, empty_chapter, empty_graph):
        assert cognitive_load_curve(empty_chapter, empty_graph) == ()

    def test_heading_line_is_not_part_of_a_sentence(self, parser, empty_graph):
        heading = (
            "Why long headings full of many extra words should never be counted "
            "toward the first sentence of this short section"
        )
        chapter = parser.parse_text(f"## {heading}\n\nLoops repeat work. Lists hold items.\n")
        (point,) = cognitive_load_curve(chapter, empty_graph)

        assert point.factors.sentence_complexity == 0.0

    def test_sentence_complexity_band(self):
        assert sentence_complexity("") == 0.0
        assert sentence_complexity("Short one. Another short one.") == 0.0
        assert sentence_complexity(" ".join(["word"] * 40) + ".") == 1.0


class TestConceptMap:
    def test_nodes_links_clusters(self, make_graph):
        graph = make_graph(
            {"a": [0, 10, 20], "b": [5], "c": [7]},
            tiers={"a": ImportanceTier.CORE},
            relationships=(("a", "b"),),
        )
        payload = concept_map(graph)

        assert [(n.id, n.size, n.importance) for n in payload.nodes] == [
            ("a", 3, "core"), ("b", 1, "detail"), ("c", 1, "detail"),
        ]
        assert [(l.source, l.target, l.type) for l in payload.links] == [("a", "b", "related")]
        assert [(c.name, c.concept_ids) for c in payload.clusters] == [
            ("Core concepts", ("a",)), ("Uncategorized", ("b", "c")),
        ]

    def test_library_concepts_cluster_by_category(self, sample_chapter):
        from chapterlens.extraction import LexicalConceptExtractor

        graph = LexicalConceptExtractor().extract(sample_chapter.content, sample_chapter.sections)
        clusters = {c.name: c.concept_ids for c in concept_map(graph).clusters}
        names = {c.id: c.name for c in graph.concepts}

        assert {"working memory", "long-term memory", "schema"} <= {names[cid] for cid in clusters["Cognition"]}
        assert list(clusters) == sorted(clusters)

    def test_empty(self, empty_graph):
        payload = concept_map(empty_graph)
        assert payload.nodes == () and payload.links == () and payload.clusters == ()


class TestRecommendations:
    def test_promotion_rules(self):
        evaluations = [
            PrincipleEvaluation(
                principle=Principle.DUAL_CODING,
                score=90.0,
                weight=0.8,
                suggestions=(
                    suggestion(Principle.DUAL_CODING, Priority.HIGH, 1),
                    suggestion(Principle.DUAL_CODING, Priority.MEDIUM, 2),
                ),
            ),
            PrincipleEvaluation(
                principle=Principle.SPACED_REPETITION,
                score=40.0,
                weight=0.9,
                suggestions=(
                    suggestion(Principle.SPACED_REPETITION, Priority.LOW, 1),
                    suggestion(Principle.SPACED_REPETITION, Priority.HIGH, 2),
                ),
            ),
        ]
        promoted = promote_recommendations(evaluations)

        assert [r.id for r in promoted] == [
            "rec-spaced_repetition-2",
            "rec-dual_coding-1",
            "rec-spaced_repetition-1",
        ]
        assert promoted[1].category == "Dual Coding"

    def test_action_items(self):
        evaluation = PrincipleEvaluation(
            principle=Principle.METACOGNITION,
            score=10.0,
            weight=0.75,
            suggestions=(
                suggestion(
                    Principle.METACOGNITION,
                    Priority.MEDIUM,
                    implementation="Add a self-check box",
                    examples=("Check your understanding:",),
                    expected_impact="Better calibration",
                    related_concepts=("recall",),
                ),
            ),
        )
        (recommendation,) = promote_recommendations([evaluation])

        assert recommendation.action_items == ("Add a self-check box", "Check your understanding:")
        assert recommendation.expected_outcome == "Better calibration"
        assert recommendation.affected_concepts == ("recall",)


class TestValidation:
    def test_too_short(self, make_chapter):
        with pytest.raises(ChapterTooShortError) as excinfo:
            validate_chapter(make_chapter("only a few words"), min_word_count=200)
        assert excinfo.value.word_count == 4
        assert excinfo.value.min_words == 200

    def test_long_enough(self, sample_chapter):
        validate_chapter(sample_chapter, min_word_count=200)

    def test_content_must_be_text(self):
        chapter = Chapter(id="x", title="x", content=None, word_count=0)
        with pytest.raises(InputValidationError):
            validate_chapter(chapter, min_word_count=0)

    def test_sanitize_fixes_word_count_and_drops_bad_sections(self):
        text = "one two three four"
        good = Section(id="s0", heading="A", content=text, start_position=0, end_position=len(text), word_count=4)
        bad = Section(id="s1", heading="B", content="", start_position=5, end_position=500, word_count=0)
        chapter = Chapter(id="x", title="x", content=text, word_count=99, sections=(good, bad))

        sanitized = sanitize_chapter(chapter)
        assert sanitized.word_count == 4
        assert sanitized.sections == (good,)

    def test_sanitize_keeps_valid_chapter(self, sample_chapter):
        assert sanitize_chapter(sample_chapter) is sample_chapter
