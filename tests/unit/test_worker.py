"""
Unit tests for the background AnalysisWorker and its message protocol.

Run: pytest tests/unit/test_worker.py -v
"""
import threading

import pytest

from chapterlens.errors import AnalysisCancelledError, AnalysisFailedError, ChapterTooShortError
from chapterlens.extraction import ConceptDefinition
from chapterlens.worker import (
    AnalysisRequest,
    AnalysisWorker,
    CompleteMessage,
    ErrorMessage,
    ProgressMessage,
    run_analysis,
)
from chapterlens.worker.messages import is_terminal
from chapterlens.worker.runner import WorkerState, request_chapter

TIMEOUT = 30


@pytest.fixture
def worker(settings):
    return AnalysisWorker(settings)


class TestMessages:
    def test_message_types(self):
        assert ProgressMessage(step="received").type == "progress"
        assert ErrorMessage(message="boom").type == "error"
        assert is_terminal(ErrorMessage(message="boom"))
        assert not is_terminal(ProgressMessage(step="finalizing"))

    def test_domain_override(self, sample_chapter):
        chapter = request_chapter(AnalysisRequest(chapter=sample_chapter, domain="psychology"))
        assert chapter.metadata.domain == "psychology"
        assert request_chapter(AnalysisRequest(chapter=sample_chapter)) is sample_chapter


class TestWorkerRun:
    def test_progress_then_one_terminal_message(self, worker, sample_chapter):
        worker.submit(AnalysisRequest(chapter=sample_chapter))
        messages = list(worker.messages(timeout=TIMEOUT))

        assert isinstance(messages[-1], CompleteMessage)
        assert all(isinstance(m, ProgressMessage) for m in messages[:-1])
        steps = [m.step for m in messages[:-1]]
        assert steps[0] == "received"
        assert steps[-1] == "finalizing"
        assert steps.count("evaluating-principles") == 10
        assert "complete" not in steps

        analysis = worker.result(timeout=TIMEOUT)
        assert analysis is messages[-1].result
        assert worker.state == WorkerState.COMPLETE

    def test_custom_concepts_reach_the_extractor(self, worker, sample_chapter):
        request = AnalysisRequest(
            chapter=sample_chapter,
            include_cross_domain=False,
            custom_concepts=(ConceptDefinition(name="rehearsal", category="Memory Strategies"),),
        )
        worker.submit(request)
        analysis = worker.result(timeout=TIMEOUT)

        categories = {c.category for c in analysis.concept_graph.concepts}
        assert categories == {None, "Memory Strategies"}

    def test_short_chapter_rejected_on_submit(self, worker, make_chapter):
        with pytest.raises(ChapterTooShortError):
            worker.submit(AnalysisRequest(chapter=make_chapter("Too short to analyse.")))
        assert worker.state == WorkerState.IDLE

    def test_worker_is_single_use(self, worker, sample_chapter):
        worker.submit(AnalysisRequest(chapter=sample_chapter))
        with pytest.raises(RuntimeError):
            worker.submit(AnalysisRequest(chapter=sample_chapter))
        worker.result(timeout=TIMEOUT)

    def test_failure_ends_with_error_message(self, settings, sample_chapter, monkeypatch):
        def explode(self, chapter, on_progress=None):
            raise AnalysisFailedError("engine offline")

        monkeypatch.setattr("chapterlens.analysis.engine.AnalysisEngine.analyze_chapter", explode)
        worker = AnalysisWorker(settings)
        worker.submit(AnalysisRequest(chapter=sample_chapter))

        messages = list(worker.messages(timeout=TIMEOUT))
        assert messages == [ErrorMessage(message="engine offline")]
        with pytest.raises(AnalysisFailedError, match="engine offline"):
            worker.result(timeout=TIMEOUT)
        assert worker.state == WorkerState.FAILED


class TestCancellation:
    def test_cancel_stops_delivery(self, settings, sample_chapter, monkeypatch):
        started = threading.Event()
        release = threading.Event()
        original = AnalysisWorker._on_progress

        def gated(self, state, detail):
            original(self, state, detail)
            started.set()
            release.wait(TIMEOUT)

        monkeypatch.setattr(AnalysisWorker, "_on_progress", gated)
        worker = AnalysisWorker(settings)
        worker.submit(AnalysisRequest(chapter=sample_chapter))
        assert started.wait(TIMEOUT)

        worker.cancel()
        release.set()

        assert list(worker.messages(timeout=TIMEOUT)) == []
        with pytest.raises(AnalysisCancelledError):
            worker.result()
        assert worker.state == WorkerState.CANCELLED

        worker._thread.join(TIMEOUT)
        assert not worker._thread.is_alive()
        assert worker.state == WorkerState.CANCELLED

    def test_cancel_after_completion_is_a_no_op(self, worker, sample_chapter):
        worker.submit(AnalysisRequest(chapter=sample_chapter))
        analysis = worker.result(timeout=TIMEOUT)
        worker.cancel()

        assert worker.state == WorkerState.COMPLETE
        assert worker.result() is analysis


class TestRunAnalysis:
    def test_blocking_helper(self, settings, sample_chapter):
        analysis = run_analysis(AnalysisRequest(chapter=sample_chapter), settings)
        assert [e.principle.value for e in analysis.principles][0] == "deep_processing"

    def test_blocking_helper_validates(self, settings, make_chapter):
        with pytest.raises(ChapterTooShortError):
            run_analysis(AnalysisRequest(chapter=make_chapter("tiny")), settings)
