"""
Background analysis worker.

Runs one analysis on a daemon thread. The only channel back to the caller is
an ordered outbox of WorkerMessages.

Usage:
    worker = AnalysisWorker()
    worker.submit(AnalysisRequest(chapter))
    for message in worker.messages():
        ...
    analysis = worker.result()

cancel() seals the outbox at once: nothing more is delivered, the pipeline
thread stops at its next progress point, and result() raises
AnalysisCancelledError.
"""
from __future__ import annotations

import queue
import threading
from dataclasses import replace
from enum import Enum
from typing import Iterator, Optional

from loguru import logger

from chapterlens.analysis.engine import AnalysisEngine, PipelineState
from chapterlens.analysis.validation import validate_chapter
from chapterlens.config import Settings, get_settings
from chapterlens.errors import AnalysisCancelledError, AnalysisFailedError
from chapterlens.extraction.lexical import LexicalConceptExtractor
from chapterlens.models.analysis import ChapterAnalysis
from chapterlens.models.chapter import Chapter
from chapterlens.worker.messages import (
    AnalysisRequest,
    CompleteMessage,
    ErrorMessage,
    ProgressMessage,
    WorkerMessage,
    is_terminal,
)


class WorkerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"
    CANCELLED = "cancelled"


_CLOSED = object()


def build_engine(request: AnalysisRequest, settings: Settings) -> AnalysisEngine:
    """Engine whose extractor is configured from the request."""
    extractor = LexicalConceptExtractor(
        domain=request.domain or request.chapter.metadata.domain,
        include_cross_domain=request.include_cross_domain,
        custom_concepts=request.custom_concepts,
    )
    return AnalysisEngine(extractor=extractor, settings=settings)


def request_chapter(request: AnalysisRequest) -> Chapter:
    chapter = request.chapter
    if request.domain and request.domain != chapter.metadata.domain:
        chapter = replace(chapter, metadata=replace(chapter.metadata, domain=request.domain))
    return chapter


class AnalysisWorker:
    """Single-use worker for one analysis run."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._outbox: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._cancel_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._state = WorkerState.IDLE
        self._sealed = False
        self._result: Optional[ChapterAnalysis] = None
        self._error: Optional[str] = None

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def is_done(self) -> bool:
        return self._state in (WorkerState.COMPLETE, WorkerState.FAILED, WorkerState.CANCELLED)

    # =========================================================================
    # Caller side
    # =========================================================================

    def submit(self, request: AnalysisRequest) -> None:
        """
        Validate the request on the calling thread, then start the run.

        Raises:
            ChapterTooShortError: if the chapter is below the minimum word count
            RuntimeError: if this worker was already used
        """
        if self._thread is not None:
            raise RuntimeError("AnalysisWorker runs a single request; create a new worker")

        validate_chapter(request.chapter, self.settings.min_word_count)

        self._state = WorkerState.RUNNING
        self._thread = threading.Thread(
            target=self._run,
            args=(request,),
            name="chapterlens-analysis",
            daemon=True,
        )
        self._thread.start()

    def cancel(self) -> None:
        """Abandon the run. No further messages are delivered."""
        with self._lock:
            if self.is_done:
                return
            self._cancel_event.set()
            self._state = WorkerState.CANCELLED
            self._seal()
        logger.info("Analysis cancelled")

    def messages(self, timeout: Optional[float] = None) -> Iterator[WorkerMessage]:
        """
        Yield messages in order until the terminal message or cancellation.

        Raises:
            TimeoutError: if no message arrives within `timeout` seconds
        """
        while True:
            try:
                item = self._outbox.get(timeout=timeout)
            except queue.Empty:
                raise TimeoutError(f"No worker message within {timeout}s") from None
            if item is _CLOSED:
                return
            yield item
            if is_terminal(item):
                return

    def result(self, timeout: Optional[float] = None) -> ChapterAnalysis:
        """
        Wait for the run and return its analysis.

        Raises:
            AnalysisCancelledError: if the run was cancelled
            AnalysisFailedError: if the run ended with an error message
            TimeoutError: if the run is still going after `timeout` seconds
        """
        if self._thread is None:
            raise RuntimeError("No request submitted")
        if self._state != WorkerState.CANCELLED:
            self._thread.join(timeout)
            if self._thread.is_alive():
                raise TimeoutError(f"Analysis still running after {timeout}s")

        if self._state == WorkerState.CANCELLED:
            raise AnalysisCancelledError("Analysis was cancelled")
        if self._state == WorkerState.FAILED:
            raise AnalysisFailedError(self._error or "Analysis failed")
        return self._result

    # =========================================================================
    # Worker thread
    # =========================================================================

    def _run(self, request: AnalysisRequest) -> None:
        try:
            engine = build_engine(request, self.settings)
            analysis = engine.analyze_chapter(request_chapter(request), on_progress=self._on_progress)
        except AnalysisCancelledError:
            logger.debug("Worker thread stopped after cancellation")
            return
        except Exception as exc:
            logger.error("Analysis failed: {}", exc)
            with self._lock:
                if self._state == WorkerState.CANCELLED:
                    return
                self._error = str(exc)
                self._state = WorkerState.FAILED
                self._post(ErrorMessage(message=str(exc)))
            return

        with self._lock:
            if self._state == WorkerState.CANCELLED:
                return
            self._result = analysis
            self._state = WorkerState.COMPLETE
            self._post(CompleteMessage(result=analysis))

    def _on_progress(self, state: PipelineState, detail: str) -> None:
        if self._cancel_event.is_set():
            raise AnalysisCancelledError("Analysis was cancelled")
        # complete/error are reported by their terminal messages
        if state in (PipelineState.COMPLETE, PipelineState.ERROR):
            return
        with self._lock:
            self._post(ProgressMessage(step=state.value, detail=detail))

    def _post(self, message: WorkerMessage) -> None:
        """Queue a message unless sealed. Caller holds the lock."""
        if self._sealed:
            return
        self._outbox.put(message)
        if is_terminal(message):
            self._sealed = True

    def _seal(self) -> None:
        """Drop undelivered messages and close the outbox. Caller holds the lock."""
        self._sealed = True
        while True:
            try:
                self._outbox.get_nowait()
            except queue.Empty:
                break
        self._outbox.put(_CLOSED)


def run_analysis(request: AnalysisRequest, settings: Optional[Settings] = None) -> ChapterAnalysis:
    """Submit a request and block until its analysis is ready."""
    worker = AnalysisWorker(settings)
    worker.submit(request)
    return worker.result()
