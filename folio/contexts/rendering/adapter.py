"""
Rendering Engine Adapter

Drives a RenderEngine through one render as an explicit state machine:

    IDLE -> LAUNCHING -> CONTENT_LOADING -> ASSET_SETTLING -> PAGINATING -> CLOSED

ERROR is reachable from every non-terminal state and always moves on to
CLOSED, so every launched instance is torn down whatever happens. The
number of live instances is bounded by a semaphore; callers that cannot get
an instance within the queue timeout receive RenderEngineBusy.

Engine steps run on a per-render worker thread. A cancelled caller returns
immediately; the instance is closed and its slot freed once the engine step
in flight returns.
"""

import os
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

from dotenv import load_dotenv

from folio.contexts.rendering.engine import EngineSession, RenderEngine
from folio.contexts.rendering.exceptions import (
    RenderCancelled,
    RenderEngineBusy,
    RenderEngineFailure,
    RenderTimeout,
)
from folio.contexts.rendering.logger import (
    _log_warning,
    log_render_abandoned,
    log_render_result,
    log_render_start,
    log_settle_skipped,
    log_transition,
)
from folio.contexts.templating.markup import MarkupDocument
from folio.utils.pdf_processing import looks_like_pdf, page_count

load_dotenv()
ENGINE_MAX_INSTANCES = int(os.getenv("FOLIO_ENGINE_MAX_INSTANCES", "4"))
ENGINE_QUEUE_TIMEOUT_S = float(os.getenv("FOLIO_ENGINE_QUEUE_TIMEOUT_S", "60"))
CONTENT_TIMEOUT_S = float(os.getenv("FOLIO_CONTENT_TIMEOUT_S", "30"))
SETTLE_GRACE_S = float(os.getenv("FOLIO_SETTLE_GRACE_S", "0.5"))
REQUEST_TIMEOUT_S = float(os.getenv("FOLIO_REQUEST_TIMEOUT_S", "90"))

PDF_MIME_TYPE = "application/pdf"

# Granularity for noticing cancellation while queued or rendering
_POLL_INTERVAL_S = 0.05


class RenderState(str, Enum):
    IDLE = "idle"
    LAUNCHING = "launching"
    CONTENT_LOADING = "content-loading"
    ASSET_SETTLING = "asset-settling"
    PAGINATING = "paginating"
    CLOSED = "closed"
    ERROR = "error"


@dataclass
class RenderResult:
    """
    Result of a successful render.

    Attributes:
        content: Complete PDF binary
        filename: Suggested download filename
        mime_type: Always application/pdf
        page_count: Number of pages, None if the PDF could not be inspected
        diagnostics: Non-fatal problems (skipped sub-documents, missing assets)
        transitions: Engine states visited, in order
    """

    content: bytes
    filename: str
    mime_type: str = PDF_MIME_TYPE
    page_count: Optional[int] = None
    diagnostics: List[str] = field(default_factory=list)
    transitions: Tuple[str, ...] = ()


class _RenderRun:
    """Per-render bookkeeping: current state, visited states, deadline."""

    def __init__(self, filename: str, deadline: float, clock: Callable[[], float], cancel_event):
        self.filename = filename
        self.deadline = deadline
        self.clock = clock
        self.cancel_event = cancel_event
        self.state = RenderState.IDLE
        # Last state that did real work; ERROR and CLOSED never replace it
        self.step = RenderState.IDLE
        self.transitions: List[str] = [RenderState.IDLE.value]

    def enter(self, state: RenderState) -> None:
        self.state = state
        if state not in (RenderState.ERROR, RenderState.CLOSED):
            self.step = state
        self.transitions.append(state.value)
        log_transition(self.filename, state.value)

    def remaining(self) -> float:
        return self.deadline - self.clock()

    def checkpoint(self) -> None:
        """Raise if the caller cancelled or the overall deadline passed."""
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise RenderCancelled("Render cancelled by caller", state=self.state.value)
        if self.remaining() <= 0:
            raise RenderTimeout("Render exceeded the request deadline", state=self.state.value)


class RenderEngineAdapter:
    """
    Bounded, always-tearing-down front end to a RenderEngine.

    Example:
        adapter = RenderEngineAdapter(PlaywrightEngine())
        result = adapter.render(document, "Proposal-P-001.pdf")
        Path(result.filename).write_bytes(result.content)
    """

    def __init__(
        self,
        engine: RenderEngine,
        max_instances: Optional[int] = None,
        queue_timeout_s: Optional[float] = None,
        content_timeout_s: Optional[float] = None,
        settle_grace_s: Optional[float] = None,
        request_timeout_s: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.engine = engine
        self.max_instances = max_instances or ENGINE_MAX_INSTANCES
        self.queue_timeout_s = ENGINE_QUEUE_TIMEOUT_S if queue_timeout_s is None else queue_timeout_s
        self.content_timeout_s = CONTENT_TIMEOUT_S if content_timeout_s is None else content_timeout_s
        self.settle_grace_s = SETTLE_GRACE_S if settle_grace_s is None else settle_grace_s
        self.request_timeout_s = REQUEST_TIMEOUT_S if request_timeout_s is None else request_timeout_s
        self.clock = clock

        self._slots = threading.BoundedSemaphore(self.max_instances)
        self._live_lock = threading.Lock()
        self._live_instances = 0

    @property
    def live_instances(self) -> int:
        """Engine instances currently launched and not yet closed."""
        with self._live_lock:
            return self._live_instances

    def render(
        self,
        document: Union[MarkupDocument, str],
        filename: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> RenderResult:
        """
        Render a document (or ready-made HTML) to a Letter-size PDF.

        Args:
            document: MarkupDocument to serialize, or an HTML string
            filename: Filename to report on the result
            cancel_event: Set by the caller to abandon the render

        Returns:
            RenderResult holding the complete PDF

        Raises:
            RenderEngineBusy: No instance became free within the queue timeout
            RenderTimeout: Content load or the overall request deadline timed out
            RenderCancelled: cancel_event was set
            RenderEngineFailure: The engine failed to launch, load or paginate
        """
        started = self.clock()
        run = _RenderRun(filename, started + self.request_timeout_s, self.clock, cancel_event)
        html = document.to_html() if isinstance(document, MarkupDocument) else str(document)
        log_render_start(filename, len(html), self.live_instances)

        try:
            self._acquire_slot(run)
        except RenderEngineFailure as e:
            run.enter(RenderState.ERROR)
            run.enter(RenderState.CLOSED)
            log_render_result(filename, False, self.clock() - started, transitions=run.transitions, error=e)
            raise

        error: Optional[BaseException] = None
        content = b""
        pages = None
        try:
            content = self._drive_in_worker(run, html)
            pages = page_count(content)
        except BaseException as e:
            error = e
            raise
        finally:
            log_render_result(
                filename,
                error is None,
                self.clock() - started,
                page_count=pages,
                transitions=list(run.transitions),
                error=error,
            )

        return RenderResult(
            content=content,
            filename=filename,
            page_count=pages,
            transitions=tuple(run.transitions),
        )

    def _acquire_slot(self, run: _RenderRun) -> None:
        queue_deadline = min(self.clock() + self.queue_timeout_s, run.deadline)
        while True:
            if run.cancel_event is not None and run.cancel_event.is_set():
                raise RenderCancelled("Render cancelled while queued", state=run.state.value)

            wait = min(_POLL_INTERVAL_S, queue_deadline - self.clock())
            if wait <= 0:
                break
            if self._slots.acquire(timeout=wait):
                return

        if run.remaining() <= 0:
            raise RenderTimeout("Request deadline passed while queued", state=run.state.value)
        raise RenderEngineBusy(
            f"No engine instance free after {self.queue_timeout_s}s ({self.max_instances} in use)",
            state=run.state.value,
        )

    def _drive_in_worker(self, run: _RenderRun, html: str) -> bytes:
        """
        Run the engine steps on a dedicated thread and wait for them.

        Engine steps block, so the caller waits here instead, polling the
        cancel event. A cancelled caller stops waiting at once; the worker
        tears the instance down and frees its slot when the in-flight step
        returns. The whole session stays on the worker thread because
        Playwright's sync API is bound to the thread that started it.
        """
        outcome = {}
        finished = threading.Event()

        def work():
            try:
                outcome["content"] = self._drive(run, html)
            except BaseException as e:
                outcome["error"] = e
            finally:
                self._slots.release()
                finished.set()

        worker = threading.Thread(target=work, name=f"folio-render-{run.filename}", daemon=True)
        try:
            worker.start()
        except BaseException:
            self._slots.release()
            raise

        while not finished.wait(_POLL_INTERVAL_S):
            if run.cancel_event is not None and run.cancel_event.is_set() and not finished.is_set():
                log_render_abandoned(run.filename, run.step.value)
                raise RenderCancelled("Render cancelled by caller", state=run.step.value)

        if "error" in outcome:
            raise outcome["error"]
        return outcome["content"]

    def _drive(self, run: _RenderRun, html: str) -> bytes:
        session: Optional[EngineSession] = None
        try:
            run.enter(RenderState.LAUNCHING)
            run.checkpoint()
            try:
                session = self.engine.launch()
            except Exception as e:
                raise RenderEngineFailure("Engine failed to launch", state=run.state.value, original_error=e) from e
            with self._live_lock:
                self._live_instances += 1

            run.enter(RenderState.CONTENT_LOADING)
            run.checkpoint()
            try:
                session.load(html, min(self.content_timeout_s, run.remaining()))
            except TimeoutError as e:
                raise RenderTimeout("Content did not load in time", state=run.state.value, original_error=e) from e
            except Exception as e:
                raise RenderEngineFailure("Content failed to load", state=run.state.value, original_error=e) from e

            run.enter(RenderState.ASSET_SETTLING)
            run.checkpoint()
            try:
                session.settle(min(self.settle_grace_s, max(run.remaining(), 0.0)))
            except Exception as e:
                # Best effort: a slow image must not cost the whole document
                log_settle_skipped(run.filename, e)

            run.enter(RenderState.PAGINATING)
            run.checkpoint()
            try:
                content = session.paginate()
            except Exception as e:
                raise RenderEngineFailure("Pagination failed", state=run.state.value, original_error=e) from e
            if not content or not looks_like_pdf(content):
                raise RenderEngineFailure("Engine returned an incomplete PDF", state=run.state.value)
            run.checkpoint()
            return content
        except RenderEngineFailure:
            run.enter(RenderState.ERROR)
            raise
        except Exception as e:
            failed_in = run.state.value
            run.enter(RenderState.ERROR)
            raise RenderEngineFailure("Unexpected engine error", state=failed_in, original_error=e) from e
        finally:
            if session is not None:
                self._teardown(run, session)
            run.enter(RenderState.CLOSED)

    def _teardown(self, run: _RenderRun, session: EngineSession) -> None:
        try:
            session.close()
        except Exception as e:
            _log_warning(f"{run.filename}: engine close raised {type(e).__name__}: {e}")
        finally:
            with self._live_lock:
                self._live_instances -= 1
