"""Background one-second clock driving the exam timer."""

from __future__ import annotations

from collections.abc import Callable
import logging
from threading import Event, Thread

from exam_app.constants.exam_constants import CLOCK_INTERVAL_SECONDS
from exam_app.core.exam_manager import ExamManager
from exam_app.core.models import QuizResult, SessionState

logger = logging.getLogger(__name__)


class ExamClock:
    """Calls :meth:`ExamManager.tick` once per interval while an exam is running.

    The clock skips ticks while the exam is paused and ends the exam when the
    time runs out, handing the result to ``on_expired``. It stops on its own
    once the exam is no longer active.
    """

    def __init__(
        self,
        manager: ExamManager,
        interval_seconds: float = CLOCK_INTERVAL_SECONDS,
        on_tick: Callable[[int], None] | None = None,
        on_expired: Callable[[QuizResult | None], None] | None = None,
    ) -> None:
        self._manager = manager
        self._interval_seconds = interval_seconds
        self._on_tick = on_tick
        self._on_expired = on_expired
        self._stop_event = Event()
        self._thread: Thread | None = None

    def start(self) -> Thread:
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._stop_event.clear()
        self._thread = Thread(target=self._run, name="ExamClock", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval_seconds):
            state = self._manager.get_session_state()
            if state is None or state == SessionState.COMPLETED:
                break
            if state == SessionState.PAUSED:
                continue

            remaining = self._manager.tick()
            if remaining is None:
                break
            if self._on_tick is not None:
                self._on_tick(remaining)
            if remaining <= 0:
                logger.info("Exam time is up")
                result = self._manager.end_exam()
                if self._on_expired is not None:
                    self._on_expired(result)
                break
