"""Service for managing the current exam attempt and its state transitions."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
import random
import time
from uuid import uuid4

from exam_app.constants.exam_constants import TIME_LIMIT_SECONDS
from exam_app.core.models import (
    Question,
    QuizAnswer,
    QuizResult,
    QuizSession,
    SessionState,
    ShuffledQuestion,
)
from exam_app.core.scoring import calculate_percentage
from exam_app.core.shuffling import shuffle_choices


@dataclass(frozen=True, slots=True)
class ExamProgress:
    """Answered/total counts of the current attempt."""

    answered: int
    total: int
    percentage: int


def generate_quiz_id() -> str:
    return f"quiz_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


class ExamSession:
    """State machine for one exam attempt.

    The attempt is ``in_progress`` or ``paused`` until :meth:`end` marks it
    ``completed``; after that answers are frozen. Out-of-range indices and
    calls without a current attempt are ignored rather than raised.
    """

    def __init__(self, time_limit_seconds: int = TIME_LIMIT_SECONDS) -> None:
        self._time_limit_seconds = time_limit_seconds
        self._session: QuizSession | None = None
        self._shuffle_rng = random.Random()

    @property
    def time_limit_seconds(self) -> int:
        return self._time_limit_seconds

    def set_shuffle_seed(self, seed: int | None) -> None:
        self._shuffle_rng.seed(seed)

    def start(self, questions: Sequence[Question], session_id: str | None = None) -> QuizSession:
        """Begin a new attempt, replacing any current one."""
        shuffled: list[ShuffledQuestion] = [shuffle_choices(q, self._shuffle_rng) for q in questions]
        self._session = QuizSession(
            id=session_id or generate_quiz_id(),
            started_at=datetime.now(timezone.utc),
            questions=shuffled,
            answers=[QuizAnswer(question_id=q.id) for q in shuffled],
            time_remaining=self._time_limit_seconds,
        )
        return self._session

    def clear(self) -> None:
        self._session = None

    def get_session(self) -> QuizSession | None:
        return self._session

    def get_state(self) -> SessionState | None:
        return self._session.state if self._session else None

    def is_active(self) -> bool:
        return self._session is not None and not self._session.is_completed

    def answer(self, question_index: int, choice_index: int) -> bool:
        """Record a choice for a question. Returns False when nothing was recorded."""
        session = self._session
        if session is None or session.is_completed:
            return False
        if not 0 <= question_index < len(session.questions):
            return False

        question = session.questions[question_index]
        is_correct = False
        if 0 <= choice_index < len(question.shuffled_choices):
            is_correct = question.shuffled_choices[choice_index].is_correct

        answer = session.answers[question_index]
        answer.selected_choice_index = choice_index
        answer.is_correct = is_correct
        return True

    def go_to(self, index: int) -> int | None:
        session = self._session
        if session is None:
            return None
        last_index = max(0, len(session.questions) - 1)
        session.current_question_index = max(0, min(index, last_index))
        return session.current_question_index

    def next(self) -> int | None:
        if self._session is None:
            return None
        return self.go_to(self._session.current_question_index + 1)

    def prev(self) -> int | None:
        if self._session is None:
            return None
        return self.go_to(self._session.current_question_index - 1)

    def tick(self) -> int | None:
        """Consume one second of the attempt; returns the time left.

        Reaching zero does not end the attempt, the caller decides when to
        call :meth:`end`.
        """
        session = self._session
        if session is None or session.is_completed:
            return None
        if session.is_paused or session.time_remaining <= 0:
            return session.time_remaining

        session.time_remaining -= 1
        if session.answers:
            session.answers[session.current_question_index].time_taken += 1
        return session.time_remaining

    def set_time_remaining(self, seconds: int) -> None:
        if self._session is None or self._session.is_completed:
            return
        self._session.time_remaining = max(0, min(seconds, self._time_limit_seconds))

    def pause(self) -> None:
        if self._session is not None and not self._session.is_completed:
            self._session.is_paused = True

    def resume(self) -> None:
        if self._session is not None and not self._session.is_completed:
            self._session.is_paused = False

    def end(self, scorer: Callable[[QuizSession], QuizResult]) -> QuizResult | None:
        """Complete the attempt and score it; None if there is nothing to end."""
        session = self._session
        if session is None or session.is_completed:
            return None
        session.is_completed = True
        session.is_paused = False
        session.completed_at = datetime.now(timezone.utc)
        return scorer(session)

    # --- Read-only views ---

    def get_current_question(self) -> ShuffledQuestion | None:
        if not self._session or not self._session.questions:
            return None
        return self._session.questions[self._session.current_question_index]

    def get_current_answer(self) -> QuizAnswer | None:
        if not self._session or not self._session.answers:
            return None
        return self._session.answers[self._session.current_question_index]

    def get_progress(self) -> ExamProgress:
        if self._session is None:
            return ExamProgress(answered=0, total=0, percentage=0)
        answered = sum(1 for a in self._session.answers if a.selected_choice_index is not None)
        total = len(self._session.questions)
        return ExamProgress(answered=answered, total=total, percentage=calculate_percentage(answered, total))

    def get_unanswered_count(self) -> int:
        if self._session is None:
            return 0
        return sum(1 for a in self._session.answers if a.selected_choice_index is None)
