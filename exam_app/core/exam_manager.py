"""Business logic for running exams, shared between the front end and the exam clock."""

from __future__ import annotations

from collections.abc import Sequence
import logging
import random
from threading import Lock

from exam_app.constants.exam_constants import (
    PASSING_SCORE_PERCENTAGE,
    RECENT_RESULTS_COUNT,
    TIME_LIMIT_SECONDS,
    TOTAL_QUESTIONS,
)
from exam_app.constants.topic_constants import TOPICS
from exam_app.core.models import (
    ImportOutcome,
    Question,
    QuestionType,
    QuizAnswer,
    QuizHistory,
    QuizResult,
    QuizSession,
    SaveOutcome,
    SessionState,
    ShuffledQuestion,
    TopicConfig,
    TopicId,
)
from exam_app.core.question_selector import select_questions
from exam_app.core.scoring import score_session
from exam_app.core.services.exam_session import ExamProgress, ExamSession
from exam_app.core.services.history_store import HistoryStore
from exam_app.core.services.question_bank import QuestionBank
from exam_app.core.services.statistics import (
    PerformanceTotals,
    QuizStatistics,
    get_quiz_statistics,
    topic_statistics,
    type_statistics,
)

logger = logging.getLogger(__name__)


class ExamManager:
    """Facade for exam services: QuestionBank, ExamSession and HistoryStore.

    Every public method holds the same lock, so the clock thread calling
    :meth:`tick` never interleaves with an answer or a navigation step.
    """

    def __init__(
        self,
        history_store: HistoryStore,
        total_questions: int = TOTAL_QUESTIONS,
        time_limit_seconds: int = TIME_LIMIT_SECONDS,
        passing_score_percentage: int = PASSING_SCORE_PERCENTAGE,
        topics: Sequence[TopicConfig] = TOPICS,
    ) -> None:
        self._lock = Lock()

        # Services
        self._bank = QuestionBank()
        self._session = ExamSession(time_limit_seconds=time_limit_seconds)
        self._history_store = history_store

        self._total_questions = total_questions
        self._time_limit_seconds = time_limit_seconds
        self._passing_score_percentage = passing_score_percentage
        self._topics = tuple(topics)
        self._selection_rng = random.Random()
        self._last_save_outcome: SaveOutcome | None = None

    # --- Question Bank Delegation ---

    def load_question_bank(self, questions: Sequence[Question]) -> None:
        with self._lock:
            self._bank.load_questions(questions)
            shortfalls = self._bank.shortfalls(self._topics)
            if shortfalls:
                logger.warning(
                    "Question bank cannot fill every quota: %s",
                    ", ".join(f"{topic.value} -{count}" for topic, count in shortfalls.items()),
                )

    def has_question_bank(self) -> bool:
        with self._lock:
            return self._bank.has_questions()

    def get_question_count(self) -> int:
        with self._lock:
            return self._bank.get_question_count()

    def get_question_count_by_topic(self) -> dict[TopicId, int]:
        with self._lock:
            return self._bank.count_by_topic()

    # --- Exam Session Delegation ---

    def start_exam(self) -> QuizSession:
        """Draw a new exam and make it the current one, discarding any other."""
        with self._lock:
            if not self._bank.has_questions():
                raise RuntimeError("No question bank loaded; cannot start an exam.")
            used_sets = self._history_store.get_used_question_sets()
            selected = select_questions(
                self._bank.get_questions(),
                self._total_questions,
                used_sets,
                self._topics,
                self._selection_rng,
            )
            session = self._session.start(selected)
            _, outcome = self._history_store.append_used_set([q.id for q in selected])
            self._record_save_outcome(outcome, "used question set")
            logger.info("Started exam %s with %d questions", session.id, len(session.questions))
            return session

    def answer_question(self, question_index: int, choice_index: int) -> bool:
        with self._lock:
            return self._session.answer(question_index, choice_index)

    def go_to_question(self, index: int) -> int | None:
        with self._lock:
            return self._session.go_to(index)

    def next_question(self) -> int | None:
        with self._lock:
            return self._session.next()

    def prev_question(self) -> int | None:
        with self._lock:
            return self._session.prev()

    def tick(self) -> int | None:
        with self._lock:
            return self._session.tick()

    def update_time_remaining(self, seconds: int) -> None:
        with self._lock:
            self._session.set_time_remaining(seconds)

    def pause_exam(self) -> None:
        with self._lock:
            self._session.pause()

    def resume_exam(self) -> None:
        with self._lock:
            self._session.resume()

    def end_exam(self) -> QuizResult | None:
        """Score the current exam and append the result to the history."""
        with self._lock:
            result = self._session.end(self._score)
            if result is None:
                return None
            _, outcome = self._history_store.append_result(result)
            self._record_save_outcome(outcome, "exam result")
            logger.info(
                "Exam %s ended: %d/%d (%d%%), %s",
                result.id,
                result.score,
                result.total_questions,
                result.percentage,
                "passed" if result.passed else "failed",
            )
            return result

    def clear_exam(self) -> None:
        with self._lock:
            self._session.clear()

    def get_current_session(self) -> QuizSession | None:
        with self._lock:
            return self._session.get_session()

    def get_session_state(self) -> SessionState | None:
        with self._lock:
            return self._session.get_state()

    def get_current_question(self) -> ShuffledQuestion | None:
        with self._lock:
            return self._session.get_current_question()

    def get_current_answer(self) -> QuizAnswer | None:
        with self._lock:
            return self._session.get_current_answer()

    def get_progress(self) -> ExamProgress:
        with self._lock:
            return self._session.get_progress()

    def get_unanswered_count(self) -> int:
        with self._lock:
            return self._session.get_unanswered_count()

    def get_time_remaining(self) -> int | None:
        with self._lock:
            session = self._session.get_session()
            return session.time_remaining if session else None

    def is_exam_active(self) -> bool:
        with self._lock:
            return self._session.is_active()

    def is_exam_complete(self) -> bool:
        with self._lock:
            session = self._session.get_session()
            return session is not None and session.is_completed

    # --- History & Statistics ---

    def get_history(self) -> QuizHistory:
        with self._lock:
            return self._history_store.get_history()

    def refresh_history(self) -> QuizHistory:
        with self._lock:
            return self._history_store.refresh()

    def get_results(self) -> list[QuizResult]:
        with self._lock:
            return self._history_store.get_results()

    def get_recent_results(self, limit: int = RECENT_RESULTS_COUNT) -> list[QuizResult]:
        with self._lock:
            return self._history_store.get_results()[:limit]

    def get_statistics(self) -> QuizStatistics:
        with self._lock:
            return get_quiz_statistics(self._history_store.get_results())

    def get_topic_statistics(self) -> dict[TopicId, PerformanceTotals]:
        with self._lock:
            return topic_statistics(self._history_store.get_results())

    def get_type_statistics(self) -> dict[QuestionType, PerformanceTotals]:
        with self._lock:
            return type_statistics(self._history_store.get_results())

    def load_result_for_review(self, result_id: str) -> QuizResult | None:
        with self._lock:
            return self._history_store.get_result(result_id)

    def clear_history(self) -> None:
        with self._lock:
            self._history_store.clear()

    def export_history_json(self) -> str:
        with self._lock:
            return self._history_store.export_json()

    def import_history_json(self, text: str) -> ImportOutcome:
        with self._lock:
            return self._history_store.import_json(text)

    def get_last_save_outcome(self) -> SaveOutcome | None:
        with self._lock:
            return self._last_save_outcome

    # --- Settings ---

    def set_shuffle_seed(self, seed: int | None) -> None:
        """Seed both question selection and choice shuffling, mostly for tests."""
        with self._lock:
            self._selection_rng.seed(seed)
            self._session.set_shuffle_seed(seed)

    # --- Internal ---

    def _score(self, session: QuizSession) -> QuizResult:
        return score_session(
            session,
            time_limit_seconds=self._time_limit_seconds,
            passing_score_percentage=self._passing_score_percentage,
        )

    def _record_save_outcome(self, outcome: SaveOutcome, what: str) -> None:
        self._last_save_outcome = outcome
        if not outcome.success:
            logger.error("Could not persist %s, keeping it in memory only: %s", what, outcome.error)
        elif outcome.trimmed:
            logger.warning("Persisted %s after trimming old history", what)
