"""Tests for the exam manager facade."""
from threading import Thread

import pytest

from exam_app.constants.storage_constants import HISTORY_STORAGE_KEY
from exam_app.core.exam_manager import ExamManager
from exam_app.core.models import QuestionType, SessionState, TopicId
from exam_app.core.services.history_store import HistoryStore
from exam_app.core.services.key_value_store import MemoryStore

from helpers import correct_choice_index


def _answer_all_correctly(manager):
    session = manager.get_current_session()
    for index, question in enumerate(session.questions):
        manager.answer_question(index, correct_choice_index(question))


class TestQuestionBank:
    """Loading and inspecting the bank."""

    def test_bank_counts(self, manager, full_bank):
        assert manager.has_question_bank() is True
        assert manager.get_question_count() == len(full_bank)
        assert manager.get_question_count_by_topic()[TopicId.INSTITUTIONS] == 20

    def test_start_without_bank(self, history_store):
        manager = ExamManager(history_store=history_store)

        with pytest.raises(RuntimeError):
            manager.start_exam()

    def test_shortfall_is_logged(self, history_store, exact_bank, caplog):
        manager = ExamManager(history_store=history_store)

        manager.load_question_bank([q for q in exact_bank if q.topic != TopicId.VIVRE_FRANCE])

        assert "vivre_france -4" in caplog.text


class TestExamFlow:
    """Start, answer, end."""

    def test_start_records_used_set(self, manager, history_store):
        session = manager.start_exam()

        used = history_store.get_used_question_sets()
        assert used == [[q.id for q in session.questions]]
        assert manager.get_session_state() == SessionState.IN_PROGRESS
        assert manager.is_exam_active() is True

    def test_consecutive_exams_avoid_recent_questions(self, manager):
        """With a large bank the second exam shares nothing with the first."""
        first = {q.id for q in manager.start_exam().questions}
        second = {q.id for q in manager.start_exam().questions}

        assert not first & second

    def test_perfect_exam(self, manager, history_store):
        manager.start_exam()
        _answer_all_correctly(manager)

        result = manager.end_exam()

        assert result.score == 40
        assert result.percentage == 100
        assert result.passed is True
        assert manager.is_exam_complete() is True
        assert history_store.get_results()[0].id == result.id
        assert history_store.get_history().last_quiz_date == result.date
        assert manager.get_last_save_outcome().success is True

    def test_end_twice(self, manager):
        manager.start_exam()

        assert manager.end_exam() is not None
        assert manager.end_exam() is None
        assert len(manager.get_results()) == 1

    def test_navigation_and_views(self, manager):
        manager.start_exam()

        assert manager.next_question() == 1
        assert manager.go_to_question(10) == 10
        assert manager.prev_question() == 9
        assert manager.get_current_question().id == manager.get_current_session().questions[9].id
        assert manager.get_current_answer().selected_choice_index is None
        assert manager.get_unanswered_count() == 40

    def test_timer_controls(self, manager):
        manager.start_exam()

        assert manager.tick() == 2699
        manager.pause_exam()
        assert manager.tick() == 2699
        manager.resume_exam()
        manager.update_time_remaining(10)
        assert manager.get_time_remaining() == 10

    def test_clear_exam(self, manager):
        manager.start_exam()
        manager.clear_exam()

        assert manager.get_current_session() is None
        assert manager.get_session_state() is None
        assert manager.end_exam() is None

    def test_seed_makes_exams_reproducible(self, full_bank):
        def draw():
            manager = ExamManager(history_store=HistoryStore(MemoryStore()))
            manager.load_question_bank(full_bank)
            manager.set_shuffle_seed(5)
            session = manager.start_exam()
            return [(q.id, q.original_to_shuffled_map) for q in session.questions]

        assert draw() == draw()

    def test_concurrent_ticks_are_serialized(self, manager):
        """Ticks from several threads never lose a second."""
        manager.start_exam()

        threads = [Thread(target=lambda: [manager.tick() for _ in range(100)]) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert manager.get_time_remaining() == 2700 - 400


class TestHistoryAndStatistics:
    """History-backed queries."""

    def test_statistics_after_two_exams(self, manager):
        manager.start_exam()
        _answer_all_correctly(manager)
        manager.end_exam()
        manager.start_exam()
        manager.end_exam()

        stats = manager.get_statistics()

        assert stats.total_quizzes == 2
        assert stats.average_score == 50
        assert stats.pass_rate == 50
        assert stats.best_score == 100
        assert stats.worst_score == 0
        assert stats.total_questions_answered == 80

    def test_topic_and_type_statistics(self, manager):
        manager.start_exam()
        _answer_all_correctly(manager)
        manager.end_exam()

        topics = manager.get_topic_statistics()
        types = manager.get_type_statistics()

        assert topics[TopicId.PRINCIPES_VALEURS].total == 11
        assert topics[TopicId.PRINCIPES_VALEURS].percentage == 100
        assert types[QuestionType.SITUATIONAL].total == 12
        assert types[QuestionType.KNOWLEDGE].total == 28

    def test_recent_results_limit(self, manager):
        for _ in range(7):
            manager.start_exam()
            manager.end_exam()

        assert len(manager.get_recent_results()) == 5
        assert len(manager.get_results()) == 7

    def test_load_result_for_review(self, manager):
        manager.start_exam()
        result = manager.end_exam()

        loaded = manager.load_result_for_review(result.id)

        assert loaded.id == result.id
        assert len(loaded.questions) == 40
        assert manager.load_result_for_review("missing") is None

    def test_clear_history(self, manager):
        manager.start_exam()
        manager.end_exam()

        manager.clear_history()

        assert manager.get_results() == []
        assert manager.get_history().used_question_sets == []

    def test_export_then_import_into_fresh_manager(self, manager):
        manager.start_exam()
        manager.end_exam()
        exported = manager.export_history_json()

        other = ExamManager(history_store=HistoryStore(MemoryStore()))
        outcome = other.import_history_json(exported)

        assert outcome.success is True
        assert outcome.result_count == 1
        assert other.get_results()[0].id == manager.get_results()[0].id

    def test_failed_save_keeps_result_in_memory(self, full_bank):
        """A result that cannot be persisted is still visible for the session."""
        store = HistoryStore(MemoryStore(quota_bytes=10))
        manager = ExamManager(history_store=store)
        manager.load_question_bank(full_bank)

        manager.start_exam()
        result = manager.end_exam()

        assert manager.get_last_save_outcome().success is False
        assert manager.get_results()[0].id == result.id

    def test_refresh_history_reloads_storage(self, manager, memory_store):
        manager.start_exam()
        manager.end_exam()
        memory_store.clear(HISTORY_STORAGE_KEY)

        assert manager.refresh_history().results == []
