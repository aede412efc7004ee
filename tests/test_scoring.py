"""Tests for percentage rounding and session scoring."""
from datetime import datetime, timezone

import pytest

from exam_app.core.models import QuestionType, TopicId
from exam_app.core.scoring import calculate_percentage, score_session, topic_breakdown
from exam_app.core.services.exam_session import ExamSession

from helpers import correct_choice_index, wrong_choice_index


def _session_with_score(questions, correct_count, seed=0):
    """Start a session over ``questions`` and answer the first ``correct_count`` correctly."""
    exam = ExamSession()
    exam.set_shuffle_seed(seed)
    session = exam.start(questions, session_id="quiz_test")
    for index, shuffled in enumerate(session.questions):
        if index < correct_count:
            exam.answer(index, correct_choice_index(shuffled))
        else:
            exam.answer(index, wrong_choice_index(shuffled))
    return session


class TestCalculatePercentage:
    """Half-up integer percentages."""

    @pytest.mark.parametrize(
        "value, total, expected",
        [
            (31, 40, 78),
            (32, 40, 80),
            (1, 3, 33),
            (2, 3, 67),
            (1, 8, 13),
            (0, 40, 0),
            (40, 40, 100),
        ],
    )
    def test_rounding(self, value, total, expected):
        assert calculate_percentage(value, total) == expected

    def test_zero_total(self):
        """No questions means 0%, never a division error."""
        assert calculate_percentage(0, 0) == 0
        assert calculate_percentage(5, 0) == 0


class TestScoreSession:
    """Turning a session into a result."""

    def test_31_of_40_fails(self, exact_bank):
        """77.5% rounds to 78%, below the 80% pass mark."""
        session = _session_with_score(exact_bank, 31)

        result = score_session(session)

        assert result.score == 31
        assert result.percentage == 78
        assert result.passed is False

    def test_32_of_40_passes(self, exact_bank):
        """32 correct answers is exactly the pass mark."""
        session = _session_with_score(exact_bank, 32)

        result = score_session(session)

        assert result.score == 32
        assert result.percentage == 80
        assert result.passed is True

    def test_unanswered_count_as_wrong(self, exact_bank):
        exam = ExamSession()
        session = exam.start(exact_bank)

        result = score_session(session)

        assert result.score == 0
        assert result.percentage == 0
        assert result.passed is False

    def test_time_taken_from_remaining(self, exact_bank):
        """Time taken is the limit minus what is left."""
        session = _session_with_score(exact_bank, 0)
        session.time_remaining = 2700 - 1234

        result = score_session(session, time_limit_seconds=2700)

        assert result.time_taken == 1234

    def test_date_prefers_explicit_value(self, exact_bank):
        session = _session_with_score(exact_bank, 0)
        when = datetime(2026, 5, 4, 12, 0, tzinfo=timezone.utc)

        assert score_session(session, completed_at=when).date == when

    def test_empty_session(self):
        """A session without questions scores 0 and fails."""
        exam = ExamSession()
        session = exam.start([])

        result = score_session(session)

        assert result.total_questions == 0
        assert result.percentage == 0
        assert result.passed is False
        assert result.topic_performance == ()

    def test_snapshot_keeps_displayed_choice_order(self, exact_bank):
        """Selected indices in the snapshot point into the stored choices."""
        session = _session_with_score(exact_bank, 40, seed=8)

        result = score_session(session)

        for question, answer in zip(result.questions, result.answers):
            assert question.choices[answer.selected_choice_index].is_correct

    def test_snapshot_can_be_skipped(self, exact_bank):
        session = _session_with_score(exact_bank, 10)

        result = score_session(session, include_snapshot=False)

        assert result.questions is None
        assert result.answers is None

    def test_snapshot_answers_are_copies(self, exact_bank):
        """Mutating the session afterwards does not alter the result."""
        session = _session_with_score(exact_bank, 5)
        result = score_session(session)

        session.answers[0].is_correct = not session.answers[0].is_correct

        assert result.answers[0].is_correct != session.answers[0].is_correct


class TestTopicBreakdown:
    """Per-topic rows of a result."""

    def test_rows_follow_catalogue_order(self, exact_bank):
        session = _session_with_score(exact_bank, 40)

        rows = topic_breakdown(session)

        assert [row.topic_id for row in rows] == [
            TopicId.PRINCIPES_VALEURS,
            TopicId.INSTITUTIONS,
            TopicId.DROITS_DEVOIRS,
            TopicId.HISTOIRE_GEOGRAPHIE_CULTURE,
            TopicId.VIVRE_FRANCE,
        ]
        assert [row.total for row in rows] == [11, 6, 11, 8, 4]
        assert all(row.percentage == 100 for row in rows)

    def test_totals_add_up(self, exact_bank):
        """Row totals sum to the question count and correct counts to the score."""
        session = _session_with_score(exact_bank, 23, seed=4)
        result = score_session(session)

        assert sum(row.total for row in result.topic_performance) == result.total_questions
        assert sum(row.correct for row in result.topic_performance) == result.score

    def test_absent_topics_are_omitted(self, question_factory):
        questions = [
            question_factory("a", TopicId.INSTITUTIONS),
            question_factory("b", TopicId.VIVRE_FRANCE, QuestionType.KNOWLEDGE),
        ]
        session = _session_with_score(questions, 1)

        rows = topic_breakdown(session)

        assert [row.topic_id for row in rows] == [TopicId.INSTITUTIONS, TopicId.VIVRE_FRANCE]
