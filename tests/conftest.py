"""Shared fixtures for the exam simulator tests."""
from datetime import datetime, timedelta, timezone

import pytest

from exam_app.constants.topic_constants import TOPICS
from exam_app.core.exam_manager import ExamManager
from exam_app.core.models import (
    Choice,
    Question,
    QuestionType,
    QuizResult,
    TopicId,
)
from exam_app.core.services.history_store import HistoryStore
from exam_app.core.services.key_value_store import MemoryStore


def _make_question(question_id, topic=TopicId.INSTITUTIONS, question_type=QuestionType.KNOWLEDGE, correct_index=0, choice_count=4):
    return Question(
        id=question_id,
        text=f"Question {question_id} ?",
        type=question_type,
        topic=topic,
        choices=tuple(
            Choice(label=f"{question_id} option {i}", is_correct=i == correct_index)
            for i in range(choice_count)
        ),
        explanation=f"Explanation {question_id}",
    )


def _make_bank(knowledge_per_topic=20, situational_per_topic=12):
    bank = []
    for topic in TOPICS:
        for n in range(knowledge_per_topic):
            bank.append(_make_question(f"{topic.id.value}_k{n}", topic.id, QuestionType.KNOWLEDGE, correct_index=n % 4))
        if topic.situational_count:
            for n in range(situational_per_topic):
                bank.append(_make_question(f"{topic.id.value}_s{n}", topic.id, QuestionType.SITUATIONAL, correct_index=n % 4))
    return bank


def _make_result(result_id="r1", percentage=80, date=None, passed=None, time_taken=1200, total_questions=40, questions=None, answers=None, topic_performance=()):
    score = (percentage * total_questions) // 100
    return QuizResult(
        id=result_id,
        date=date or datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc),
        score=score,
        total_questions=total_questions,
        percentage=percentage,
        passed=percentage >= 80 if passed is None else passed,
        time_taken=time_taken,
        topic_performance=tuple(topic_performance),
        questions=questions,
        answers=answers,
    )


@pytest.fixture
def question_factory():
    """Build a single question; the correct choice is ``correct_index``."""
    return _make_question


@pytest.fixture
def bank_factory():
    """Build a bank with the given number of questions per topic and type."""
    return _make_bank


@pytest.fixture
def result_factory():
    """Build a stored result with sensible defaults."""
    return _make_result


@pytest.fixture
def full_bank():
    """Bank able to fill every quota with fresh questions at least twice."""
    return _make_bank()


@pytest.fixture
def exact_bank():
    """Bank holding exactly what one exam needs."""
    bank = []
    for topic in TOPICS:
        knowledge = topic.target_count - topic.situational_count
        for n in range(knowledge):
            bank.append(_make_question(f"{topic.id.value}_k{n}", topic.id, QuestionType.KNOWLEDGE))
        for n in range(topic.situational_count):
            bank.append(_make_question(f"{topic.id.value}_s{n}", topic.id, QuestionType.SITUATIONAL))
    return bank


@pytest.fixture
def dated_results():
    """Twelve results one day apart; the newest (r11) scored 91%."""
    start = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)
    return [
        _make_result(f"r{n}", percentage=80 + n, date=start + timedelta(days=n))
        for n in range(12)
    ]


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def history_store(memory_store):
    return HistoryStore(memory_store)


@pytest.fixture
def manager(history_store, full_bank):
    """Manager with a loaded bank and fixed shuffle seed."""
    exam_manager = ExamManager(history_store=history_store)
    exam_manager.load_question_bank(full_bank)
    exam_manager.set_shuffle_seed(1234)
    return exam_manager

