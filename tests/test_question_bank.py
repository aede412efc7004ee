"""Tests for the in-memory question bank."""
import pytest

from exam_app.core.models import QuestionType, TopicId
from exam_app.core.services.question_bank import QuestionBank


class TestQuestionBank:
    def test_load_and_lookup(self, exact_bank):
        bank = QuestionBank(exact_bank)

        assert bank.has_questions() is True
        assert bank.get_question_count() == 40
        assert bank.get_question("institutions_k0").topic == TopicId.INSTITUTIONS
        assert bank.get_question("missing") is None

    def test_duplicates_dropped(self, question_factory):
        first = question_factory("dup")
        second = question_factory("dup", TopicId.VIVRE_FRANCE)

        bank = QuestionBank([first, second])

        assert bank.get_questions() == [first]

    def test_empty_load_rejected(self):
        with pytest.raises(ValueError):
            QuestionBank().load_questions([])

    def test_clear(self, exact_bank):
        bank = QuestionBank(exact_bank)
        bank.clear()

        assert bank.has_questions() is False

    def test_count_by_topic(self, exact_bank):
        counts = QuestionBank(exact_bank).count_by_topic()

        assert counts[TopicId.PRINCIPES_VALEURS] == 11
        assert counts[TopicId.VIVRE_FRANCE] == 4


class TestShortfalls:
    """What the selector will not be able to fill."""

    def test_exact_bank_has_none(self, exact_bank):
        assert QuestionBank(exact_bank).shortfalls() == {}

    def test_knowledge_covers_missing_situational(self, exact_bank, question_factory):
        questions = [q for q in exact_bank if q.id != "droits_devoirs_s0"]
        questions.append(question_factory("droits_devoirs_extra", TopicId.DROITS_DEVOIRS))

        assert QuestionBank(questions).shortfalls() == {}

    def test_counts_missing_questions(self, exact_bank):
        questions = [
            q
            for q in exact_bank
            if not (q.topic == TopicId.DROITS_DEVOIRS and q.type == QuestionType.SITUATIONAL)
            and q.id != "vivre_france_k0"
        ]

        assert QuestionBank(questions).shortfalls() == {
            TopicId.DROITS_DEVOIRS: 6,
            TopicId.VIVRE_FRANCE: 1,
        }
