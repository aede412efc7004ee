"""Service holding the validated question bank."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from exam_app.constants.topic_constants import TOPICS
from exam_app.core.models import Question, QuestionType, TopicConfig, TopicId


class QuestionBank:
    """Keeps the question records an exam is drawn from."""

    def __init__(self, questions: Sequence[Question] = ()) -> None:
        self._questions: list[Question] = []
        if questions:
            self.load_questions(questions)

    def load_questions(self, questions: Sequence[Question]) -> None:
        """Replace the bank. Later duplicates of an id are dropped."""
        if not questions:
            raise ValueError("Question bank must contain at least one question.")
        seen: set[str] = set()
        unique: list[Question] = []
        for question in questions:
            if question.id in seen:
                continue
            seen.add(question.id)
            unique.append(question)
        self._questions = unique

    def get_questions(self) -> list[Question]:
        return list(self._questions)

    def has_questions(self) -> bool:
        return bool(self._questions)

    def get_question_count(self) -> int:
        return len(self._questions)

    def get_question(self, question_id: str) -> Question | None:
        return next((q for q in self._questions if q.id == question_id), None)

    def clear(self) -> None:
        self._questions = []

    def count_by_topic(self) -> dict[TopicId, int]:
        return dict(Counter(q.topic for q in self._questions))

    def shortfalls(self, topics: Sequence[TopicConfig] = TOPICS) -> dict[TopicId, int]:
        """Number of questions the selector will fall short by, per topic.

        Knowledge questions make up for missing situational ones, as they do
        during selection.
        """
        missing: dict[TopicId, int] = {}
        for topic in topics:
            pool = [q for q in self._questions if q.topic == topic.id]
            if topic.situational_count > 0:
                situational = sum(1 for q in pool if q.type == QuestionType.SITUATIONAL)
                knowledge = len(pool) - situational
                chosen_situational = min(situational, topic.situational_count)
                chosen_knowledge = min(knowledge, topic.target_count - chosen_situational)
                lacking = topic.target_count - chosen_situational - chosen_knowledge
            else:
                lacking = max(0, topic.target_count - len(pool))
            if lacking:
                missing[topic.id] = lacking
        return missing
