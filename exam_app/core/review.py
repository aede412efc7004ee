"""Helpers for reviewing the questions of a finished exam."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from exam_app.core.models import Question, QuestionType, QuizAnswer, QuizResult, TopicId


class ReviewFilter(str, Enum):
    ALL = "all"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True, slots=True)
class ReviewItem:
    """One reviewed question with the candidate's answer."""

    index: int
    question: Question
    answer: QuizAnswer

    @property
    def selected_label(self) -> str | None:
        selected = self.answer.selected_choice_index
        if selected is None or not 0 <= selected < len(self.question.choices):
            return None
        return self.question.choices[selected].label

    @property
    def correct_labels(self) -> list[str]:
        return [choice.label for choice in self.question.choices if choice.is_correct]


def has_review_data(result: QuizResult) -> bool:
    """True when ``result`` carries the question/answer snapshot needed for review."""
    return bool(result.questions) and bool(result.answers)


def build_review_items(
    result: QuizResult,
    outcome: ReviewFilter = ReviewFilter.ALL,
    topic: TopicId | None = None,
    question_type: QuestionType | None = None,
) -> list[ReviewItem]:
    if not has_review_data(result):
        return []

    items: list[ReviewItem] = []
    for index, (question, answer) in enumerate(zip(result.questions, result.answers)):
        if outcome == ReviewFilter.CORRECT and not answer.is_correct:
            continue
        if outcome == ReviewFilter.INCORRECT and answer.is_correct:
            continue
        if topic is not None and question.topic != topic:
            continue
        if question_type is not None and question.type != question_type:
            continue
        items.append(ReviewItem(index=index, question=question, answer=answer))
    return items
