"""Pydantic schemas guarding the JSON boundary.

Question-bank files, the stored history and user imports are all validated
here before anything reaches the domain model. The wire format uses camelCase
keys; the schemas convert to and from the dataclasses in ``models``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from exam_app.core.models import (
    Choice,
    Difficulty,
    Question,
    QuestionType,
    QuizAnswer,
    QuizHistory,
    QuizResult,
    TopicId,
    TopicPerformance,
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ChoiceSchema(_WireModel):
    label: str = Field(min_length=1)
    is_correct: bool

    def to_model(self) -> Choice:
        return Choice(label=self.label, is_correct=self.is_correct)


class QuestionSchema(_WireModel):
    id: str = Field(min_length=1)
    question: str = Field(min_length=1)
    type: QuestionType
    topic: TopicId
    choices: list[ChoiceSchema] = Field(min_length=2, max_length=6)
    explanation: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM

    @field_validator("choices")
    @classmethod
    def _require_correct_choice(cls, choices: list[ChoiceSchema]) -> list[ChoiceSchema]:
        if not any(choice.is_correct for choice in choices):
            raise ValueError("Question must have at least one correct answer")
        return choices

    def to_model(self) -> Question:
        return Question(
            id=self.id,
            text=self.question,
            type=self.type,
            topic=self.topic,
            choices=tuple(choice.to_model() for choice in self.choices),
            explanation=self.explanation,
            difficulty=self.difficulty,
        )

    @classmethod
    def from_model(cls, question: Question) -> "QuestionSchema":
        return cls(
            id=question.id,
            question=question.text,
            type=question.type,
            topic=question.topic,
            choices=[ChoiceSchema(label=c.label, is_correct=c.is_correct) for c in question.choices],
            explanation=question.explanation,
            difficulty=question.difficulty,
        )


class QuizAnswerSchema(_WireModel):
    question_id: str
    selected_choice_index: int | None
    is_correct: bool
    time_taken: float = Field(ge=0)

    def to_model(self) -> QuizAnswer:
        return QuizAnswer(
            question_id=self.question_id,
            selected_choice_index=self.selected_choice_index,
            is_correct=self.is_correct,
            time_taken=self.time_taken,
        )

    @classmethod
    def from_model(cls, answer: QuizAnswer) -> "QuizAnswerSchema":
        return cls(
            question_id=answer.question_id,
            selected_choice_index=answer.selected_choice_index,
            is_correct=answer.is_correct,
            time_taken=answer.time_taken,
        )


class TopicPerformanceSchema(_WireModel):
    topic_id: TopicId
    correct: int = Field(ge=0)
    total: int = Field(ge=0)
    percentage: int = Field(ge=0, le=100)

    def to_model(self) -> TopicPerformance:
        return TopicPerformance(
            topic_id=self.topic_id,
            correct=self.correct,
            total=self.total,
            percentage=self.percentage,
        )


class QuizResultSchema(_WireModel):
    id: str
    date: datetime
    score: int = Field(ge=0)
    total_questions: int = Field(ge=0)
    percentage: int = Field(ge=0, le=100)
    passed: bool
    time_taken: int = Field(ge=0)
    topic_performance: list[TopicPerformanceSchema]
    questions: list[QuestionSchema] | None = None
    answers: list[QuizAnswerSchema] | None = None

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, value: datetime) -> datetime:
        return _as_utc(value)

    def to_model(self) -> QuizResult:
        return QuizResult(
            id=self.id,
            date=self.date,
            score=self.score,
            total_questions=self.total_questions,
            percentage=self.percentage,
            passed=self.passed,
            time_taken=self.time_taken,
            topic_performance=tuple(row.to_model() for row in self.topic_performance),
            questions=None if self.questions is None else tuple(q.to_model() for q in self.questions),
            answers=None if self.answers is None else tuple(a.to_model() for a in self.answers),
        )

    @classmethod
    def from_model(cls, result: QuizResult) -> "QuizResultSchema":
        return cls(
            id=result.id,
            date=result.date,
            score=result.score,
            total_questions=result.total_questions,
            percentage=result.percentage,
            passed=result.passed,
            time_taken=result.time_taken,
            topic_performance=[
                TopicPerformanceSchema(
                    topic_id=row.topic_id,
                    correct=row.correct,
                    total=row.total,
                    percentage=row.percentage,
                )
                for row in result.topic_performance
            ],
            questions=None
            if result.questions is None
            else [QuestionSchema.from_model(q) for q in result.questions],
            answers=None
            if result.answers is None
            else [QuizAnswerSchema.from_model(a) for a in result.answers],
        )


class QuizHistorySchema(_WireModel):
    results: list[QuizResultSchema]
    used_question_sets: list[list[str]]
    last_quiz_date: datetime | None

    @field_validator("last_quiz_date")
    @classmethod
    def _normalize_last_quiz_date(cls, value: datetime | None) -> datetime | None:
        return None if value is None else _as_utc(value)

    def to_model(self) -> QuizHistory:
        return QuizHistory(
            results=[result.to_model() for result in self.results],
            used_question_sets=[list(id_set) for id_set in self.used_question_sets],
            last_quiz_date=self.last_quiz_date,
        )

    @classmethod
    def from_model(cls, history: QuizHistory) -> "QuizHistorySchema":
        return cls(
            results=[QuizResultSchema.from_model(result) for result in history.results],
            used_question_sets=[list(id_set) for id_set in history.used_question_sets],
            last_quiz_date=history.last_quiz_date,
        )


_QUESTION_LIST = TypeAdapter(list[QuestionSchema])


def validate_questions(data: Any) -> list[Question]:
    """Validate raw question-bank data; raises ``pydantic.ValidationError``."""
    return [schema.to_model() for schema in _QUESTION_LIST.validate_python(data)]


def validate_quiz_history(data: Any) -> QuizHistory:
    """Validate raw history data; raises ``pydantic.ValidationError``."""
    return QuizHistorySchema.model_validate(data).to_model()


def dump_quiz_history(history: QuizHistory) -> dict[str, Any]:
    """Convert ``history`` into its JSON-ready camelCase form."""
    payload = QuizHistorySchema.from_model(history).model_dump(mode="json", by_alias=True)
    # Results without a review snapshot omit the keys rather than storing nulls.
    for result in payload["results"]:
        for key in ("questions", "answers"):
            if result.get(key) is None:
                result.pop(key, None)
    return payload
