"""Domain models for the exam simulator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from exam_app.constants.exam_constants import TIME_LIMIT_SECONDS


class QuestionType(str, Enum):
    KNOWLEDGE = "knowledge"
    SITUATIONAL = "situational"


class TopicId(str, Enum):
    PRINCIPES_VALEURS = "principes_valeurs"
    INSTITUTIONS = "institutions"
    DROITS_DEVOIRS = "droits_devoirs"
    HISTOIRE_GEOGRAPHIE_CULTURE = "histoire_geographie_culture"
    VIVRE_FRANCE = "vivre_france"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SessionState(str, Enum):
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class Choice:
    """One answer option of a question."""

    label: str
    is_correct: bool


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice question as supplied by the question bank."""

    id: str
    text: str
    type: QuestionType
    topic: TopicId
    choices: tuple[Choice, ...]
    explanation: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM


@dataclass(frozen=True, slots=True)
class TopicConfig:
    """Static quota configuration of one exam topic."""

    id: TopicId
    name: str
    short_name: str
    target_count: int
    situational_count: int = 0


@dataclass(frozen=True, slots=True)
class ShuffledQuestion:
    """A question together with the choice order presented to the candidate."""

    question: Question
    shuffled_choices: tuple[Choice, ...]
    original_to_shuffled_map: tuple[int, ...]

    @property
    def id(self) -> str:
        return self.question.id

    @property
    def text(self) -> str:
        return self.question.text

    @property
    def type(self) -> QuestionType:
        return self.question.type

    @property
    def topic(self) -> TopicId:
        return self.question.topic

    @property
    def choices(self) -> tuple[Choice, ...]:
        return self.question.choices

    @property
    def explanation(self) -> str:
        return self.question.explanation

    @property
    def difficulty(self) -> Difficulty:
        return self.question.difficulty


@dataclass(slots=True)
class QuizAnswer:
    """Answer slot for one question; ``selected_choice_index`` is None until answered."""

    question_id: str
    selected_choice_index: int | None = None
    is_correct: bool = False
    time_taken: float = 0.0  # seconds spent while this question was on screen


@dataclass(slots=True)
class QuizSession:
    """State of one exam attempt."""

    id: str
    started_at: datetime
    questions: list[ShuffledQuestion]
    answers: list[QuizAnswer]
    completed_at: datetime | None = None
    current_question_index: int = 0
    time_remaining: int = TIME_LIMIT_SECONDS
    is_completed: bool = False
    is_paused: bool = False

    @property
    def state(self) -> SessionState:
        if self.is_completed:
            return SessionState.COMPLETED
        if self.is_paused:
            return SessionState.PAUSED
        return SessionState.IN_PROGRESS


@dataclass(frozen=True, slots=True)
class TopicPerformance:
    """Correct/total counts for one topic within a result."""

    topic_id: TopicId
    correct: int
    total: int
    percentage: int


@dataclass(frozen=True, slots=True)
class QuizResult:
    """Immutable scored outcome of a completed session.

    ``questions`` and ``answers`` form an optional review snapshot. Each
    snapshot question carries its choices in the order they were shown, so
    ``answers[i].selected_choice_index`` indexes ``questions[i].choices``.
    Results imported from older exports may not have one.
    """

    id: str
    date: datetime
    score: int
    total_questions: int
    percentage: int
    passed: bool
    time_taken: int
    topic_performance: tuple[TopicPerformance, ...]
    questions: tuple[Question, ...] | None = None
    answers: tuple[QuizAnswer, ...] | None = None


@dataclass(slots=True)
class QuizHistory:
    """Result log plus the rolling window of recently used question-id sets."""

    results: list[QuizResult] = field(default_factory=list)
    used_question_sets: list[list[str]] = field(default_factory=list)
    last_quiz_date: datetime | None = None


@dataclass(frozen=True, slots=True)
class SaveOutcome:
    """Outcome of writing the history to storage."""

    success: bool
    quota_exceeded: bool = False
    trimmed: bool = False
    error: str | None = None


class ImportErrorKind(str, Enum):
    FILE_TYPE = "file_type"
    FILE_TOO_LARGE = "file_too_large"
    SYNTAX = "syntax"
    STRUCTURE = "structure"
    STORAGE = "storage"


@dataclass(frozen=True, slots=True)
class ImportOutcome:
    """Outcome of importing a history export."""

    success: bool
    error_kind: ImportErrorKind | None = None
    error: str | None = None
    result_count: int = 0
