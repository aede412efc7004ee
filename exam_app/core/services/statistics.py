"""Summary statistics derived from the result log.

All functions accept results in any order and are defined on an empty log
(zeros and empty collections), so callers never need to special-case a new
user.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import timezone

from exam_app.constants.exam_constants import TREND_RESULTS_LIMIT
from exam_app.constants.topic_constants import TOPICS
from exam_app.core.models import QuestionType, QuizResult, TopicId
from exam_app.core.scoring import calculate_percentage


@dataclass(slots=True)
class PerformanceTotals:
    """Accumulated correct/total counts for one topic or question type."""

    correct: int = 0
    total: int = 0
    percentage: int = 0


@dataclass(frozen=True, slots=True)
class QuizStatistics:
    """Snapshot returned to consumers."""

    total_quizzes: int = 0
    average_score: int = 0
    pass_rate: int = 0
    best_score: int = 0
    worst_score: int = 0
    total_questions_answered: int = 0
    average_time_per_quiz: int = 0
    recent_trend: list[int] = field(default_factory=list)


def newest_first(results: Sequence[QuizResult]) -> list[QuizResult]:
    def sort_key(result: QuizResult):
        if result.date.tzinfo is None:
            return result.date.replace(tzinfo=timezone.utc)
        return result.date

    return sorted(results, key=sort_key, reverse=True)


def _rounded_mean(total: int, count: int) -> int:
    if count <= 0:
        return 0
    return (2 * total + count) // (2 * count)


def average_score(results: Sequence[QuizResult]) -> int:
    return _rounded_mean(sum(r.percentage for r in results), len(results))


def pass_rate(results: Sequence[QuizResult]) -> int:
    return calculate_percentage(sum(1 for r in results if r.passed), len(results))


def best_score(results: Sequence[QuizResult]) -> int:
    return max((r.percentage for r in results), default=0)


def worst_score(results: Sequence[QuizResult]) -> int:
    return min((r.percentage for r in results), default=0)


def total_questions_answered(results: Sequence[QuizResult]) -> int:
    return sum(r.total_questions for r in results)


def average_time_per_quiz(results: Sequence[QuizResult]) -> int:
    return _rounded_mean(sum(r.time_taken for r in results), len(results))


def recent_trend(results: Sequence[QuizResult], limit: int = TREND_RESULTS_LIMIT) -> list[int]:
    """Percentages of the ``limit`` most recent results, oldest first."""
    recent = newest_first(results)[:limit]
    return [r.percentage for r in reversed(recent)]


def get_quiz_statistics(results: Sequence[QuizResult]) -> QuizStatistics:
    if not results:
        return QuizStatistics()
    return QuizStatistics(
        total_quizzes=len(results),
        average_score=average_score(results),
        pass_rate=pass_rate(results),
        best_score=best_score(results),
        worst_score=worst_score(results),
        total_questions_answered=total_questions_answered(results),
        average_time_per_quiz=average_time_per_quiz(results),
        recent_trend=recent_trend(results),
    )


def topic_statistics(results: Sequence[QuizResult]) -> dict[TopicId, PerformanceTotals]:
    """Lifetime per-topic performance; every configured topic is present."""
    stats = {topic.id: PerformanceTotals() for topic in TOPICS}
    for result in results:
        for row in result.topic_performance:
            entry = stats.get(row.topic_id)
            if entry is None:
                continue
            entry.correct += row.correct
            entry.total += row.total
    for entry in stats.values():
        entry.percentage = calculate_percentage(entry.correct, entry.total)
    return stats


def type_statistics(results: Sequence[QuizResult]) -> dict[QuestionType, PerformanceTotals]:
    """Lifetime knowledge vs situational performance, from results with a review snapshot."""
    stats = {question_type: PerformanceTotals() for question_type in QuestionType}
    for result in results:
        if not result.questions or not result.answers:
            continue
        for question, answer in zip(result.questions, result.answers):
            entry = stats[question.type]
            entry.total += 1
            if answer.is_correct:
                entry.correct += 1
    for entry in stats.values():
        entry.percentage = calculate_percentage(entry.correct, entry.total)
    return stats
