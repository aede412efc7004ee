"""Scoring of completed exam sessions."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from exam_app.constants.exam_constants import PASSING_SCORE_PERCENTAGE, TIME_LIMIT_SECONDS
from exam_app.constants.topic_constants import TOPICS
from exam_app.core.models import QuizAnswer, QuizResult, QuizSession, TopicPerformance


def calculate_percentage(value: int, total: int) -> int:
    """Return ``100 * value / total`` rounded half up, or 0 when ``total`` is 0."""
    if total <= 0:
        return 0
    # Integer arithmetic keeps exact halves (e.g. 31/40 -> 77.5) rounding up.
    return (200 * value + total) // (2 * total)


def score_session(
    session: QuizSession,
    time_limit_seconds: int = TIME_LIMIT_SECONDS,
    passing_score_percentage: int = PASSING_SCORE_PERCENTAGE,
    completed_at: datetime | None = None,
    include_snapshot: bool = True,
) -> QuizResult:
    """Turn the answers of ``session`` into a :class:`QuizResult`."""
    total_questions = len(session.questions)
    score = sum(1 for answer in session.answers if answer.is_correct)
    percentage = calculate_percentage(score, total_questions)

    questions = None
    answers = None
    if include_snapshot:
        questions = tuple(
            replace(shuffled.question, choices=shuffled.shuffled_choices)
            for shuffled in session.questions
        )
        answers = tuple(replace(answer) for answer in session.answers)

    return QuizResult(
        id=session.id,
        date=completed_at or session.completed_at or datetime.now(timezone.utc),
        score=score,
        total_questions=total_questions,
        percentage=percentage,
        passed=percentage >= passing_score_percentage,
        time_taken=max(0, time_limit_seconds - session.time_remaining),
        topic_performance=topic_breakdown(session),
        questions=questions,
        answers=answers,
    )


def topic_breakdown(session: QuizSession) -> tuple[TopicPerformance, ...]:
    """Per-topic performance in catalogue order; topics absent from the session are omitted."""
    answers_by_id: dict[str, QuizAnswer] = {answer.question_id: answer for answer in session.answers}
    rows: list[TopicPerformance] = []
    for topic in TOPICS:
        topic_questions = [q for q in session.questions if q.topic == topic.id]
        if not topic_questions:
            continue
        correct = 0
        for question in topic_questions:
            answer = answers_by_id.get(question.id)
            if answer is not None and answer.is_correct:
                correct += 1
        total = len(topic_questions)
        rows.append(
            TopicPerformance(
                topic_id=topic.id,
                correct=correct,
                total=total,
                percentage=calculate_percentage(correct, total),
            )
        )
    return tuple(rows)
