"""Stratified question selection for a single exam.

Every topic contributes a fixed number of questions. Two topics additionally
require a fixed number of situational questions, the rest of their quota being
filled with knowledge questions. Within each slice, questions that did not
appear in the last few exams ("fresh") are preferred over recently used ones,
but used questions are still drawn when the fresh pool runs dry, so the exam
reaches full length whenever the bank allows it.

A bank that cannot fill a slice yields a shorter slice. This is logged and
otherwise accepted.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import logging
import random

from exam_app.constants.exam_constants import RECENT_QUESTION_SET_WINDOW, TOTAL_QUESTIONS
from exam_app.constants.topic_constants import TOPICS
from exam_app.core.models import Question, QuestionType, TopicConfig
from exam_app.core.shuffling import shuffle

logger = logging.getLogger(__name__)


def select_questions(
    bank: Sequence[Question],
    total_count: int = TOTAL_QUESTIONS,
    recent_sets: Sequence[Sequence[str]] = (),
    topics: Sequence[TopicConfig] = TOPICS,
    rng: random.Random | None = None,
) -> list[Question]:
    """Draw up to ``total_count`` questions honoring the per-topic quotas."""
    _validate_quotas(topics, total_count)

    recently_used_ids = recent_question_ids(recent_sets)
    selected: list[Question] = []

    for topic in topics:
        topic_questions = [q for q in bank if q.topic == topic.id]

        if topic.situational_count > 0:
            situational = _prioritize_fresh(
                (q for q in topic_questions if q.type == QuestionType.SITUATIONAL),
                recently_used_ids,
                rng,
            )
            knowledge = _prioritize_fresh(
                (q for q in topic_questions if q.type == QuestionType.KNOWLEDGE),
                recently_used_ids,
                rng,
            )
            chosen_situational = situational[: topic.situational_count]
            knowledge_count = topic.target_count - len(chosen_situational)
            chosen = chosen_situational + knowledge[:knowledge_count]
        else:
            chosen = _prioritize_fresh(topic_questions, recently_used_ids, rng)[: topic.target_count]

        if len(chosen) < topic.target_count:
            logger.warning(
                "Question bank under-supplies topic %s: %d of %d questions selected",
                topic.id.value,
                len(chosen),
                topic.target_count,
            )
        selected.extend(chosen)

    return shuffle(selected, rng)


def recent_question_ids(
    recent_sets: Sequence[Sequence[str]],
    window: int = RECENT_QUESTION_SET_WINDOW,
) -> set[str]:
    """Flatten the last ``window`` question-id sets into one exclusion set."""
    if window <= 0:
        return set()
    return {question_id for id_set in recent_sets[-window:] for question_id in id_set}


def _prioritize_fresh(
    questions: Iterable[Question],
    recently_used_ids: set[str],
    rng: random.Random | None,
) -> list[Question]:
    fresh: list[Question] = []
    used: list[Question] = []
    for question in questions:
        (used if question.id in recently_used_ids else fresh).append(question)
    return shuffle(fresh, rng) + shuffle(used, rng)


def _validate_quotas(topics: Sequence[TopicConfig], total_count: int) -> None:
    quota_sum = sum(topic.target_count for topic in topics)
    if quota_sum != total_count:
        raise ValueError(
            f"Topic quotas sum to {quota_sum} but the exam requires {total_count} questions."
        )
    for topic in topics:
        if not 0 <= topic.situational_count <= topic.target_count:
            raise ValueError(
                f"Situational quota of topic {topic.id.value} must be between 0 and {topic.target_count}."
            )
