"""Fixed topic catalogue and per-topic quotas for one exam."""

from __future__ import annotations

from exam_app.core.models import QuestionType, TopicConfig, TopicId

TOPICS: tuple[TopicConfig, ...] = (
    TopicConfig(
        id=TopicId.PRINCIPES_VALEURS,
        name="Principes et valeurs de la République",
        short_name="Principes & Valeurs",
        target_count=11,
        situational_count=6,
    ),
    TopicConfig(
        id=TopicId.INSTITUTIONS,
        name="Système institutionnel et politique",
        short_name="Institutions",
        target_count=6,
    ),
    TopicConfig(
        id=TopicId.DROITS_DEVOIRS,
        name="Droits et devoirs",
        short_name="Droits & Devoirs",
        target_count=11,
        situational_count=6,
    ),
    TopicConfig(
        id=TopicId.HISTOIRE_GEOGRAPHIE_CULTURE,
        name="Histoire, géographie et culture",
        short_name="Histoire & Culture",
        target_count=8,
    ),
    TopicConfig(
        id=TopicId.VIVRE_FRANCE,
        name="Vivre dans la société française",
        short_name="Vie Quotidienne",
        target_count=4,
    ),
)

TOPIC_MAP: dict[TopicId, TopicConfig] = {topic.id: topic for topic in TOPICS}

QUESTION_TYPE_NAMES: dict[QuestionType, str] = {
    QuestionType.KNOWLEDGE: "Connaissance",
    QuestionType.SITUATIONAL: "Mise en situation",
}


def get_topic_name(topic_id: TopicId, short: bool = False) -> str:
    topic = TOPIC_MAP.get(topic_id)
    if topic is None:
        return topic_id.value
    return topic.short_name if short else topic.name
