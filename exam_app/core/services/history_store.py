"""Persistence of exam results and recently used question sets."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
import json
import logging

from pydantic import ValidationError

from exam_app.constants.exam_constants import MAX_QUESTION_SET_HISTORY
from exam_app.constants.storage_constants import (
    HISTORY_STORAGE_KEY,
    MAX_QUESTION_SETS,
    MAX_QUIZ_RESULTS,
)
from exam_app.core.models import (
    ImportErrorKind,
    ImportOutcome,
    QuizHistory,
    QuizResult,
    SaveOutcome,
)
from exam_app.core.schemas import dump_quiz_history, validate_quiz_history
from exam_app.core.services.key_value_store import (
    KeyValueStore,
    StorageError,
    StorageQuotaExceededError,
)
from exam_app.core.services.statistics import newest_first

logger = logging.getLogger(__name__)


class HistoryStore:
    """Reads and writes the :class:`QuizHistory` kept under a single storage key.

    Writes never raise. When the backend reports that its quota is exhausted
    the history is trimmed to the most recent results and question sets and
    written once more; the returned :class:`SaveOutcome` says what happened.
    Appends always land in the in-memory copy, even when nothing durable was
    written.
    """

    def __init__(self, backend: KeyValueStore, key: str = HISTORY_STORAGE_KEY) -> None:
        self._backend = backend
        self._key = key
        self._history: QuizHistory | None = None

    def load(self) -> QuizHistory:
        """Read the persisted history; unreadable data yields an empty history."""
        try:
            raw = self._backend.get(self._key)
            if not raw:
                return QuizHistory()
            return validate_quiz_history(json.loads(raw))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Stored quiz history is unreadable, starting from an empty history: %s", exc)
            return QuizHistory()

    def get_history(self) -> QuizHistory:
        """In-memory history, loaded from storage on first use."""
        if self._history is None:
            self._history = self.load()
        return self._history

    def refresh(self) -> QuizHistory:
        self._history = self.load()
        return self._history

    def save(self, history: QuizHistory) -> SaveOutcome:
        self._history = history
        try:
            self._backend.set(self._key, _serialize(history))
            return SaveOutcome(success=True)
        except StorageQuotaExceededError as exc:
            logger.error(
                "Storage quota exceeded while saving %d results and %d question sets: %s",
                len(history.results),
                len(history.used_question_sets),
                exc,
            )
        except StorageError as exc:
            logger.error("Failed to save quiz history: %s", exc)
            return SaveOutcome(success=False, error=str(exc))

        trimmed = trim_history(history)
        try:
            self._backend.set(self._key, _serialize(trimmed))
        except StorageError as exc:
            logger.error("Unable to save quiz history even after trimming: %s", exc)
            return SaveOutcome(
                success=False,
                quota_exceeded=True,
                error="Unable to save even after trimming history",
            )
        logger.warning(
            "Storage quota exceeded, history trimmed from %d to %d results",
            len(history.results),
            len(trimmed.results),
        )
        return SaveOutcome(success=True, quota_exceeded=True, trimmed=True)

    def append_result(self, result: QuizResult) -> tuple[QuizHistory, SaveOutcome]:
        history = self.get_history()
        updated = replace(
            history,
            results=[*history.results, result],
            last_quiz_date=result.date,
        )
        return updated, self.save(updated)

    def append_used_set(self, question_ids: Sequence[str]) -> tuple[QuizHistory, SaveOutcome]:
        history = self.get_history()
        used_sets = [*history.used_question_sets, list(question_ids)]
        updated = replace(history, used_question_sets=used_sets[-MAX_QUESTION_SET_HISTORY:])
        return updated, self.save(updated)

    def get_used_question_sets(self) -> list[list[str]]:
        return [list(id_set) for id_set in self.get_history().used_question_sets]

    def get_results(self) -> list[QuizResult]:
        """Return all results, newest first."""
        return newest_first(self.get_history().results)

    def get_result(self, result_id: str) -> QuizResult | None:
        return next((r for r in self.get_history().results if r.id == result_id), None)

    def clear(self) -> None:
        self._backend.clear(self._key)
        self._history = QuizHistory()

    def export_json(self) -> str:
        return json.dumps(dump_quiz_history(self.get_history()), indent=2, ensure_ascii=False)

    def import_json(self, text: str) -> ImportOutcome:
        """Replace the history with ``text`` once it parses and validates."""
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("Failed to import quiz history: %s", exc)
            return ImportOutcome(
                success=False,
                error_kind=ImportErrorKind.SYNTAX,
                error="Invalid JSON format",
            )
        try:
            history = validate_quiz_history(parsed)
        except ValidationError as exc:
            logger.error("Failed to import quiz history: %s", exc)
            return ImportOutcome(
                success=False,
                error_kind=ImportErrorKind.STRUCTURE,
                error="Invalid quiz history data structure",
            )

        previous = self._history
        outcome = self.save(history)
        if not outcome.success:
            self._history = previous
            return ImportOutcome(
                success=False,
                error_kind=ImportErrorKind.STORAGE,
                error=outcome.error,
            )
        logger.info("Quiz history imported successfully (%d results)", len(history.results))
        return ImportOutcome(success=True, result_count=len(history.results))


def trim_history(history: QuizHistory) -> QuizHistory:
    """Keep only the newest results and question sets allowed under quota pressure."""
    return replace(
        history,
        results=history.results[-MAX_QUIZ_RESULTS:],
        used_question_sets=history.used_question_sets[-MAX_QUESTION_SETS:],
    )


def _serialize(history: QuizHistory) -> str:
    return json.dumps(dump_quiz_history(history), ensure_ascii=False)
