"""Utilities for exporting the exam history to a file and importing it back."""

from __future__ import annotations

from datetime import date
import logging
from pathlib import Path

from exam_app.constants.storage_constants import (
    ALLOWED_IMPORT_EXTENSIONS,
    EXPORT_FILE_PREFIX,
    MAX_IMPORT_FILE_SIZE,
)
from exam_app.core.models import ImportErrorKind, ImportOutcome
from exam_app.core.services.history_store import HistoryStore

logger = logging.getLogger(__name__)


def default_export_file_name(on: date | None = None) -> str:
    return f"{EXPORT_FILE_PREFIX}-{(on or date.today()).isoformat()}.json"


def export_history_to_file(store: HistoryStore, file_path: Path) -> Path:
    """Write the pretty-printed history JSON to ``file_path``.

    A directory argument receives a date-stamped file name.
    """
    file_path = Path(file_path).resolve()
    if file_path.is_dir():
        file_path = file_path / default_export_file_name()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(store.export_json() + "\n", encoding="utf-8")
    logger.info("Quiz history exported to %s", file_path)
    return file_path


def validate_import_file(file_path: Path) -> ImportOutcome | None:
    """Return a failed outcome when the file is not acceptable, None otherwise."""
    if file_path.suffix.lower() not in ALLOWED_IMPORT_EXTENSIONS:
        return ImportOutcome(
            success=False,
            error_kind=ImportErrorKind.FILE_TYPE,
            error="Please select a valid JSON file",
        )
    if file_path.stat().st_size > MAX_IMPORT_FILE_SIZE:
        return ImportOutcome(
            success=False,
            error_kind=ImportErrorKind.FILE_TOO_LARGE,
            error="The file is too large",
        )
    return None


def import_history_from_file(store: HistoryStore, file_path: Path) -> ImportOutcome:
    """Validate ``file_path`` and load it into ``store``.

    Raises ``OSError`` when the file cannot be read; every other problem is
    reported through the returned :class:`ImportOutcome`.
    """
    file_path = Path(file_path)
    rejection = validate_import_file(file_path)
    if rejection is not None:
        logger.warning("Invalid import file %s: %s", file_path, rejection.error)
        return rejection

    try:
        text = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        logger.error("Import file %s is not UTF-8 text", file_path)
        return ImportOutcome(
            success=False,
            error_kind=ImportErrorKind.SYNTAX,
            error="Invalid JSON format",
        )
    outcome = store.import_json(text)
    if outcome.success:
        logger.info("Quiz history imported from %s", file_path)
    else:
        logger.error("Import validation failed for %s: %s", file_path, outcome.error)
    return outcome
