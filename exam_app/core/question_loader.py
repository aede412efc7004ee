"""Loading the question bank from its JSON source files.

Each source file holds a JSON array of question records. All files that can be
read are merged before validation; unreadable files are skipped as long as at
least one file loads.

Two failure kinds are kept apart so callers know what is worth retrying:

* :class:`QuestionLoadError` means no source could be read at all. The files
  may appear later (a sync still running, a mount not ready), so retrying
  makes sense.
* :class:`QuestionValidationError` means the merged data is malformed.
  Reading it again will not help.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
import time

from pydantic import ValidationError

from exam_app.constants.storage_constants import QUESTION_FILES, QUESTION_LOAD_MAX_ATTEMPTS
from exam_app.core.models import Question
from exam_app.core.schemas import validate_questions

logger = logging.getLogger(__name__)


class QuestionLoadError(Exception):
    """Raised when no question source could be read."""


class QuestionValidationError(Exception):
    """Raised when the merged question data does not match the question schema."""


@dataclass(slots=True)
class LoadedQuestionBank:
    """Validated questions together with the files they came from."""

    questions: list[Question]
    loaded_files: list[Path]
    failed_files: list[Path] = field(default_factory=list)


def load_question_bank(
    directory: Path,
    file_names: Sequence[str] = QUESTION_FILES,
) -> LoadedQuestionBank:
    directory = Path(directory)
    raw_records: list[object] = []
    loaded: list[Path] = []
    failed: list[Path] = []

    for name in file_names:
        path = directory / name
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Error loading %s: %s", path, exc)
            failed.append(path)
            continue
        if isinstance(data, list):
            raw_records.extend(data)
        else:
            # Keep the record so validation reports it instead of hiding it.
            raw_records.append(data)
        loaded.append(path)

    if not loaded:
        raise QuestionLoadError(f"Failed to load any question files from {directory}")

    if failed:
        logger.warning("Failed to load %d file(s), %d loaded", len(failed), len(loaded))

    try:
        questions = validate_questions(raw_records)
    except ValidationError as exc:
        logger.error("Question validation failed for %d records: %s", len(raw_records), exc)
        raise QuestionValidationError(
            "Invalid question data format. Please check the question files."
        ) from exc

    logger.info("Loaded %d questions from %d file(s)", len(questions), len(loaded))
    return LoadedQuestionBank(questions=questions, loaded_files=loaded, failed_files=failed)


def load_question_bank_with_retry(
    directory: Path,
    file_names: Sequence[str] = QUESTION_FILES,
    max_attempts: int = QUESTION_LOAD_MAX_ATTEMPTS,
    retry_delay_seconds: float = 1.0,
) -> LoadedQuestionBank:
    """Like :func:`load_question_bank`, retrying only when nothing could be read."""
    attempt = 1
    while True:
        try:
            return load_question_bank(directory, file_names)
        except QuestionLoadError:
            if attempt >= max_attempts:
                raise
            logger.info("Retrying question load (attempt %d of %d)", attempt + 1, max_attempts)
            attempt += 1
            if retry_delay_seconds > 0:
                time.sleep(retry_delay_seconds)
