"""Storage and file locations for question banks and the local history."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

HISTORY_STORAGE_KEY: str = "civitest_quiz_history"

DATA_DIR: Path = Path(os.getenv("CIVITEST_DATA_DIR", "data")).expanduser()
QUESTIONS_DIR: Path = Path(os.getenv("CIVITEST_QUESTIONS_DIR", "questions")).expanduser()

# Caps applied when a write fails because the storage quota is exhausted.
MAX_QUIZ_RESULTS: int = 20
MAX_QUESTION_SETS: int = 5

ALLOWED_IMPORT_EXTENSIONS: tuple[str, ...] = (".json",)
MAX_IMPORT_FILE_SIZE: int = 5 * 1024 * 1024
EXPORT_FILE_PREFIX: str = "civitest-history"

QUESTION_LOAD_MAX_ATTEMPTS: int = 3

QUESTION_FILES: tuple[str, ...] = (
    "pv_questions.json",
    "sip_questions.json",
    "dd_questions.json",
    "hgc_questions.json",
    "vsf_questions.json",
    "pv_x_questions.json",
    "sip_x_questions.json",
    "dd_x_questions.json",
    "hgc_x_questions.json",
    "vsf_x_questions.json",
    "pv_s_questions.json",
    "dd_s_questions.json",
)
