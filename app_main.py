"""Application entry point for the CiviTest exam simulator."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from exam_app.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from exam_app.constants.exam_constants import PASSING_QUESTIONS, TIME_LIMIT_SECONDS
from exam_app.constants.storage_constants import DATA_DIR, QUESTIONS_DIR
from exam_app.constants.topic_constants import QUESTION_TYPE_NAMES, get_topic_name
from exam_app.core.exam_manager import ExamManager
from exam_app.core.history_exporter import export_history_to_file, import_history_from_file
from exam_app.core.models import QuizResult
from exam_app.core.question_loader import (
    QuestionLoadError,
    QuestionValidationError,
    load_question_bank_with_retry,
)
from exam_app.core.services.exam_clock import ExamClock
from exam_app.core.services.history_store import HistoryStore
from exam_app.core.services.key_value_store import JsonFileStore, StorageError
from exam_app.utils.formatting import format_time, format_time_verbose, score_band, timer_level
from exam_app.utils.logging_config import configure_logging

_CHOICE_LETTERS = "ABCDEF"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="civitest", description=APP_ABOUT_TEXT)
    parser.add_argument("--questions-dir", type=Path, default=QUESTIONS_DIR, help="Folder holding the question files")
    parser.add_argument("--data-dir", type=Path, default=DATA_DIR, help="Folder where the history is stored")
    parser.add_argument("--stats", action="store_true", help="Show statistics and exit")
    parser.add_argument("--export", type=Path, metavar="PATH", help="Export the history to PATH and exit")
    parser.add_argument("--import", dest="import_path", type=Path, metavar="PATH", help="Import a history export and exit")
    parser.add_argument("--clear-history", action="store_true", help="Delete the stored history and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION} ({APP_LICENSE})")
    return parser


def _print_question(manager: ExamManager) -> None:
    session = manager.get_current_session()
    question = manager.get_current_question()
    answer = manager.get_current_answer()
    if session is None or question is None or answer is None:
        return
    remaining = session.time_remaining
    marker = {"normal": "", "warning": " !", "critical": " !!"}[timer_level(remaining)]
    progress = manager.get_progress()
    print()
    print(
        f"[{format_time(remaining)}{marker}] Question {session.current_question_index + 1}/{len(session.questions)}"
        f" - {get_topic_name(question.topic, short=True)} ({QUESTION_TYPE_NAMES[question.type]})"
        f" - answered {progress.answered}/{progress.total}"
    )
    print(question.text)
    for index, choice in enumerate(question.shuffled_choices):
        selected = "*" if answer.selected_choice_index == index else " "
        print(f" {selected}{_CHOICE_LETTERS[index]}. {choice.label}")


def _print_result(result: QuizResult) -> None:
    verdict = "PASSED" if result.passed else "FAILED"
    print()
    print(f"{verdict}: {result.score}/{result.total_questions} ({result.percentage}%), {PASSING_QUESTIONS} needed")
    print(f"Time taken: {format_time_verbose(result.time_taken)}")
    for row in result.topic_performance:
        print(f"  {get_topic_name(row.topic_id):<45} {row.correct:>2}/{row.total:<2} {row.percentage:>3}%")


def _print_statistics(manager: ExamManager) -> None:
    stats = manager.get_statistics()
    if stats.total_quizzes == 0:
        print("No exams taken yet.")
        return
    print(f"Exams taken:      {stats.total_quizzes}")
    print(f"Average score:    {stats.average_score}% ({score_band(stats.average_score)})")
    print(f"Pass rate:        {stats.pass_rate}%")
    print(f"Best / worst:     {stats.best_score}% / {stats.worst_score}%")
    print(f"Average duration: {format_time_verbose(stats.average_time_per_quiz)}")
    print(f"Recent trend:     {' '.join(str(p) for p in stats.recent_trend)}")
    print("By topic:")
    for topic_id, totals in manager.get_topic_statistics().items():
        print(f"  {get_topic_name(topic_id):<45} {totals.correct:>4}/{totals.total:<4} {totals.percentage:>3}%")
    print("By question type:")
    for question_type, totals in manager.get_type_statistics().items():
        print(f"  {QUESTION_TYPE_NAMES[question_type]:<45} {totals.correct:>4}/{totals.total:<4} {totals.percentage:>3}%")


def _run_exam(manager: ExamManager) -> QuizResult | None:
    """Interactive exam loop. Returns the result, or None when abandoned."""
    manager.start_exam()
    expired: list[QuizResult | None] = []
    clock = ExamClock(manager, on_expired=expired.append)
    clock.start()
    print(f"{format_time(TIME_LIMIT_SECONDS)} on the clock. {HELP_TEXT}")

    try:
        while not manager.is_exam_complete():
            _print_question(manager)
            try:
                command = input("> ").strip().lower()
            except EOFError:
                command = "quit"

            if manager.is_exam_complete():
                print("Time is up.")
                break

            session = manager.get_current_session()
            index = session.current_question_index if session else 0

            if len(command) == 1 and command.upper() in _CHOICE_LETTERS:
                manager.answer_question(index, _CHOICE_LETTERS.index(command.upper()))
                manager.next_question()
            elif command == "n":
                manager.next_question()
            elif command == "p":
                manager.prev_question()
            elif command.startswith("g ") and command[2:].strip().isdigit():
                manager.go_to_question(int(command[2:].strip()) - 1)
            elif command == "pause":
                manager.pause_exam()
                input("Paused. Press Enter to resume.")
                manager.resume_exam()
            elif command == "submit":
                unanswered = manager.get_unanswered_count()
                if unanswered and input(f"{unanswered} unanswered. Submit anyway? [y/N] ").strip().lower() != "y":
                    continue
                return manager.end_exam()
            elif command == "quit":
                manager.clear_exam()
                print("Exam abandoned, nothing was saved.")
                return None
            else:
                print(HELP_TEXT)
    finally:
        clock.stop(timeout=2)

    return expired[0] if expired else None


def main(argv: list[str] | None = None) -> int:
    """Initialize logging, wire the services and run the requested action."""
    args = _build_parser().parse_args(argv)
    logger = configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    logger.info("Starting %s %s", APP_NAME, APP_VERSION)

    history_store = HistoryStore(JsonFileStore(args.data_dir))
    manager = ExamManager(history_store=history_store)

    if args.clear_history:
        try:
            manager.clear_history()
        except StorageError as exc:
            print(f"Could not clear the history: {exc}", file=sys.stderr)
            return 1
        print("History cleared.")
        return 0
    if args.export:
        try:
            path = export_history_to_file(history_store, args.export)
        except OSError as exc:
            print(f"Could not export the history: {exc}", file=sys.stderr)
            return 1
        print(f"History exported to {path}")
        return 0
    if args.import_path:
        try:
            outcome = import_history_from_file(history_store, args.import_path)
        except OSError as exc:
            print(f"Could not read {args.import_path}: {exc}", file=sys.stderr)
            return 1
        if not outcome.success:
            print(f"Import failed ({outcome.error_kind.value}): {outcome.error}", file=sys.stderr)
            return 1
        print(f"Imported {outcome.result_count} result(s).")
        return 0
    if args.stats:
        _print_statistics(manager)
        return 0

    try:
        bank = load_question_bank_with_retry(args.questions_dir)
    except (QuestionLoadError, QuestionValidationError) as exc:
        print(f"Unable to load the questions: {exc}", file=sys.stderr)
        return 1
    manager.load_question_bank(bank.questions)

    result = _run_exam(manager)
    if result is not None:
        _print_result(result)
        outcome = manager.get_last_save_outcome()
        if outcome is not None and not outcome.success:
            print("Warning: the result could not be saved.", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
