"""
Command-line front end.

Usage:
    quizmaster bank questions.txt
    quizmaster take questions.txt --session physics.json --mode random_limited
    quizmaster retake physics.json 1767225600000
    quizmaster history physics.json --weight 0.5
    quizmaster review physics.json 1767225600000 --only wrong
    quizmaster rescore physics.json 1767225600000 0.5
    quizmaster rename physics.json 1767225600000 "Mock 2"
    quizmaster merge physics.json phone_export.json -o combined.json
    quizmaster explain physics.json 1767225600000 3 --ask "Why not খ?"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import math
import random
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence

from quizmaster import __version__
from quizmaster.ai import AISettingsStore, GeminiGenerator, TutorChat
from quizmaster.bank import resolve_answer
from quizmaster.core.models import OPTION_KEYS, QuizMode
from quizmaster.core.schemas import ValidationError
from quizmaster.core.utils import load_backup_json, save_backup_json
from quizmaster.engine import (
    QuizEngineError,
    QuizSession,
    alternate_negative_mark,
    change_mode,
    change_question_limit,
    change_time,
    current_label,
    exam_title,
    export_backup,
    history_labels,
    import_backup,
    load_bank,
    new_session,
    progress_stats,
    rename_exam,
    retake_exam,
    review_items,
    set_shuffle_options,
    start_exam,
    submit_exam,
    update_negative_mark,
)
from quizmaster.engine.history import find_result

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_bank(path: Path) -> str:
    return Path(path).read_text(encoding="utf-8")


def _load_session(path: Path) -> QuizSession:
    """Session restored from a backup file."""
    session, outcome = import_backup(new_session(), load_backup_json(path))
    logger.debug(f"Restored {outcome.added} results from {path}")
    return session


def _save_session(path: Path, session: QuizSession) -> None:
    save_backup_json(path, export_backup(session))
    print(f"Saved session to {path}")


def _non_negative_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value) or value < 0:
        raise argparse.ArgumentTypeError(f"must be zero or more, got {text}")
    return value


def _format_time(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


def _run_exam(session: QuizSession, input_fn: InputFn) -> QuizSession:
    """Ask every question of the active exam in the terminal, then submit."""
    exam = session.active
    label = current_label(session)
    print(f"\n{exam_title(label)}" + (f" - {exam.exam_name}" if exam.exam_name else ""))
    print(f"{len(exam.questions)} questions, {exam.time_limit_minutes} minutes. Enter to skip.\n")

    deadline = time.monotonic() + exam.time_limit_minutes * 60
    choices: list[Optional[str]] = []
    for number, question in enumerate(exam.questions, start=1):
        if time.monotonic() >= deadline:
            print("Time is up.")
            break
        print(f"{number}. {question.text}")
        for key, text in zip(OPTION_KEYS, question.options_in_key_order):
            print(f"   {key}) {text}")
        try:
            answer = input_fn("> ").strip()
        except EOFError:
            print("\nInput closed.")
            break
        choice = resolve_answer(answer, question.options) if answer else None
        if answer and choice is None:
            print("   (not an option, skipped)")
        choices.append(choice)

    session, result = submit_exam(session, choices)
    stats = result.stats
    print(
        f"\nCorrect {stats.correct}, wrong {stats.wrong}, skipped {stats.skipped} of {stats.total}. "
        f"Score: {result.score()} (-{result.negative_mark} per wrong)"
    )
    return session


def _finish(session: QuizSession, path: Optional[Path]) -> None:
    if path is not None:
        _save_session(path, session)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_bank(args: argparse.Namespace, input_fn: InputFn) -> int:
    session = new_session(_read_bank(args.file))
    if session.exam_name:
        print(f"Exam: {session.exam_name}")
    print(f"Questions: {len(session.bank)}")
    print(
        f"Suggested: {session.config.question_limit} questions, "
        f"{session.config.time_minutes} minutes"
    )
    return 0 if session.bank else 1


def cmd_take(args: argparse.Namespace, input_fn: InputFn) -> int:
    raw = _read_bank(args.file)
    session_path = Path(args.session) if args.session else None
    if session_path is not None and session_path.exists():
        session = _load_session(session_path)
        if session.raw_input != raw:
            session = load_bank(session, raw)
    else:
        session = new_session(raw)

    if args.mode:
        session = change_mode(session, QuizMode(args.mode))
    if args.limit is not None:
        session = change_question_limit(session, args.limit)
    if args.time is not None:
        session = change_time(session, args.time)
    if args.no_shuffle:
        session = set_shuffle_options(session, False)

    stats = progress_stats(session)
    if stats.remaining is not None:
        print(f"Progress: {stats.taken} taken, {stats.remaining} remaining of {stats.total}")

    rng = random.Random(args.seed) if args.seed is not None else None
    session, outcome = start_exam(session, rng=rng)
    if outcome.notice is not None:
        print(outcome.notice.message)
    session = _run_exam(session, input_fn)
    _finish(session, session_path)
    return 0


def cmd_retake(args: argparse.Namespace, input_fn: InputFn) -> int:
    path = Path(args.path)
    session = _load_session(path)
    rng = random.Random(args.seed) if args.seed is not None else None
    session, _ = retake_exam(session, args.id, rng=rng)
    session = _run_exam(session, input_fn)
    _finish(session, path)
    return 0


def cmd_history(args: argparse.Namespace, input_fn: InputFn) -> int:
    session = _load_session(Path(args.path))
    if not session.history:
        print("No exams taken yet.")
        return 0
    labels = history_labels(session)
    for result in reversed(session.history):
        weight = args.weight if args.weight is not None else result.negative_mark
        alt = alternate_negative_mark(weight)
        name = f" {result.exam_name}" if result.exam_name else ""
        s = result.stats
        print(
            f"{exam_title(labels[result.id])}{name} [{result.id}] {_format_time(result.timestamp)}  "
            f"{s.correct}/{s.total} correct, {s.wrong} wrong, {s.skipped} skipped  "
            f"score {result.score(weight)} (at -{alt}: {result.score(alt)})"
        )
    return 0


def cmd_review(args: argparse.Namespace, input_fn: InputFn) -> int:
    session = _load_session(Path(args.path))
    result = find_result(session.history, args.id)
    items = review_items(result, args.only)
    name = f" {result.exam_name}" if result.exam_name else ""
    print(f"{exam_title(history_labels(session)[result.id])}{name}: {len(items)} of {len(result.questions)} questions\n")
    for item in items:
        q = item.question
        print(f"{item.index}. [{item.outcome.value}] {q.text}")
        if item.choice is not None:
            print(f"   Your answer: {item.choice}) {q.options.get(item.choice, '')}")
        print(f"   Correct: {q.correct_key}) {q.correct_text or ''}")
    return 0


def cmd_rescore(args: argparse.Namespace, input_fn: InputFn) -> int:
    path = Path(args.path)
    session = update_negative_mark(_load_session(path), args.id, args.weight)
    print(f"Exam {args.id} score: {find_result(session.history, args.id).score()}")
    _save_session(path, session)
    return 0


def cmd_rename(args: argparse.Namespace, input_fn: InputFn) -> int:
    path = Path(args.path)
    session = rename_exam(_load_session(path), args.id, args.name)
    _save_session(path, session)
    return 0


def cmd_merge(args: argparse.Namespace, input_fn: InputFn) -> int:
    base = Path(args.base)
    session = _load_session(base)
    session, outcome = import_backup(
        session, load_backup_json(Path(args.incoming)), restore_session=False
    )
    print(f"Added {outcome.added} of {outcome.received} results")
    _save_session(Path(args.output) if args.output else base, session)
    return 0


def cmd_explain(args: argparse.Namespace, input_fn: InputFn) -> int:
    store = AISettingsStore()
    config = store.get()
    if config is None:
        print("No AI settings found. Set GEMINI_API_KEY or write ai_config.json.", file=sys.stderr)
        return 1

    result = find_result(_load_session(Path(args.path)).history, args.id)
    chat = TutorChat(GeminiGenerator(config), language=config.language, timeout_seconds=config.timeout_seconds)

    async def converse() -> list:
        messages = await chat.explain(result, args.index)
        for question in args.ask or ():
            messages = await chat.send(result, args.index, question)
        return messages

    messages = asyncio.run(converse())
    for message in messages:
        prefix = "You" if message.role == "user" else "Tutor"
        print(f"{prefix}: {message.text}\n")
    return 1 if messages and messages[-1].is_error else 0


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quizmaster", description="Timed self-quizzing from a text question bank.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("bank", help="Check a question bank")
    p.add_argument("file", type=Path)
    p.set_defaults(func=cmd_bank)

    p = sub.add_parser("take", help="Take an exam in the terminal")
    p.add_argument("file", type=Path, help="Question bank text file")
    p.add_argument("--session", help="Backup file to resume from and save to")
    p.add_argument("--mode", type=str.upper, choices=[m.value for m in QuizMode])
    p.add_argument("--limit", help="Questions per exam")
    p.add_argument("--time", help="Minutes per exam")
    p.add_argument("--seed", type=int, help="Seed for reproducible selection")
    p.add_argument("--no-shuffle", action="store_true", help="Keep options in bank order")
    p.set_defaults(func=cmd_take)

    p = sub.add_parser("retake", help="Retake a stored exam")
    p.add_argument("path", type=Path)
    p.add_argument("id", type=int)
    p.add_argument("--seed", type=int)
    p.set_defaults(func=cmd_retake)

    p = sub.add_parser("history", help="List stored exams")
    p.add_argument("path", type=Path)
    p.add_argument("--weight", type=_non_negative_float, help="Negative mark to score with")
    p.set_defaults(func=cmd_history)

    p = sub.add_parser("review", help="Show one exam question by question")
    p.add_argument("path", type=Path)
    p.add_argument("id", type=int)
    p.add_argument("--only", type=str.upper, choices=["CORRECT", "WRONG", "SKIPPED"], default="ALL")
    p.set_defaults(func=cmd_review)

    p = sub.add_parser("rescore", help="Change an exam's negative mark")
    p.add_argument("path", type=Path)
    p.add_argument("id", type=int)
    p.add_argument("weight", type=_non_negative_float)
    p.set_defaults(func=cmd_rescore)

    p = sub.add_parser("rename", help="Rename an exam (empty name clears it)")
    p.add_argument("path", type=Path)
    p.add_argument("id", type=int)
    p.add_argument("name")
    p.set_defaults(func=cmd_rename)

    p = sub.add_parser("merge", help="Merge another backup's history")
    p.add_argument("base", type=Path)
    p.add_argument("incoming", type=Path)
    p.add_argument("-o", "--output", help="Write here instead of BASE")
    p.set_defaults(func=cmd_merge)

    p = sub.add_parser("explain", help="Ask the AI tutor about a question")
    p.add_argument("path", type=Path)
    p.add_argument("id", type=int)
    p.add_argument("index", type=int, help="0-based question position in the exam")
    p.add_argument("--ask", action="append", help="Follow-up question (repeatable)")
    p.set_defaults(func=cmd_explain)

    return parser


def main(argv: Optional[Sequence[str]] = None, input_fn: InputFn = input) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args, input_fn)
    except (QuizEngineError, ValidationError, FileNotFoundError, IndexError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
