"""
Module: engine.session

Purpose:
    Orchestrate user actions against an explicit session state.
    Every action takes a QuizSession and returns a new one; nothing is
    mutated in place, so a failed action leaves the caller's state intact.

Key Functions:
    - new_session(): Empty session (or one built from raw bank text)
    - load_bank(), change_mode(), change_question_limit(), change_time(),
      set_shuffle_options(): Setup edits
    - start_exam(), retake_exam(), submit_exam(), abandon_exam(): Attempts
    - update_negative_mark(), rename_exam(): Post-submission edits
    - export_backup(), import_backup(): Backup round trips
    - progress_stats(), current_label(), history_labels(): Derived views
    - reset_session(): Clear progression, history and settings

Key Classes:
    - QuizSession: Complete engine state
    - ActiveExam: The in-progress attempt
    - StartOutcome / ImportOutcome: What an action did

Dependencies:
    - bank.parser: Raw text to questions
    - engine.selection: Batch selection and option shuffling
    - engine.scoring / engine.labels / engine.history
    - core.utils.serialization: Import payload decoding
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from functools import cached_property
from typing import Any, Dict, Optional, Sequence, Union

from quizmaster.bank.parser import extract_exam_name, generate_backup_filename, parse_questions
from quizmaster.core.models.backup import BACKUP_VERSION, SessionBackup
from quizmaster.core.models.config import QuizConfig, QuizMode, time_for_limit
from quizmaster.core.models.progression import ProgressionState
from quizmaster.core.models.questions import QuestionRecord
from quizmaster.core.models.results import DEFAULT_NEGATIVE_MARK, ExamResult
from quizmaster.core.schemas.validator import ValidationError
from quizmaster.core.utils.serialization import ImportPayload, deserialize_payload, loads_payload

from .errors import ExhaustionReset, MalformedBackupError, NoActiveExamError, NoQuestionsAvailableError
from .history import find_result, merge_histories, next_result_id, replace_result
from .labels import assign_labels, chronological, exam_title, pending_label
from .limits import apply_smart_limits
from .scoring import normalize_choices, score_answers
from .selection import prepare_batch, select_batch

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ActiveExam:
    """
    The attempt currently being taken (immutable).

    Attributes:
        questions: Batch as presented (options possibly shuffled)
        time_limit_minutes: Time allowed
        parent_exam_id: Root id when this is a retake
        exam_name: Name carried into the result
        started_at: Start time in epoch milliseconds
    """

    questions: tuple[QuestionRecord, ...]
    time_limit_minutes: Union[int, float]
    parent_exam_id: Optional[int] = None
    exam_name: Optional[str] = None
    started_at: int = 0

    @property
    def is_retake(self) -> bool:
        return self.parent_exam_id is not None

    @property
    def deadline(self) -> int:
        """Epoch milliseconds at which time runs out."""
        return self.started_at + int(self.time_limit_minutes * 60_000)


@dataclass(frozen=True)
class QuizSession:
    """
    Complete engine state (immutable).

    bank and exam_name are derived from raw_input and cached per instance.

    Attributes:
        raw_input: Raw question-bank text
        config: Quiz settings
        progression: Progression counters
        history: Results ascending by (timestamp, id)
        active: Attempt in progress, if any
    """

    raw_input: str = ""
    config: QuizConfig = field(default_factory=QuizConfig)
    progression: ProgressionState = field(default_factory=ProgressionState.initial)
    history: tuple[ExamResult, ...] = ()
    active: Optional[ActiveExam] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "history", tuple(chronological(self.history)))

    @cached_property
    def bank(self) -> tuple[QuestionRecord, ...]:
        return parse_questions(self.raw_input)

    @cached_property
    def exam_name(self) -> Optional[str]:
        return extract_exam_name(self.raw_input)

    @property
    def in_exam(self) -> bool:
        return self.active is not None


@dataclass(frozen=True)
class StartOutcome:
    """What start_exam()/retake_exam() produced."""

    exam: ActiveExam
    notice: Optional[ExhaustionReset] = None


@dataclass(frozen=True)
class ImportOutcome:
    """
    What import_backup() did.

    Attributes:
        added: Results newly merged into history
        received: Results present in the payload
        legacy: True for a bare-array payload
        restored: True when raw input/config/progress were restored
    """

    added: int
    received: int
    legacy: bool
    restored: bool


@dataclass(frozen=True)
class ProgressStats:
    """Counters for the setup screen; taken/remaining are None in unlimited mode."""

    total: int
    taken: Optional[int]
    remaining: Optional[int]


# ─────────────────────────────────────────────────────────────────────────────
# Setup
# ─────────────────────────────────────────────────────────────────────────────

def _with_smart_limits(session: QuizSession) -> QuizSession:
    config, progression = apply_smart_limits(session.config, len(session.bank), session.progression)
    return replace(session, config=config, progression=progression)


def _limit_inputs(session: QuizSession) -> tuple:
    """Values the smart limits are derived from."""
    progression = session.progression
    return (
        len(session.bank),
        session.config.mode,
        progression.next_serial_index,
        len(progression.used_random_indices),
    )


def new_session(raw_input: str = "") -> QuizSession:
    """Fresh session with default settings, limits derived from the bank."""
    return _with_smart_limits(QuizSession(raw_input=raw_input))


def load_bank(session: QuizSession, raw_input: str) -> QuizSession:
    """Replace the bank text and re-derive limits."""
    updated = _with_smart_limits(replace(session, raw_input=raw_input))
    logger.info(f"Bank loaded: {len(updated.bank)} questions")
    return updated


def change_mode(session: QuizSession, mode: QuizMode) -> QuizSession:
    return _with_smart_limits(replace(session, config=replace(session.config, mode=QuizMode(mode))))


def change_question_limit(session: QuizSession, value: Any) -> QuizSession:
    """Manual limit edit; a valid number also re-derives the time."""
    return replace(session, config=session.config.with_question_limit(value))


def change_time(session: QuizSession, value: Any) -> QuizSession:
    return replace(session, config=replace(session.config, time_minutes=value))


def set_shuffle_options(session: QuizSession, enabled: bool) -> QuizSession:
    return replace(session, config=replace(session.config, shuffle_options=bool(enabled)))


def reset_session(session: QuizSession) -> QuizSession:
    """Clear progression, history, settings and any active exam; keep the bank text."""
    logger.info("Session reset")
    return new_session(session.raw_input)


# ─────────────────────────────────────────────────────────────────────────────
# Attempts
# ─────────────────────────────────────────────────────────────────────────────

def start_exam(
    session: QuizSession,
    rng: Optional[random.Random] = None,
    now: Optional[int] = None,
) -> tuple[QuizSession, StartOutcome]:
    """
    Select a batch and begin an attempt.

    Args:
        session: Current state
        rng: Random source for selection and shuffling
        now: Start time in epoch milliseconds

    Returns:
        (new session, StartOutcome with any exhaustion notice)

    Raises:
        EmptyBankError: If there is nothing to select; session unchanged
    """
    rng = rng or random.Random()
    config = session.config
    selection = select_batch(
        session.bank,
        config.mode,
        config.safe_question_limit,
        session.progression,
        rng=rng,
    )
    questions = prepare_batch(selection.questions, config.shuffle_options, rng=rng)
    exam = ActiveExam(
        questions=questions,
        time_limit_minutes=config.safe_time_minutes,
        parent_exam_id=None,
        exam_name=session.exam_name,
        started_at=_now_ms() if now is None else now,
    )
    updated = _with_smart_limits(replace(session, progression=selection.progression, active=exam))
    logger.info(
        f"Started {exam_title(pending_label(session.history))} with "
        f"{len(questions)} questions, {exam.time_limit_minutes} minutes"
    )
    return updated, StartOutcome(exam=exam, notice=selection.reset)


def retake_exam(
    session: QuizSession,
    result_id: int,
    rng: Optional[random.Random] = None,
    now: Optional[int] = None,
) -> tuple[QuizSession, StartOutcome]:
    """
    Begin a retake of a stored result.

    The retake works on its own copy of the questions: their order is
    shuffled and options are always shuffled, whatever shuffle_options
    says. It links to the root attempt, so retaking a retake stays at the
    second level. Progression is not touched.

    Raises:
        UnknownExamError: If result_id is not in history
        NoQuestionsAvailableError: If the result carries no questions
    """
    rng = rng or random.Random()
    result = find_result(session.history, result_id)
    if not result.questions:
        raise NoQuestionsAvailableError(f"Exam {result_id} has no questions to retake")

    order = list(result.questions)
    rng.shuffle(order)
    questions = prepare_batch(order, session.config.shuffle_options, force=True, rng=rng)
    exam = ActiveExam(
        questions=questions,
        time_limit_minutes=time_for_limit(len(questions)),
        parent_exam_id=result.root_id,
        exam_name=result.exam_name,
        started_at=_now_ms() if now is None else now,
    )
    logger.info(f"Retake of exam {result.root_id}: {len(questions)} questions")
    return replace(session, active=exam), StartOutcome(exam=exam)


def submit_exam(
    session: QuizSession,
    user_choices: Sequence[Optional[str]],
    now: Optional[int] = None,
) -> tuple[QuizSession, ExamResult]:
    """
    Score the active attempt and append it to history.

    Args:
        session: State with an active exam
        user_choices: Option key or None per question, in presented order
        now: Submission time in epoch milliseconds

    Raises:
        NoActiveExamError: If no attempt is in progress
    """
    exam = session.active
    if exam is None:
        raise NoActiveExamError("No exam in progress")

    now_ms = _now_ms() if now is None else now
    stats = score_answers(exam.questions, user_choices)
    result = ExamResult(
        id=next_result_id(session.history, now_ms),
        timestamp=now_ms,
        questions=exam.questions,
        user_choices=normalize_choices(exam.questions, user_choices),
        stats=stats,
        negative_mark=DEFAULT_NEGATIVE_MARK,
        parent_exam_id=exam.parent_exam_id,
        exam_name=exam.exam_name,
    )
    logger.info(
        f"Submitted exam {result.id}: {stats.correct} correct, {stats.wrong} wrong, "
        f"{stats.skipped} skipped"
    )
    return replace(session, history=session.history + (result,), active=None), result


def abandon_exam(session: QuizSession) -> QuizSession:
    """Drop the active attempt without recording a result."""
    return replace(session, active=None)


# ─────────────────────────────────────────────────────────────────────────────
# Post-submission edits
# ─────────────────────────────────────────────────────────────────────────────

def update_negative_mark(session: QuizSession, result_id: int, negative_mark: float) -> QuizSession:
    """Change the weight a stored result is displayed with."""
    history = replace_result(session.history, result_id, negative_mark=float(negative_mark))
    return replace(session, history=history)


def rename_exam(session: QuizSession, result_id: int, name: Optional[str]) -> QuizSession:
    """Rename a stored result; a blank name clears it."""
    trimmed = (name or "").strip()
    history = replace_result(
        session.history,
        result_id,
        exam_name=trimmed or None,
        clear_name=not trimmed,
    )
    return replace(session, history=history)


# ─────────────────────────────────────────────────────────────────────────────
# Backups
# ─────────────────────────────────────────────────────────────────────────────

def export_backup(session: QuizSession, now: Optional[int] = None) -> SessionBackup:
    """Full envelope of the current session."""
    return SessionBackup(
        version=BACKUP_VERSION,
        timestamp=_now_ms() if now is None else now,
        raw_input=session.raw_input,
        config=session.config,
        progress=session.progression,
        history=session.history,
    )


def backup_filename(session: QuizSession, when: Optional[datetime] = None) -> str:
    return generate_backup_filename(session.exam_name, when)


def _decode(payload: Union[ImportPayload, SessionBackup, str, dict, list]) -> ImportPayload:
    if isinstance(payload, ImportPayload):
        return payload
    if isinstance(payload, SessionBackup):
        return ImportPayload(history=payload.history, backup=payload)
    try:
        if isinstance(payload, str):
            return loads_payload(payload)
        return deserialize_payload(payload)
    except ValidationError as e:
        raise MalformedBackupError(str(e), path=e.path) from e


def import_backup(
    session: QuizSession,
    payload: Union[ImportPayload, SessionBackup, str, dict, list],
    restore_session: bool = True,
) -> tuple[QuizSession, ImportOutcome]:
    """
    Merge an imported backup into the session.

    An envelope restores raw input, settings and progression (each only if
    present, and only when restore_session is set) and then merges its
    history. Limits are re-derived when the restore changes the bank size,
    the mode or a progression counter. A legacy bare array only merges
    history.

    Args:
        session: Current state
        payload: Decoded payload, envelope, JSON text, dict or list
        restore_session: False merges history only, even for an envelope

    Raises:
        MalformedBackupError: If the payload is not a recognizable backup;
            nothing is merged
    """
    decoded = _decode(payload)
    updated = session
    restored = False
    backup = decoded.backup
    if backup is not None and restore_session:
        if backup.raw_input:
            updated = replace(updated, raw_input=backup.raw_input)
        if backup.config is not None:
            updated = replace(updated, config=backup.config)
        if backup.progress is not None:
            updated = replace(updated, progression=backup.progress)
        if _limit_inputs(updated) != _limit_inputs(session):
            updated = _with_smart_limits(updated)
        restored = True

    merged = merge_histories(updated.history, decoded.history)
    added = len(merged) - len(updated.history)
    updated = replace(updated, history=tuple(merged))
    logger.info(
        f"Imported {'legacy' if decoded.is_legacy else 'envelope'} backup: "
        f"{added} of {len(decoded.history)} results added"
    )
    return updated, ImportOutcome(
        added=added,
        received=len(decoded.history),
        legacy=decoded.is_legacy,
        restored=restored,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Derived views
# ─────────────────────────────────────────────────────────────────────────────

def progress_stats(session: QuizSession) -> ProgressStats:
    total = len(session.bank)
    mode = session.config.mode
    if mode is QuizMode.SERIAL:
        taken = session.progression.next_serial_index
        return ProgressStats(total, taken, session.progression.remaining_serial(total))
    if mode is QuizMode.RANDOM_LIMITED:
        taken = len(session.progression.used_random_indices)
        return ProgressStats(total, taken, session.progression.remaining_random(total))
    return ProgressStats(total, None, None)


def history_labels(session: QuizSession) -> Dict[int, str]:
    return assign_labels(session.history)


def current_label(session: QuizSession) -> Optional[str]:
    """Label of the attempt in progress, or None outside an exam."""
    if session.active is None:
        return None
    return pending_label(session.history, session.active.parent_exam_id)
