"""
Module: engine.limits

Purpose:
    Smart limit/time derivation. Whenever the bank size, the mode or the
    progression counters change, the suggested question limit and time are
    recomputed from what is still available under the active mode.

Key Functions:
    - available_count(total, mode, progression)
    - derive_smart_limits(total, mode, progression) -> (limit, minutes)
    - apply_smart_limits(config, total, progression) -> (config, progression)

Used By:
    - engine.session
"""

from __future__ import annotations

from dataclasses import replace

from quizmaster.core.models.config import (
    DEFAULT_QUESTION_LIMIT,
    DEFAULT_TIME_MINUTES,
    QuizConfig,
    QuizMode,
    time_for_limit,
)
from quizmaster.core.models.progression import ProgressionState

MAX_SMART_LIMIT = 25


def available_count(total: int, mode: QuizMode, progression: ProgressionState) -> int:
    """
    Questions still available under mode.

    A remainder of 0 means a reset is pending, so the full bank size is
    reported instead.
    """
    if mode is QuizMode.SERIAL:
        remaining = progression.remaining_serial(total)
    elif mode is QuizMode.RANDOM_LIMITED:
        remaining = progression.remaining_random(total)
    else:
        remaining = total
    return remaining if remaining > 0 else total


def derive_smart_limits(
    total: int,
    mode: QuizMode,
    progression: ProgressionState,
) -> tuple[int, int]:
    """
    Suggested (question_limit, time_minutes) for a non-empty bank.

    Example:
        >>> derive_smart_limits(100, QuizMode.SERIAL, ProgressionState(next_serial_index=90))
        (10, 6)
    """
    if total <= 0:
        raise ValueError("Smart limits are not derived for an empty bank")
    limit = min(MAX_SMART_LIMIT, available_count(total, mode, progression))
    return limit, time_for_limit(limit)


def apply_smart_limits(
    config: QuizConfig,
    total: int,
    progression: ProgressionState,
) -> tuple[QuizConfig, ProgressionState]:
    """
    Recompute derived config fields.

    For an empty bank the defaults come back (25 questions, 15 minutes) and
    both progression counters reset to zero.
    """
    if total <= 0:
        return (
            replace(config, question_limit=DEFAULT_QUESTION_LIMIT, time_minutes=DEFAULT_TIME_MINUTES),
            ProgressionState.initial(),
        )
    limit, minutes = derive_smart_limits(total, config.mode, progression)
    return replace(config, question_limit=limit, time_minutes=minutes), progression
