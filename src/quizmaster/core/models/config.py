"""
Module: config

Purpose:
    Provides QuizMode and QuizConfig - the user's quiz settings. Stored
    values are kept exactly as given (an imported file may hold an empty or
    non-numeric limit); they are coerced to safe positive numbers only at
    the point of use.

Key Functions:
    - coerce_positive_int(value): int >= 1 from anything
    - coerce_positive_number(value): number >= 1 from anything
    - time_for_limit(limit): max(1, round(limit * 0.6))
    - QuizConfig.safe_question_limit / safe_time_minutes
    - QuizConfig.with_question_limit(value): Manual edit, re-derives time

Dependencies:
    - dataclasses (std)
    - enum (std)
    - math (std)

Used By:
    - engine.limits
    - engine.selection.selector
    - engine.session
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Union

DEFAULT_QUESTION_LIMIT = 25
DEFAULT_TIME_MINUTES = 15
MINUTES_PER_QUESTION = 0.6


class QuizMode(str, Enum):
    """How the next batch is drawn from the bank."""

    SERIAL = "SERIAL"
    RANDOM_LIMITED = "RANDOM_LIMITED"
    RANDOM_UNLIMITED = "RANDOM_UNLIMITED"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return math.nan


def coerce_positive_int(value: Any, minimum: int = 1) -> int:
    """
    Turn a stored config value into a usable positive integer.

    Empty, non-numeric, NaN, zero and negative values all become minimum;
    fractional values are truncated first.

    Example:
        >>> coerce_positive_int("")
        1
        >>> coerce_positive_int("12")
        12
    """
    number = _to_number(value)
    if math.isnan(number) or math.isinf(number):
        return minimum
    return max(minimum, int(number))


def coerce_positive_number(value: Any, minimum: float = 1) -> Union[int, float]:
    """Like coerce_positive_int but keeps fractional minutes."""
    number = _to_number(value)
    if math.isnan(number) or math.isinf(number) or number < minimum:
        return minimum
    return int(number) if number.is_integer() else number


def time_for_limit(question_limit: int) -> int:
    """Default minutes for a batch of question_limit questions."""
    return max(1, round_half_up(question_limit * MINUTES_PER_QUESTION))


@dataclass(frozen=True)
class QuizConfig:
    """
    Quiz settings (immutable).

    Attributes:
        time_minutes: Time allowed for a batch (raw stored value)
        question_limit: Maximum questions per batch (raw stored value)
        mode: Selection mode
        shuffle_options: Whether options are shuffled per question

    Example:
        >>> QuizConfig(question_limit="").safe_question_limit
        1
    """

    time_minutes: Any = DEFAULT_TIME_MINUTES
    question_limit: Any = DEFAULT_QUESTION_LIMIT
    mode: QuizMode = QuizMode.SERIAL
    shuffle_options: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.mode, QuizMode):
            object.__setattr__(self, "mode", QuizMode(self.mode))

    @property
    def safe_question_limit(self) -> int:
        return coerce_positive_int(self.question_limit)

    @property
    def safe_time_minutes(self) -> Union[int, float]:
        return coerce_positive_number(self.time_minutes)

    def with_question_limit(self, value: Any) -> QuizConfig:
        """
        Apply a manual limit edit.

        A valid number also re-derives the time; an empty, non-numeric or
        infinite entry is stored as typed and leaves the time alone.
        """
        number = _to_number(value)
        if math.isnan(number) or math.isinf(number):
            return replace(self, question_limit=value)
        return replace(self, question_limit=value, time_minutes=time_for_limit(int(number)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "timeMinutes": self.time_minutes,
            "questionLimit": self.question_limit,
            "mode": self.mode.value,
            "shuffleOptions": self.shuffle_options,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> QuizConfig:
        defaults = cls()
        return cls(
            time_minutes=data.get("timeMinutes", defaults.time_minutes),
            question_limit=data.get("questionLimit", defaults.question_limit),
            mode=QuizMode(data.get("mode", defaults.mode.value)),
            shuffle_options=bool(data.get("shuffleOptions", defaults.shuffle_options)),
        )
