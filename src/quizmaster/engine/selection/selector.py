"""
Module: engine.selection.selector

Purpose:
    Batch selection. Chooses which questions form the next attempt under
    the active mode and returns the updated progression state.

Key Functions:
    - select_batch(): Main entry point for selection

Key Classes:
    - BatchSelection: Selected batch, new progression, optional reset notice

Algorithm:
    SERIAL:           contiguous slice from the cursor, wrapping to 0 at the end
    RANDOM_LIMITED:   uniform draw from questions not yet served, pool
                      resets once every question has been served
    RANDOM_UNLIMITED: uniform draw from the whole bank, no state

Dependencies:
    - quizmaster.core.models: QuestionRecord, ProgressionState, QuizMode
    - engine.errors

Used By:
    - engine.session
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from quizmaster.core.models.config import QuizMode, coerce_positive_int
from quizmaster.core.models.progression import ProgressionState
from quizmaster.core.models.questions import QuestionRecord

from ..errors import EmptyBankError, ExhaustionReset, NoQuestionsAvailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchSelection:
    """
    Result of one selection (immutable).

    Attributes:
        questions: Ordered batch
        progression: Progression state to store after this selection
        reset: Set when the mode wrapped back to the full bank

    Invariants:
        - 1 <= len(questions) <= requested limit
    """

    questions: tuple[QuestionRecord, ...]
    progression: ProgressionState
    reset: Optional[ExhaustionReset] = None

    @property
    def was_reset(self) -> bool:
        return self.reset is not None


def select_batch(
    bank: Sequence[QuestionRecord],
    mode: QuizMode,
    limit: Any,
    progression: ProgressionState,
    rng: Optional[random.Random] = None,
) -> BatchSelection:
    """
    Select the next batch.

    Args:
        bank: Full ordered bank
        mode: Selection mode
        limit: Requested batch size (coerced to >= 1)
        progression: Current progression state
        rng: Random source (a fresh unseeded Random when omitted)

    Returns:
        BatchSelection with the batch and the new progression state

    Raises:
        EmptyBankError: If the bank is empty
        NoQuestionsAvailableError: If the computed batch is empty

    Example:
        >>> sel = select_batch(bank, QuizMode.SERIAL, 10, ProgressionState())
        >>> sel.progression.next_serial_index
        10
    """
    if not bank:
        raise EmptyBankError("No questions in the bank")

    safe_limit = coerce_positive_int(limit)
    rng = rng or random.Random()
    mode = QuizMode(mode)

    if mode is QuizMode.SERIAL:
        selection = _select_serial(bank, safe_limit, progression)
    elif mode is QuizMode.RANDOM_LIMITED:
        selection = _select_random_limited(bank, safe_limit, progression, rng)
    else:
        selection = _select_random_unlimited(bank, safe_limit, progression, rng)

    if not selection.questions:
        raise NoQuestionsAvailableError(f"No questions available in {mode.value} mode")

    if selection.reset:
        logger.info(f"{mode.value} exhausted the bank of {len(bank)}; starting over")
    logger.debug(
        f"Selected {len(selection.questions)} of {len(bank)} questions in {mode.value} mode"
    )
    return selection


def _select_serial(
    bank: Sequence[QuestionRecord],
    limit: int,
    progression: ProgressionState,
) -> BatchSelection:
    start = progression.next_serial_index
    reset = None
    if start >= len(bank):
        start = 0
        reset = ExhaustionReset(QuizMode.SERIAL)

    batch = tuple(bank[start:start + limit])
    new_progression = ProgressionState(
        next_serial_index=start + len(batch),
        used_random_indices=progression.used_random_indices,
    )
    return BatchSelection(batch, new_progression, reset)


def _select_random_limited(
    bank: Sequence[QuestionRecord],
    limit: int,
    progression: ProgressionState,
    rng: random.Random,
) -> BatchSelection:
    used = progression.used_random_indices
    eligible = [q for q in bank if q.original_index not in used]
    reset = None
    if not eligible:
        used = frozenset()
        eligible = list(bank)
        reset = ExhaustionReset(QuizMode.RANDOM_LIMITED)

    rng.shuffle(eligible)
    batch = tuple(eligible[:limit])
    new_progression = ProgressionState(
        next_serial_index=progression.next_serial_index,
        used_random_indices=used | {q.original_index for q in batch},
    )
    return BatchSelection(batch, new_progression, reset)


def _select_random_unlimited(
    bank: Sequence[QuestionRecord],
    limit: int,
    progression: ProgressionState,
    rng: random.Random,
) -> BatchSelection:
    pool = list(bank)
    rng.shuffle(pool)
    return BatchSelection(tuple(pool[:limit]), progression)
