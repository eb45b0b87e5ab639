"""
Module: engine.history

Purpose:
    History merge and lookup helpers.

    merge_histories() is idempotent: ids already present win, so merging
    the same incoming collection twice adds nothing the second time. Two
    different records that collide on id are not reconciled; the one
    already present is kept (first-wins).
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional

from quizmaster.core.models.results import ExamResult

from .errors import UnknownExamError
from .labels import chronological

logger = logging.getLogger(__name__)


def merge_histories(
    existing: Iterable[ExamResult],
    incoming: Iterable[ExamResult],
) -> list[ExamResult]:
    """
    Combine two histories, deduplicated by id, ascending by timestamp.

    Args:
        existing: Current history (wins on id collision)
        incoming: Imported history

    Returns:
        New list sorted by (timestamp, id)
    """
    existing = list(existing)
    seen = {result.id for result in existing}
    added: list[ExamResult] = []
    skipped = 0
    for result in incoming:
        if result.id in seen:
            skipped += 1
            continue
        seen.add(result.id)
        added.append(result)
    if skipped:
        logger.debug(f"Merge skipped {skipped} results already present")
    return chronological(existing + added)


def find_result(history: Iterable[ExamResult], result_id: int) -> ExamResult:
    """
    Raises:
        UnknownExamError: If no result has result_id
    """
    for result in history:
        if result.id == result_id:
            return result
    raise UnknownExamError(result_id)


def replace_result(
    history: Iterable[ExamResult],
    result_id: int,
    *,
    negative_mark: Optional[float] = None,
    exam_name: Optional[str] = None,
    clear_name: bool = False,
) -> tuple[ExamResult, ...]:
    """
    New history with one record's editable fields changed.

    Only negative_mark and exam_name are editable after creation.

    Raises:
        UnknownExamError: If no result has result_id
    """
    history = tuple(history)
    target = find_result(history, result_id)
    changes: dict = {}
    if negative_mark is not None:
        if negative_mark < 0:
            raise ValueError(f"negative_mark cannot be negative: {negative_mark}")
        changes["negative_mark"] = negative_mark
    if clear_name:
        changes["exam_name"] = None
    elif exam_name is not None:
        changes["exam_name"] = exam_name
    updated = replace(target, **changes)
    return tuple(updated if r.id == result_id else r for r in history)


def next_result_id(history: Iterable[ExamResult], now_ms: int) -> int:
    """Creation-time id, bumped past the newest existing id so ids stay unique and increasing."""
    latest = max((r.id for r in history), default=0)
    return max(now_ms, latest + 1)
