"""
Module: engine.review

Purpose:
    Per-question review of a completed attempt. Each question comes back
    with the user's choice and its outcome, optionally narrowed to one
    outcome.

Key Functions:
    - review_items(result, only=ReviewFilter.ALL) -> list[ReviewItem]
    - outcome_of(question, choice) -> ReviewFilter
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from quizmaster.core.models.questions import QuestionRecord
from quizmaster.core.models.results import ExamResult


class ReviewFilter(str, Enum):
    ALL = "ALL"
    CORRECT = "CORRECT"
    WRONG = "WRONG"
    SKIPPED = "SKIPPED"


@dataclass(frozen=True)
class ReviewItem:
    """
    One reviewed question.

    Attributes:
        index: Position within the attempt (the index the tutor chat uses)
        question: Question as it was taken
        choice: User's option key, None when skipped
        outcome: CORRECT, WRONG or SKIPPED
    """

    index: int
    question: QuestionRecord
    choice: Optional[str]
    outcome: ReviewFilter


def outcome_of(question: QuestionRecord, choice: Optional[str]) -> ReviewFilter:
    if choice is None:
        return ReviewFilter.SKIPPED
    return ReviewFilter.CORRECT if question.is_correct(choice) else ReviewFilter.WRONG


def review_items(
    result: ExamResult,
    only: Union[ReviewFilter, str] = ReviewFilter.ALL,
) -> list[ReviewItem]:
    """
    Questions of an attempt in the order they were taken.

    Args:
        result: Completed attempt
        only: Outcome to keep; ALL keeps every question

    Raises:
        ValueError: If only is not a ReviewFilter value
    """
    only = ReviewFilter(only.upper() if isinstance(only, str) else only)
    items = [
        ReviewItem(index=i, question=q, choice=c, outcome=outcome_of(q, c))
        for i, (q, c) in enumerate(zip(result.questions, result.user_choices))
    ]
    if only is ReviewFilter.ALL:
        return items
    return [item for item in items if item.outcome is only]
