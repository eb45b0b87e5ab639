"""
Module: engine.scoring

Purpose:
    Session scorer. Tallies an attempt and computes scores under a
    negative-mark weight. Nothing here is cached: scores are recomputed
    from stats every time they are displayed.

Key Functions:
    - score_answers(batch, user_choices) -> ExamStats
    - raw_score(stats, negative_mark) -> float
    - alternate_negative_mark(current) -> float
"""

from __future__ import annotations

from typing import Optional, Sequence

from quizmaster.core.models.questions import QuestionRecord
from quizmaster.core.models.results import DEFAULT_NEGATIVE_MARK, ExamStats

NEGATIVE_MARK_CHOICES: tuple[float, ...] = (0.25, 0.50)


def normalize_choices(
    batch: Sequence[QuestionRecord],
    user_choices: Sequence[Optional[str]],
) -> tuple[Optional[str], ...]:
    """One entry per question; missing or empty entries become None."""
    choices = list(user_choices[: len(batch)])
    choices += [None] * (len(batch) - len(choices))
    return tuple(choice or None for choice in choices)


def score_answers(
    batch: Sequence[QuestionRecord],
    user_choices: Sequence[Optional[str]],
) -> ExamStats:
    """
    Tally correct, wrong and skipped answers.

    Example:
        >>> score_answers(batch, ["ক", None, "খ"])
        ExamStats(correct=1, wrong=1, skipped=1, total=3)
    """
    correct = wrong = skipped = 0
    for question, choice in zip(batch, normalize_choices(batch, user_choices)):
        if choice is None:
            skipped += 1
        elif question.is_correct(choice):
            correct += 1
        else:
            wrong += 1
    return ExamStats(correct=correct, wrong=wrong, skipped=skipped, total=len(batch))


def raw_score(stats: ExamStats, negative_mark: float = DEFAULT_NEGATIVE_MARK) -> float:
    """correct - wrong * negative_mark, rounded to 2 decimal places."""
    return stats.raw_score(negative_mark)


def alternate_negative_mark(current: float) -> float:
    """The other standard weight, for side-by-side comparison."""
    return NEGATIVE_MARK_CHOICES[1] if current == NEGATIVE_MARK_CHOICES[0] else NEGATIVE_MARK_CHOICES[0]
