"""
Module: results

Purpose:
    Provides ExamStats and ExamResult - the immutable record of one completed
    attempt. Scores are never stored: they are calculated on demand from the
    stats and a negative-mark weight.

Key Functions:
    - ExamStats.raw_score(weight): correct - wrong * weight, 2 decimals
    - ExamResult.score(weight=None): Score under stored or alternate weight
    - ExamResult.root_id: Id of the root attempt this record belongs to
    - ExamResult.to_dict() / ExamResult.from_dict()

Dependencies:
    - dataclasses (std)
    - .questions.QuestionRecord

Used By:
    - engine.scoring
    - engine.labels
    - engine.history
    - engine.session
    - core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from .questions import QuestionRecord

DEFAULT_NEGATIVE_MARK = 0.25


@dataclass(frozen=True)
class ExamStats:
    """
    Tally of one attempt.

    Invariants:
        - correct + wrong + skipped == total
    """

    correct: int
    wrong: int
    skipped: int
    total: int

    def __post_init__(self) -> None:
        if min(self.correct, self.wrong, self.skipped) < 0:
            raise ValueError(f"Counts cannot be negative: {self}")
        if self.correct + self.wrong + self.skipped != self.total:
            raise ValueError(
                f"Counts do not add up: {self.correct}+{self.wrong}+{self.skipped} != {self.total}"
            )

    @property
    def answered(self) -> int:
        return self.correct + self.wrong

    def raw_score(self, negative_mark: float) -> float:
        """
        Score with one mark per correct answer and a penalty per wrong one.

        Args:
            negative_mark: Weight subtracted for every wrong answer

        Returns:
            correct - wrong * negative_mark, rounded to 2 decimal places
        """
        return round(self.correct - self.wrong * negative_mark, 2)

    def to_dict(self) -> dict[str, int]:
        return {
            "correct": self.correct,
            "wrong": self.wrong,
            "skipped": self.skipped,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ExamStats:
        return cls(
            correct=int(data["correct"]),
            wrong=int(data["wrong"]),
            skipped=int(data["skipped"]),
            total=int(data["total"]),
        )


@dataclass(frozen=True)
class ExamResult:
    """
    One completed attempt (immutable).

    Only negative_mark and exam_name are ever changed after creation, and
    only by building a new record with dataclasses.replace().

    Attributes:
        id: Unique id, monotonic by creation time (epoch milliseconds)
        timestamp: Submission time in epoch milliseconds
        questions: Frozen copy of the batch exactly as it was taken
        user_choices: One option key (or None for no answer) per question
        stats: Correct/wrong/skipped/total counts
        negative_mark: Penalty weight in force for display
        parent_exam_id: Id of the root attempt when this is a retake
        exam_name: Optional user-facing name

    Invariants:
        - len(user_choices) == len(questions)
        - stats.total == len(questions)
    """

    id: int
    timestamp: int
    questions: tuple[QuestionRecord, ...]
    user_choices: tuple[Optional[str], ...]
    stats: ExamStats
    negative_mark: float = DEFAULT_NEGATIVE_MARK
    parent_exam_id: Optional[int] = None
    exam_name: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "questions", tuple(self.questions))
        object.__setattr__(self, "user_choices", tuple(self.user_choices))
        if len(self.user_choices) != len(self.questions):
            raise ValueError(
                f"Result {self.id}: {len(self.user_choices)} choices for "
                f"{len(self.questions)} questions"
            )
        if self.stats.total != len(self.questions):
            raise ValueError(
                f"Result {self.id}: stats.total={self.stats.total} but "
                f"{len(self.questions)} questions"
            )

    @property
    def is_retake(self) -> bool:
        return self.parent_exam_id is not None

    @property
    def root_id(self) -> int:
        """Id a new retake of this record should link to."""
        return self.parent_exam_id if self.parent_exam_id is not None else self.id

    def score(self, negative_mark: Optional[float] = None) -> float:
        """Score under the stored weight, or under an alternate one for comparison."""
        weight = self.negative_mark if negative_mark is None else negative_mark
        return self.stats.raw_score(weight)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "questions": [q.to_dict() for q in self.questions],
            "userChoices": list(self.user_choices),
            "stats": self.stats.to_dict(),
            "negativeMark": self.negative_mark,
        }
        if self.parent_exam_id is not None:
            d["parentExamId"] = self.parent_exam_id
        if self.exam_name:
            d["examName"] = self.exam_name
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ExamResult:
        questions = tuple(QuestionRecord.from_dict(q) for q in data["questions"])
        choices: Sequence[Optional[str]] = [c or None for c in data.get("userChoices", [])]
        # Older files may carry fewer choices than questions; pad as unanswered
        choices = list(choices[: len(questions)]) + [None] * (len(questions) - len(choices))
        negative_mark = data.get("negativeMark")
        return cls(
            id=int(data["id"]),
            timestamp=int(data["timestamp"]),
            questions=questions,
            user_choices=tuple(choices),
            stats=ExamStats.from_dict(data["stats"]),
            negative_mark=DEFAULT_NEGATIVE_MARK if negative_mark is None else float(negative_mark),
            parent_exam_id=int(data["parentExamId"]) if data.get("parentExamId") is not None else None,
            exam_name=data.get("examName") or None,
        )
