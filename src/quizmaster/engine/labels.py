"""
Module: engine.labels

Purpose:
    Exam label assigner. Derives display labels ("1", "1.2") from the
    history alone; labels are never stored, so merges and edits can never
    leave them stale.

Key Functions:
    - assign_labels(history) -> {result id: label}
    - pending_label(history, parent_exam_id=None) -> label of the next attempt
    - exam_title(label) -> "Exam 1.2"

Algorithm:
    Walk the history by ascending (timestamp, id). A record without a parent
    takes the next integer N. A record whose parent is a root already seen
    takes N.M, M counting that root's retakes so far. Anything else is an
    unlinked retake and consumes no number.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from quizmaster.core.models.results import ExamResult

UNLINKED_RETAKE_LABEL = "Retake"


def chronological(history: Iterable[ExamResult]) -> list[ExamResult]:
    """History sorted by (timestamp, id); independent of insertion order."""
    return sorted(history, key=lambda r: (r.timestamp, r.id))


@dataclass
class _Numbering:
    next_root: int = 1
    root_numbers: Dict[int, int] = field(default_factory=dict)
    retake_counts: Dict[int, int] = field(default_factory=dict)

    def add_root(self, result_id: int) -> str:
        number = self.next_root
        self.next_root += 1
        self.root_numbers[result_id] = number
        self.retake_counts[result_id] = 0
        return str(number)

    def add_retake(self, parent_id: int) -> str:
        if parent_id not in self.root_numbers:
            return UNLINKED_RETAKE_LABEL
        self.retake_counts[parent_id] += 1
        return f"{self.root_numbers[parent_id]}.{self.retake_counts[parent_id]}"

    def peek(self, parent_id: Optional[int]) -> str:
        if parent_id is None:
            return str(self.next_root)
        if parent_id not in self.root_numbers:
            return UNLINKED_RETAKE_LABEL
        return f"{self.root_numbers[parent_id]}.{self.retake_counts[parent_id] + 1}"


def _number(history: Iterable[ExamResult]) -> tuple[_Numbering, Dict[int, str]]:
    numbering = _Numbering()
    labels: Dict[int, str] = {}
    for result in chronological(history):
        if result.parent_exam_id is None:
            labels[result.id] = numbering.add_root(result.id)
        else:
            labels[result.id] = numbering.add_retake(result.parent_exam_id)
    return numbering, labels


def assign_labels(history: Iterable[ExamResult]) -> Dict[int, str]:
    """
    Label every record in history.

    Example:
        >>> assign_labels([root, retake1, other_root, retake2])
        {1: '1', 2: '1.1', 3: '2', 4: '1.2'}
    """
    _, labels = _number(history)
    return labels


def pending_label(history: Iterable[ExamResult], parent_exam_id: Optional[int] = None) -> str:
    """
    Label for an attempt that has not been submitted yet.

    The attempt is treated as appended after every existing record.

    Args:
        history: Existing results
        parent_exam_id: Root id when the attempt is a retake
    """
    numbering, _ = _number(history)
    return numbering.peek(parent_exam_id)


def exam_title(label: str) -> str:
    """Display title for a label."""
    if label == UNLINKED_RETAKE_LABEL:
        return label
    return f"Exam {label}"
