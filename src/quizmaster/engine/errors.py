"""
Module: engine.errors

Purpose:
    Error taxonomy for the session engine. Every error is recoverable and
    local: raising one never leaves history, progression or an active exam
    half-updated, because operations build their new state only after all
    checks pass.

    ExhaustionReset is deliberately not an exception: a wrap-around is a
    normal policy event that is returned alongside the selected batch.
"""

from __future__ import annotations

from dataclasses import dataclass

from quizmaster.core.models.config import QuizMode


class QuizEngineError(Exception):
    """Base class for engine errors."""
    pass


class EmptyBankError(QuizEngineError):
    """The bank has no questions to select from."""
    pass


class NoQuestionsAvailableError(EmptyBankError):
    """Selection produced an empty batch."""
    pass


class MalformedBackupError(QuizEngineError):
    """Import payload has no recognizable shape; nothing was merged."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class UnknownExamError(QuizEngineError):
    """An operation named a result id that is not in history."""

    def __init__(self, result_id: int):
        super().__init__(f"No exam result with id {result_id}")
        self.result_id = result_id


class NoActiveExamError(QuizEngineError):
    """Submission attempted without an active exam."""
    pass


class AIUnavailableError(QuizEngineError):
    """The explanation generator failed, timed out or returned nothing."""
    pass


@dataclass(frozen=True)
class ExhaustionReset:
    """
    Notice that a mode wrapped back to the full bank.

    Attributes:
        mode: SERIAL or RANDOM_LIMITED
    """

    mode: QuizMode

    @property
    def message(self) -> str:
        if self.mode is QuizMode.SERIAL:
            return "All questions done! Starting again from question 1."
        return "Every question has been served once. Random pool reset."
