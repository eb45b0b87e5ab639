"""
Core Models Package

Immutable data models shared by the parser, the engine and serialization.

All models in this package are frozen dataclasses. Changes (a shuffled
question, an edited negative mark, an advanced progression cursor) always
produce new instances, so a session state can be handed around without
anyone mutating it underneath.
"""

from .questions import OPTION_KEYS, QuestionRecord
from .config import QuizConfig, QuizMode
from .progression import ProgressionState
from .results import DEFAULT_NEGATIVE_MARK, ExamResult, ExamStats
from .backup import BACKUP_VERSION, SessionBackup

__all__ = [
    "OPTION_KEYS",
    "QuestionRecord",
    "QuizConfig",
    "QuizMode",
    "ProgressionState",
    "DEFAULT_NEGATIVE_MARK",
    "ExamResult",
    "ExamStats",
    "BACKUP_VERSION",
    "SessionBackup",
]
