"""
QuizMaster Core Package

Shared data models, backup schema validation and serialization. These
models are the single source of truth for the parser, the engine and the
command-line front end.

**DESIGN NOTES:**

1. **Immutable Data Models**
   - Frozen dataclasses; any change builds a new instance

2. **Calculated Scores (Never Stored)**
   - Scores are always derived from stats and a negative-mark weight
   - Exam labels are always derived from the sorted history

3. **Stable Wire Format**
   - `to_dict()` / `from_dict()` use the persisted camelCase field names,
     so backups written by earlier builds keep loading
"""

from .models import (
    OPTION_KEYS,
    QuestionRecord,
    QuizConfig,
    QuizMode,
    ProgressionState,
    ExamResult,
    ExamStats,
    SessionBackup,
)

__all__ = [
    "OPTION_KEYS",
    "QuestionRecord",
    "QuizConfig",
    "QuizMode",
    "ProgressionState",
    "ExamResult",
    "ExamStats",
    "SessionBackup",
]
