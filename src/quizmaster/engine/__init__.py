"""
Engine Package

The exam progression and session engine: batch selection, option
shuffling, scoring, exam labels, history merge and the session operations
that tie them together.
"""

from .errors import (
    QuizEngineError,
    EmptyBankError,
    NoQuestionsAvailableError,
    MalformedBackupError,
    UnknownExamError,
    NoActiveExamError,
    AIUnavailableError,
    ExhaustionReset,
)
from .selection import BatchSelection, select_batch, prepare_batch, shuffle_question_options
from .limits import derive_smart_limits, apply_smart_limits
from .scoring import score_answers, raw_score, alternate_negative_mark
from .labels import assign_labels, pending_label, exam_title, UNLINKED_RETAKE_LABEL
from .history import merge_histories
from .review import ReviewFilter, ReviewItem, review_items
from .session import (
    QuizSession,
    ActiveExam,
    StartOutcome,
    ImportOutcome,
    ProgressStats,
    new_session,
    load_bank,
    change_mode,
    change_question_limit,
    change_time,
    set_shuffle_options,
    start_exam,
    retake_exam,
    submit_exam,
    abandon_exam,
    update_negative_mark,
    rename_exam,
    export_backup,
    import_backup,
    backup_filename,
    progress_stats,
    history_labels,
    current_label,
    reset_session,
)

__all__ = [
    "QuizEngineError",
    "EmptyBankError",
    "NoQuestionsAvailableError",
    "MalformedBackupError",
    "UnknownExamError",
    "NoActiveExamError",
    "AIUnavailableError",
    "ExhaustionReset",
    "BatchSelection",
    "select_batch",
    "prepare_batch",
    "shuffle_question_options",
    "derive_smart_limits",
    "apply_smart_limits",
    "score_answers",
    "raw_score",
    "alternate_negative_mark",
    "assign_labels",
    "pending_label",
    "exam_title",
    "UNLINKED_RETAKE_LABEL",
    "merge_histories",
    "QuizSession",
    "ActiveExam",
    "StartOutcome",
    "ImportOutcome",
    "ProgressStats",
    "new_session",
    "load_bank",
    "change_mode",
    "change_question_limit",
    "change_time",
    "set_shuffle_options",
    "start_exam",
    "retake_exam",
    "submit_exam",
    "abandon_exam",
    "update_negative_mark",
    "rename_exam",
    "export_backup",
    "import_backup",
    "backup_filename",
    "progress_stats",
    "history_labels",
    "current_label",
    "reset_session",
    "ReviewFilter",
    "ReviewItem",
    "review_items",
]
