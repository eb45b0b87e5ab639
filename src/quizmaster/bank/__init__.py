"""
Question Bank Package

Parses raw question-bank text into immutable QuestionRecords.
"""

from .parser import (
    parse_questions,
    extract_exam_name,
    generate_backup_filename,
    resolve_answer,
    DEFAULT_BACKUP_NAME,
)

__all__ = [
    "parse_questions",
    "extract_exam_name",
    "generate_backup_filename",
    "resolve_answer",
    "DEFAULT_BACKUP_NAME",
]
