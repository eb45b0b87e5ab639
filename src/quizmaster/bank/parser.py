"""
Module: bank.parser

Purpose:
    Turn raw question-bank text into an ordered tuple of QuestionRecords.

    Format:
        ***Optional Exam Name***
        Question one | option 1 | option 2 | option 3 | option 4 | খ ###
        Question two | option 1 | option 2 | option 3 | option 4 | A ###

    Blocks are separated by "###". Within a block the last five "|"-separated
    fields are the four options and the answer; everything before them is
    the question text (so a question may itself contain "|").

Key Functions:
    - parse_questions(raw): Ordered, immutable bank
    - extract_exam_name(raw): Title between *** markers, or None
    - resolve_answer(answer, options): Answer text or alias to option key
    - generate_backup_filename(name, when): Export file name

Dependencies:
    - re (std)
    - datetime (std)
    - core.models.questions

Used By:
    - engine.session
    - cli
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Optional

from quizmaster.core.models.questions import OPTION_KEYS, QuestionRecord

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "###"
FIELD_SEPARATOR = "|"
DEFAULT_BACKUP_NAME = "quiz_session"

_TITLE_RE = re.compile(r"^\s*\*\*\*(.+?)\*\*\*", re.DOTALL)

# Alternate spellings of the answer field, mapped onto OPTION_KEYS by position
_ANSWER_ALIASES: tuple[tuple[str, ...], ...] = (
    ("a", "1", "১"),
    ("b", "2", "২"),
    ("c", "3", "৩"),
    ("d", "4", "৪"),
)


def extract_exam_name(raw: str) -> Optional[str]:
    """
    Read the exam title from the first ***...*** marker.

    Example:
        >>> extract_exam_name("***Physics Mock***\\nQ | a | b | c | d | ক ###")
        'Physics Mock'
    """
    if not raw:
        return None
    match = _TITLE_RE.match(raw)
    if not match:
        return None
    name = match.group(1).strip()
    return name or None


def _strip_title(raw: str) -> str:
    match = _TITLE_RE.match(raw)
    return raw[match.end():] if match else raw


def resolve_answer(answer: str, options: Optional[dict[str, str]] = None) -> Optional[str]:
    """Map the answer field onto an option key, or None if it names none."""
    answer = answer.strip()
    if answer in OPTION_KEYS:
        return answer
    lowered = answer.lower().rstrip(").")
    for key, aliases in zip(OPTION_KEYS, _ANSWER_ALIASES):
        if lowered in aliases:
            return key
    for key, text in (options or {}).items():
        if text == answer:
            return key
    return None


def parse_questions(raw: str) -> tuple[QuestionRecord, ...]:
    """
    Parse raw bank text.

    Malformed blocks (too few fields, empty question, unresolvable answer)
    are skipped with a warning; original_index counts accepted questions
    only, so it is stable for the same raw text.

    Args:
        raw: Raw bank text

    Returns:
        Tuple of QuestionRecords in bank order (empty for blank input)
    """
    if not raw or not raw.strip():
        return ()

    body = _strip_title(raw)
    questions: list[QuestionRecord] = []
    for block_no, block in enumerate(body.split(BLOCK_SEPARATOR), start=1):
        if not block.strip():
            continue
        fields = [f.strip() for f in block.split(FIELD_SEPARATOR)]
        if len(fields) < len(OPTION_KEYS) + 2:
            logger.warning(
                f"Skipping block {block_no}: expected question, 4 options and answer, "
                f"got {len(fields)} fields"
            )
            continue

        text = f" {FIELD_SEPARATOR} ".join(fields[: -(len(OPTION_KEYS) + 1)]).strip()
        option_texts = fields[-(len(OPTION_KEYS) + 1):-1]
        options = dict(zip(OPTION_KEYS, option_texts))
        if not text:
            logger.warning(f"Skipping block {block_no}: empty question text")
            continue

        correct_key = resolve_answer(fields[-1], options)
        if correct_key is None:
            logger.warning(f"Skipping block {block_no}: answer {fields[-1]!r} names no option")
            continue

        questions.append(
            QuestionRecord(
                text=text,
                options=options,
                correct_key=correct_key,
                original_index=len(questions),
            )
        )

    logger.debug(f"Parsed {len(questions)} questions")
    return tuple(questions)


def _slugify(name: str) -> str:
    slug = re.sub(r"[^\w\-]+", "_", name.strip(), flags=re.UNICODE).strip("_")
    return slug[:60] or DEFAULT_BACKUP_NAME


def generate_backup_filename(name: Optional[str] = None, when: Optional[datetime] = None) -> str:
    """
    Deterministic export file name from the bank title and export time.

    Example:
        >>> generate_backup_filename("Physics Mock", datetime(2026, 3, 1, 9, 5))
        'Physics_Mock_2026-03-01_09-05.json'
    """
    when = when or datetime.now()
    slug = _slugify(name) if name else DEFAULT_BACKUP_NAME
    return f"{slug}_{when:%Y-%m-%d_%H-%M}.json"
