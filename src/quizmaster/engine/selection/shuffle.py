"""
Module: engine.selection.shuffle

Purpose:
    Option randomizer. Permutes each question's four options independently
    and moves the correct key to wherever the correct option landed.

Key Functions:
    - shuffle_question_options(question, rng): One question
    - prepare_batch(batch, shuffle, force=False, rng=None): Whole batch

Used By:
    - engine.session (start and retake)
"""

from __future__ import annotations

import random
from typing import Optional, Sequence

from quizmaster.core.models.questions import OPTION_KEYS, QuestionRecord


def shuffle_question_options(question: QuestionRecord, rng: random.Random) -> QuestionRecord:
    """
    Return a copy of question with its options uniformly permuted.

    The correct option is tracked by position rather than by text, so a
    bank with two identical option texts still gets exactly one correct key.
    A question whose correct key is not one of its options keeps that key.

    Args:
        question: Question to shuffle
        rng: Random source

    Returns:
        New QuestionRecord; the multiset of option texts is unchanged
    """
    keys = [key for key in OPTION_KEYS if key in question.options]
    order = list(range(len(keys)))
    rng.shuffle(order)

    new_options = {key: question.options[keys[src]] for key, src in zip(keys, order)}
    correct_key = question.correct_key
    if correct_key in keys:
        correct_pos = keys.index(correct_key)
        correct_key = keys[order.index(correct_pos)]

    return QuestionRecord(
        text=question.text,
        options=new_options,
        correct_key=correct_key,
        original_index=question.original_index,
    )


def prepare_batch(
    batch: Sequence[QuestionRecord],
    shuffle: bool,
    force: bool = False,
    rng: Optional[random.Random] = None,
) -> tuple[QuestionRecord, ...]:
    """
    Apply option shuffling to a batch.

    Args:
        batch: Questions as selected
        shuffle: The live shuffle_options setting
        force: Shuffle regardless of the setting (retakes)
        rng: Random source (a fresh unseeded Random when omitted)

    Returns:
        Tuple of questions, unchanged when neither shuffle nor force is set
    """
    if not shuffle and not force:
        return tuple(batch)
    rng = rng or random.Random()
    return tuple(shuffle_question_options(q, rng) for q in batch)
