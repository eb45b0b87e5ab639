"""
Selection Package

Batch selection and option shuffling.
"""

from .selector import BatchSelection, select_batch
from .shuffle import prepare_batch, shuffle_question_options

__all__ = [
    "BatchSelection",
    "select_batch",
    "prepare_batch",
    "shuffle_question_options",
]
