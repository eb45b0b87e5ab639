"""
Module: questions

Purpose:
    Provides the QuestionRecord dataclass - one multiple-choice question as
    produced by the bank parser. Immutable: shuffling options or copying a
    batch into a result always creates new instances.

Key Functions:
    - QuestionRecord.options_in_key_order: Option texts in OPTION_KEYS order
    - QuestionRecord.correct_text: Text of the correct option
    - QuestionRecord.is_correct(choice): Exact key equality check
    - QuestionRecord.to_dict() / QuestionRecord.from_dict(): Serialization

Dependencies:
    - dataclasses (std)

Used By:
    - bank.parser
    - engine.selection
    - engine.scoring
    - core.models.results.ExamResult
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

# Fixed option keys, in display order. These are also the persisted keys of
# the "opt" mapping and the values stored in "a" and "userChoices".
OPTION_KEYS: tuple[str, ...] = ("ক", "খ", "গ", "ঘ")


@dataclass(frozen=True)
class QuestionRecord:
    """
    A single question from the bank (immutable).

    Attributes:
        text: Question text (markup tokens are kept verbatim)
        options: Mapping from option key to option text
        correct_key: Key of the correct option
        original_index: Position in the parsed bank, stable for the same raw text

    Invariants:
        - original_index >= 0
        - options is a private copy of the mapping passed in

    Example:
        >>> q = QuestionRecord("2 + 2?", {"ক": "3", "খ": "4", "গ": "5", "ঘ": "6"}, "খ", 0)
        >>> q.correct_text
        '4'
    """

    text: str
    options: Mapping[str, str]
    correct_key: str
    original_index: int

    def __post_init__(self) -> None:
        """Validate on construction and take a private copy of options."""
        if self.original_index < 0:
            raise ValueError(f"original_index cannot be negative: {self.original_index}")
        object.__setattr__(self, "options", dict(self.options))

    def __hash__(self) -> int:
        return hash((self.text, tuple(self.options.items()), self.correct_key, self.original_index))

    @property
    def options_in_key_order(self) -> tuple[Optional[str], ...]:
        """Option texts ordered by OPTION_KEYS (None for a missing key)."""
        return tuple(self.options.get(key) for key in OPTION_KEYS)

    @property
    def correct_text(self) -> Optional[str]:
        """Text of the correct option, or None if the key has no option."""
        return self.options.get(self.correct_key)

    def is_correct(self, choice: Optional[str]) -> bool:
        """True when choice exactly equals the correct key."""
        return choice is not None and choice == self.correct_key

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the persisted field names."""
        return {
            "q": self.text,
            "opt": dict(self.options),
            "a": self.correct_key,
            "originalIndex": self.original_index,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> QuestionRecord:
        """Deserialize from the persisted field names."""
        return cls(
            text=data["q"],
            options={str(k): str(v) for k, v in data["opt"].items()},
            correct_key=data["a"],
            original_index=int(data.get("originalIndex", 0)),
        )
