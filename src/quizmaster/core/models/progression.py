"""
Module: progression

Purpose:
    Provides the ProgressionState dataclass - how much of the bank has been
    consumed under SERIAL mode and which questions have been served under
    RANDOM_LIMITED mode. Only the batch selector produces new states.

Key Functions:
    - ProgressionState.initial(): Zero state
    - ProgressionState.remaining_serial(total) / remaining_random(total)
    - ProgressionState.to_dict() / ProgressionState.from_dict()

Dependencies:
    - dataclasses (std)

Used By:
    - engine.selection.selector
    - engine.config (smart limit derivation)
    - engine.session
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Mapping


@dataclass(frozen=True)
class ProgressionState:
    """
    Process-lifetime progression counters (immutable).

    Attributes:
        next_serial_index: Next unconsumed bank position for SERIAL mode
        used_random_indices: original_index values already served in RANDOM_LIMITED mode

    Invariants:
        - next_serial_index >= 0
        - Values are relative to the current bank only
    """

    next_serial_index: int = 0
    used_random_indices: FrozenSet[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.next_serial_index < 0:
            raise ValueError(f"next_serial_index cannot be negative: {self.next_serial_index}")
        if not isinstance(self.used_random_indices, frozenset):
            object.__setattr__(self, "used_random_indices", frozenset(self.used_random_indices))

    @classmethod
    def initial(cls) -> ProgressionState:
        """Zero state, used for an empty bank and after a full reset."""
        return cls()

    def remaining_serial(self, total: int) -> int:
        return max(0, total - self.next_serial_index)

    def remaining_random(self, total: int) -> int:
        return max(0, total - len(self.used_random_indices))

    def to_dict(self) -> dict[str, Any]:
        return {
            "nextSerialIndex": self.next_serial_index,
            "usedRandomIndices": sorted(self.used_random_indices),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProgressionState:
        """Deserialize; duplicate indices in older files collapse into the set."""
        return cls(
            next_serial_index=max(0, int(data.get("nextSerialIndex", 0) or 0)),
            used_random_indices=frozenset(int(i) for i in data.get("usedRandomIndices", []) or []),
        )
