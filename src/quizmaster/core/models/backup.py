"""
Module: backup

Purpose:
    Provides SessionBackup - the versioned envelope bundling the raw bank
    text, quiz settings, progression counters and full history for export
    and import.

Dependencies:
    - dataclasses (std)
    - .config, .progression, .results

Used By:
    - core.utils.serialization
    - engine.session
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .config import QuizConfig
from .progression import ProgressionState
from .results import ExamResult

BACKUP_VERSION = 1


@dataclass(frozen=True)
class SessionBackup:
    """
    Export/import envelope (immutable).

    Fields other than version and history are optional on import: an
    envelope written by an older build may omit them, and only the fields
    present are restored.

    Attributes:
        version: Envelope version (currently 1)
        timestamp: Export time in epoch milliseconds
        raw_input: Raw question-bank text
        config: Quiz settings
        progress: Progression counters
        history: All results, ascending by timestamp
    """

    version: int
    timestamp: int
    raw_input: Optional[str]
    config: Optional[QuizConfig]
    progress: Optional[ProgressionState]
    history: tuple[ExamResult, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "history", tuple(self.history))

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "timestamp": self.timestamp,
            "rawInput": self.raw_input or "",
            "config": (self.config or QuizConfig()).to_dict(),
            "progress": (self.progress or ProgressionState.initial()).to_dict(),
            "history": [result.to_dict() for result in self.history],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SessionBackup:
        return cls(
            version=int(data["version"]),
            timestamp=int(data.get("timestamp", 0) or 0),
            raw_input=data.get("rawInput"),
            config=QuizConfig.from_dict(data["config"]) if data.get("config") else None,
            progress=ProgressionState.from_dict(data["progress"]) if data.get("progress") else None,
            history=tuple(ExamResult.from_dict(item) for item in data.get("history") or []),
        )
