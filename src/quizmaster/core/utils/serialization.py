"""
Serialization Utilities

Provides to/from JSON utilities for session backups.

- `serialize_backup()` always emits the full envelope, never the legacy
  bare array.
- `deserialize_payload()` accepts the envelope or the legacy array and
  validates it against the schema before building any model, so a bad file
  never yields a half-built import.
- `load_backup_json()` / `save_backup_json()` read and write backup files.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..models.backup import SessionBackup
from ..models.results import ExamResult
from ..schemas.validator import (
    ValidationError,
    is_legacy_history,
    validate_backup,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportPayload:
    """
    Decoded import file.

    Attributes:
        history: Results carried by the file
        backup: The full envelope, or None for a legacy bare array
    """

    history: tuple[ExamResult, ...]
    backup: Optional[SessionBackup] = None

    @property
    def is_legacy(self) -> bool:
        return self.backup is None


# ─────────────────────────────────────────────────────────────────────────────
# Backup Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_backup(backup: SessionBackup) -> dict[str, Any]:
    """
    Serialize a SessionBackup to a dictionary.

    Args:
        backup: Envelope to serialize

    Returns:
        Dictionary suitable for JSON serialization
    """
    return backup.to_dict()


def deserialize_payload(data: Any) -> ImportPayload:
    """
    Deserialize an import payload.

    Args:
        data: Decoded JSON (envelope dict or legacy list)

    Returns:
        ImportPayload with the parsed history and, for envelopes, the backup

    Raises:
        ValidationError: If the payload is not a recognizable backup
    """
    validate_backup(data)
    try:
        if is_legacy_history(data):
            history = tuple(ExamResult.from_dict(item) for item in data)
            return ImportPayload(history=history)
        backup = SessionBackup.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Backup could not be parsed: {e}") from e
    return ImportPayload(history=backup.history, backup=backup)


def loads_payload(text: str) -> ImportPayload:
    """
    Parse JSON text into an ImportPayload.

    Raises:
        ValidationError: If text is not JSON or not a recognizable backup
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Backup is not valid JSON: {e}") from e
    return deserialize_payload(data)


def dumps_backup(backup: SessionBackup) -> str:
    """Pretty-printed JSON, non-ASCII text kept readable."""
    return json.dumps(serialize_backup(backup), ensure_ascii=False, indent=2)


# ─────────────────────────────────────────────────────────────────────────────
# File I/O
# ─────────────────────────────────────────────────────────────────────────────

def load_backup_json(path: Path) -> ImportPayload:
    """
    Load a backup file.

    Args:
        path: Path to a .json backup (envelope or legacy array)

    Returns:
        ImportPayload

    Raises:
        FileNotFoundError: If path does not exist
        ValidationError: If the file content is not a recognizable backup
    """
    text = Path(path).read_text(encoding="utf-8")
    payload = loads_payload(text)
    logger.debug(
        f"Loaded {'legacy' if payload.is_legacy else 'envelope'} backup "
        f"with {len(payload.history)} results from {path}"
    )
    return payload


def save_backup_json(path: Path, backup: SessionBackup) -> Path:
    """
    Write a backup envelope to path, creating parent directories.

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_backup(backup), encoding="utf-8")
    logger.debug(f"Saved backup with {len(backup.history)} results to {path}")
    return path
