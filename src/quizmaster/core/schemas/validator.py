"""
Schema Validation Utilities

Validates session backup documents before they are deserialized.

Two shapes are accepted on import:
1. Envelope: an object with "version" and at least one of "rawInput"/"history"
2. Legacy: a bare array of exam results

Anything else fails fast with ValidationError. The structural check runs
first so that the error names the problem plainly; the JSON Schema then
checks every nested field.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from ..models.backup import BACKUP_VERSION

BACKUP_SCHEMA_VERSION = BACKUP_VERSION

_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def is_envelope(data: Any) -> bool:
    """True for an object that looks like a SessionBackup envelope."""
    return (
        isinstance(data, dict)
        and bool(data.get("version"))
        and ("rawInput" in data or isinstance(data.get("history"), list))
    )


def is_legacy_history(data: Any) -> bool:
    """True for the legacy bare-array export."""
    return isinstance(data, list)


def validate_backup(data: Any) -> None:
    """
    Validate an import payload (envelope or legacy array).

    Args:
        data: Decoded JSON payload

    Raises:
        ValidationError: If the payload has no recognizable shape or any
            nested field is invalid
    """
    if is_legacy_history(data):
        validate_history(data)
        return

    if not is_envelope(data):
        raise ValidationError(
            "Unrecognized backup: expected a session envelope or a list of exam results",
            path="",
        )

    version = data.get("version")
    if not isinstance(version, int) or version > BACKUP_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported backup version: {version!r} (expected <= {BACKUP_SCHEMA_VERSION})",
            path="version",
        )

    _validate_against("session_backup", data, "")


def validate_history(items: Any) -> None:
    """
    Validate a list of serialized exam results.

    Raises:
        ValidationError: If items is not a list or any result is invalid
    """
    if not isinstance(items, list):
        raise ValidationError("history must be a list", path="history")
    schema = _load_schema("session_backup")
    history_schema = {"$ref": "#/$defs/history", "$defs": schema["$defs"]}
    _validate_against_schema(history_schema, items, "history")
    for i, item in enumerate(items):
        _validate_result_consistency(item, f"history[{i}]")


def _validate_against(name: str, data: Any, path: str) -> None:
    _validate_against_schema(_load_schema(name), data, path)
    for i, item in enumerate(data.get("history") or []):
        _validate_result_consistency(item, f"history[{i}]")


def _validate_against_schema(schema: dict, data: Any, path: str) -> None:
    validator = jsonschema.Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if errors:
        first = errors[0]
        location = ".".join(str(p) for p in first.absolute_path)
        raise ValidationError(
            f"Schema validation failed: {first.message}",
            path=".".join(filter(None, [path, location])),
            errors=[e.message for e in errors],
        )


def _validate_result_consistency(item: dict[str, Any], path: str) -> None:
    """Cross-field checks the schema cannot express."""
    questions = item["questions"]
    stats = item["stats"]
    if stats["total"] != len(questions):
        raise ValidationError(
            f"stats.total={stats['total']} but {len(questions)} questions",
            path=f"{path}.stats.total",
        )
    if stats["correct"] + stats["wrong"] + stats["skipped"] != stats["total"]:
        raise ValidationError(
            "stats counts do not add up to total",
            path=f"{path}.stats",
        )
