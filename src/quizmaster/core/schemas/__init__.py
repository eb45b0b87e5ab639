"""
Schemas Package

JSON schema definitions and validation utilities for session backups.
"""

from .validator import (
    validate_backup,
    validate_history,
    is_envelope,
    is_legacy_history,
    ValidationError,
    BACKUP_SCHEMA_VERSION,
)

__all__ = [
    "validate_backup",
    "validate_history",
    "is_envelope",
    "is_legacy_history",
    "ValidationError",
    "BACKUP_SCHEMA_VERSION",
]
