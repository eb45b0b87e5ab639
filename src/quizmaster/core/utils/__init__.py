"""
Utils Package

Serialization and file helpers for session backups.
"""

from .serialization import (
    ImportPayload,
    serialize_backup,
    deserialize_payload,
    loads_payload,
    dumps_backup,
    load_backup_json,
    save_backup_json,
)

__all__ = [
    "ImportPayload",
    "serialize_backup",
    "deserialize_payload",
    "loads_payload",
    "dumps_backup",
    "load_backup_json",
    "save_backup_json",
]
