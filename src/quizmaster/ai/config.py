"""
AI provider settings and their JSON-backed store.

Malformed or missing settings fall back to "no AI configured" and never
raise: the tutor is optional and the rest of the application must keep
working without it.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "gemini"
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_LANGUAGE = "English"
DEFAULT_TIMEOUT_SECONDS = 60.0
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


@dataclass(frozen=True)
class AIConfig:
    provider: str
    api_key: str
    model: str = DEFAULT_MODEL
    language: str = DEFAULT_LANGUAGE
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "apiKey": self.api_key,
            "model": self.model,
            "language": self.language,
            "timeoutSeconds": self.timeout_seconds,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AIConfig:
        return cls(
            provider=data.get("provider") or DEFAULT_PROVIDER,
            api_key=data["apiKey"],
            model=data.get("model") or DEFAULT_MODEL,
            language=data.get("language") or DEFAULT_LANGUAGE,
            timeout_seconds=float(data.get("timeoutSeconds") or DEFAULT_TIMEOUT_SECONDS),
        )


def get_app_data_dir() -> Path:
    """Directory for QuizMaster state files (QUIZMASTER_HOME overrides ~/.quizmaster)."""
    override = os.environ.get("QUIZMASTER_HOME")
    return Path(override) if override else Path.home() / ".quizmaster"


class AISettingsStore:
    """Lightweight JSON-backed store for the AI provider settings."""

    FILENAME = "ai_config.json"
    CURRENT_VERSION = 2  # v2: provider/model/language; v1 held only a bare apiKey

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path or get_app_data_dir() / self.FILENAME
        self.data: Dict[str, Any] = {}
        self.load_error: Optional[str] = None

        if self.path.exists():
            try:
                self.data = json.loads(self.path.read_text(encoding="utf-8"))
                if not isinstance(self.data, dict):
                    raise ValueError("settings root must be an object")
                self._migrate()
            except (json.JSONDecodeError, ValueError) as e:
                self.load_error = f"AI settings file is corrupted: {e}"
                logger.warning(self.load_error)
                self.data = {}
            except OSError as e:
                self.load_error = f"Failed to read AI settings: {e}"
                logger.warning(self.load_error)
                self.data = {}

    def _migrate(self) -> None:
        """Upgrade a v1 file (bare API key) to a full gemini config."""
        if self.data.get("version", 1) >= self.CURRENT_VERSION:
            return
        legacy_key = self.data.get("apiKey")
        if legacy_key:
            self.data = AIConfig(provider=DEFAULT_PROVIDER, api_key=legacy_key).to_dict()
            logger.info("Migrated legacy AI key to provider settings")
        self.data["version"] = self.CURRENT_VERSION
        self._save()

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.data, indent=2), encoding="utf-8")

    def get(self) -> Optional[AIConfig]:
        """Stored config, else one built from the environment, else None."""
        if self.data.get("apiKey"):
            try:
                return AIConfig.from_dict(self.data)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring invalid AI settings: {e}")
        return self._from_environment()

    def set(self, config: AIConfig) -> None:
        self.data = {**config.to_dict(), "version": self.CURRENT_VERSION}
        self._save()

    def clear(self) -> None:
        self.data = {}
        if self.path.exists():
            self.path.unlink()

    @staticmethod
    def _from_environment() -> Optional[AIConfig]:
        load_dotenv()
        for name in API_KEY_ENV_VARS:
            key = os.getenv(name)
            if key:
                return AIConfig(provider=DEFAULT_PROVIDER, api_key=key)
        return None
