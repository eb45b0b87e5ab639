"""
Unit Tests for AI Settings

Tests for AIConfig and the JSON-backed AISettingsStore.
"""

import json
import pytest
from pathlib import Path

from quizmaster.ai.config import (
    AIConfig,
    AISettingsStore,
    DEFAULT_MODEL,
    get_app_data_dir,
)


@pytest.fixture(autouse=True)
def no_env_keys(monkeypatch):
    """Keep real API keys in the environment out of these tests."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.setattr("quizmaster.ai.config.load_dotenv", lambda *a, **k: False)


class TestAISettingsStore:
    """Tests for AISettingsStore."""

    def test_get_when_nothing_configured_then_none(self, tmp_path: Path):
        assert AISettingsStore(tmp_path / "ai_config.json").get() is None

    def test_get_when_env_key_then_gemini_config(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "env-key")

        config = AISettingsStore(tmp_path / "ai_config.json").get()

        assert config == AIConfig(provider="gemini", api_key="env-key")
        assert config.model == DEFAULT_MODEL

    def test_set_when_saved_then_reloaded(self, tmp_path: Path):
        path = tmp_path / "nested" / "ai_config.json"
        config = AIConfig(provider="gemini", api_key="k", model="gemini-2.5-pro", language="Bengali")

        AISettingsStore(path).set(config)

        assert AISettingsStore(path).get() == config
        assert json.loads(path.read_text(encoding="utf-8"))["version"] == AISettingsStore.CURRENT_VERSION

    def test_load_when_legacy_bare_key_then_migrated(self, tmp_path: Path):
        """A file holding only the old API key becomes a full gemini config."""
        path = tmp_path / "ai_config.json"
        path.write_text(json.dumps({"apiKey": "legacy"}), encoding="utf-8")

        store = AISettingsStore(path)

        assert store.get() == AIConfig(provider="gemini", api_key="legacy")
        saved = json.loads(path.read_text(encoding="utf-8"))
        assert saved["provider"] == "gemini"
        assert saved["version"] == 2

    def test_load_when_corrupt_then_error_recorded_and_no_config(self, tmp_path: Path):
        path = tmp_path / "ai_config.json"
        path.write_text("{not json", encoding="utf-8")

        store = AISettingsStore(path)

        assert store.load_error is not None
        assert store.get() is None

    def test_load_when_root_not_object_then_error_recorded(self, tmp_path: Path):
        path = tmp_path / "ai_config.json"
        path.write_text("[1, 2]", encoding="utf-8")

        assert AISettingsStore(path).load_error is not None

    def test_clear_when_saved_then_file_removed(self, tmp_path: Path):
        path = tmp_path / "ai_config.json"
        store = AISettingsStore(path)
        store.set(AIConfig(provider="gemini", api_key="k"))

        store.clear()

        assert not path.exists()
        assert store.get() is None

    def test_default_path_when_home_override_then_used(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("QUIZMASTER_HOME", str(tmp_path))

        assert get_app_data_dir() == tmp_path
        assert AISettingsStore().path == tmp_path / "ai_config.json"


class TestAIConfig:
    """Tests for AIConfig serialization."""

    def test_from_dict_when_only_key_then_defaults(self):
        config = AIConfig.from_dict({"apiKey": "k"})

        assert config.provider == "gemini"
        assert config.timeout_seconds == 60.0

    def test_to_dict_when_called_then_wire_names(self):
        data = AIConfig(provider="gemini", api_key="k").to_dict()

        assert data["apiKey"] == "k"
        assert "timeoutSeconds" in data
