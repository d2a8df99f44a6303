"""Tests for settings persistence and API key resolution."""

import json

from config import AppSettings, LLMConfig, resolve_api_key


def test_load_creates_default_file(tmp_path) -> None:
    path = tmp_path / "settings.json"

    settings = AppSettings.load(path)

    assert path.exists()
    assert settings.llm.model_name == "gpt-4o"
    assert json.loads(path.read_text(encoding="utf-8"))["log_level"] == "INFO"


def test_save_and_load(tmp_path) -> None:
    path = tmp_path / "settings.json"
    settings = AppSettings()
    settings.llm.model_name = "local-model"
    settings.analysis.fallback_latency_seconds = 0.0
    settings.save(path)

    loaded = AppSettings.load(path)

    assert loaded.llm.model_name == "local-model"
    assert loaded.analysis.fallback_latency_seconds == 0.0


def test_malformed_file_gives_defaults(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert AppSettings.load(path) == AppSettings()

    path.write_text(json.dumps({"llm": {"unknown_field": 1}}), encoding="utf-8")
    assert AppSettings.load(path) == AppSettings()


def test_environment_key_wins() -> None:
    config = LLMConfig(api_key="saved")
    assert resolve_api_key(config, {"OPENAI_API_KEY": " from-env "}) == "from-env"


def test_blank_environment_key_falls_through() -> None:
    config = LLMConfig(api_key="saved")
    assert resolve_api_key(config, {"OPENAI_API_KEY": "   "}) == "saved"
    assert resolve_api_key(LLMConfig(), {}) == ""
