"""Tests for settings loading and validation."""

from __future__ import annotations

import json

import pytest

from quiz_gate.config import Settings, load_settings
from quiz_gate.config.loader import OVERRIDES_ENV_VAR, merge_dicts


@pytest.fixture(autouse=True)
def no_overrides(monkeypatch):
    monkeypatch.delenv(OVERRIDES_ENV_VAR, raising=False)


def test_defaults_match_documented_values():
    settings = Settings()
    assert settings.timeouts.read_seconds == 10
    assert settings.timeouts.submit_seconds == 15
    assert settings.cache.questions_ttl_seconds == 300
    assert settings.cache.leaderboard_ttl_seconds == 120
    assert settings.rate_limit.min_interval_seconds == 10
    assert settings.gate.min_interaction_events == 3
    assert (settings.submission.name_min_length, settings.submission.name_max_length) == (2, 50)


def test_load_yaml_with_env_overrides(tmp_path, monkeypatch):
    config_file = tmp_path / "quiz.yaml"
    config_file.write_text(
        "endpoints:\n  base_url: http://example.org/\ncache:\n  leaderboard_ttl_seconds: 30\n",
        encoding="utf-8",
    )
    monkeypatch.setenv(OVERRIDES_ENV_VAR, '{"cache": {"questions_ttl_seconds": 60}}')

    settings = load_settings(config_file)

    assert settings.endpoints.base_url == "http://example.org"
    assert settings.cache.leaderboard_ttl_seconds == 30
    assert settings.cache.questions_ttl_seconds == 60


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "absent.yaml")


def test_defaults_used_without_any_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_settings() == Settings()


def test_bad_override_json_raises(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(OVERRIDES_ENV_VAR, "{not json")
    with pytest.raises(ValueError, match=OVERRIDES_ENV_VAR):
        load_settings()


@pytest.mark.parametrize(
    "payload",
    [
        {"timeouts": {"read_seconds": 0}},
        {"rate_limit": {"min_interval_seconds": -1}},
        {"submission": {"name_min_length": 10, "name_max_length": 5}},
    ],
)
def test_invalid_values_rejected(tmp_path, monkeypatch, payload):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(OVERRIDES_ENV_VAR, json.dumps(payload))
    with pytest.raises(ValueError, match="Invalid configuration"):
        load_settings()


def test_merge_dicts_is_recursive():
    merged = merge_dicts({"a": {"b": 1, "c": 2}, "d": 3}, {"a": {"c": 9}})
    assert merged == {"a": {"b": 1, "c": 9}, "d": 3}
