"""Tests for configuration helpers exposed to the UI."""

from __future__ import annotations

import os

import pytest

from resay import config


def test_list_environment_settings_reflects_defaults():
    entries = {entry.env_name: entry for entry in config.list_environment_settings()}

    assert "RESAY_BACKEND" in entries
    assert "RESAY_GEMINI_REWRITE_MODEL" in entries
    assert "RESAY_DEFAULT_MIC_DEVICE" in entries
    assert entries["RESAY_EXPORT_NAME_MAX_LENGTH"].default == 30
    assert entries["RESAY_BACKEND"].value == "gemini"


def test_update_environment_setting_persists_and_reloads():
    updated = config.update_environment_setting("sample_rate", "22050")

    assert updated.sample_rate == 22050
    assert config.get_settings().sample_rate == 22050
    assert os.environ["RESAY_SAMPLE_RATE"] == "22050"

    env_contents = config._ENV_PATH.read_text().strip().splitlines()  # type: ignore[attr-defined]
    assert "RESAY_SAMPLE_RATE=22050" in env_contents


def test_clear_environment_setting_removes_override():
    config.update_environment_setting("sample_rate", "24000")
    cleared = config.clear_environment_setting("sample_rate")

    assert cleared.sample_rate == config.Settings().sample_rate
    assert "RESAY_SAMPLE_RATE" not in os.environ
    assert not config._ENV_PATH.exists()  # type: ignore[attr-defined]


def test_invalid_value_is_rejected_and_previous_value_kept():
    config.update_environment_setting("sample_rate", "24000")

    with pytest.raises(config.EnvironmentSettingError):
        config.update_environment_setting("sample_rate", "not-a-number")

    assert os.environ["RESAY_SAMPLE_RATE"] == "24000"
    assert config.get_settings().sample_rate == 24000


def test_unknown_setting_is_rejected():
    with pytest.raises(config.EnvironmentSettingError):
        config.update_environment_setting("does_not_exist", "1")


def test_backend_name_is_validated_and_normalised():
    assert config.update_environment_setting("backend", " OpenAI ").backend == "openai"

    with pytest.raises(config.EnvironmentSettingError):
        config.update_environment_setting("backend", "unknown")

    assert config.get_settings().backend == "openai"


def test_api_keys_are_flagged_secret():
    entries = {entry.field: entry for entry in config.list_environment_settings()}

    assert entries["gemini_api_key"].secret
    assert entries["openai_api_key"].secret
    assert not entries["backend"].secret
