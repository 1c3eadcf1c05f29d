"""Shared fixtures keeping configuration isolated per test."""

from __future__ import annotations

import os

import pytest

from resay import config


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test from a scratch directory with no RESAY_ overrides."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "_ENV_PATH", tmp_path / ".env")
    monkeypatch.setattr(config, "_settings", None)

    for key in list(os.environ):
        if key.startswith("RESAY_"):
            monkeypatch.delenv(key, raising=False)

    yield
