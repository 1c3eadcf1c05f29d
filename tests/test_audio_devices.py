"""Tests for microphone enumeration."""

from __future__ import annotations

import sys
from types import SimpleNamespace

import pytest

from resay.core.audio import devices


class _FakeSoundDeviceModule:
    def __init__(self) -> None:
        self.default = SimpleNamespace(device=[2, 0])
        self._devices = [
            {"name": "Speakers", "max_input_channels": 0, "default_samplerate": 48000.0, "hostapi": 0},
            {"name": "USB Mic", "max_input_channels": 1, "default_samplerate": 44100.0, "hostapi": 0},
            {"name": "Built-in Mic", "max_input_channels": 2, "default_samplerate": 48000.0, "hostapi": 0},
        ]

    def query_hostapis(self):
        return [{"name": "ALSA"}]

    def query_devices(self):
        return list(self._devices)


@pytest.fixture
def fake_sounddevice(monkeypatch):
    module = _FakeSoundDeviceModule()
    monkeypatch.setitem(sys.modules, "sounddevice", module)
    return module


def test_list_input_devices_skips_outputs(fake_sounddevice) -> None:
    found = devices.list_input_devices()

    assert [device.name for device in found] == ["USB Mic", "Built-in Mic"]
    assert [device.id for device in found] == [1, 2]
    assert found[1].is_default
    assert found[0].hostapi == "ALSA"


def test_format_device_table_lists_devices(fake_sounddevice) -> None:
    table = devices.format_device_table()

    assert "USB Mic" in table
    assert "Built-in Mic" in table
    assert "Speakers" not in table


def test_format_device_table_fallback_contains_install_hint(monkeypatch) -> None:
    monkeypatch.setattr(devices, "list_input_devices", lambda: [])

    message = devices.format_device_table()

    assert message.startswith("No microphones detected.")
    assert "PortAudio" in message


def test_format_device_table_accepts_custom_device_list() -> None:
    custom = [devices.DeviceInfo(id=7, name="Podcast Mic", max_input_channels=1, default_samplerate=16000, hostapi="Core")]

    table = devices.format_device_table(custom)

    assert "Podcast Mic" in table
    assert "16000" in table
