"""Factory helpers for constructing microphone capture instances."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...config import get_settings
from .base import AudioCapture, CaptureError, CaptureInfo


class CaptureConfigurationError(RuntimeError):
    """Raised when a capture stream cannot be configured."""


@dataclass
class CaptureRequest:
    """Description of the microphone the user asked for."""

    device: Optional[str] = None
    sample_rate: Optional[int] = None
    channels: Optional[int] = None


def _parse_device(device: Optional[str]) -> Optional[int | str]:
    if device is None:
        return None
    device = device.strip()
    if not device or device.lower() in {"default", "auto"}:
        return None
    if device.isdigit():
        return int(device)
    return device


def create_capture(request: Optional[CaptureRequest] = None) -> AudioCapture:
    """Create a sounddevice capture for ``request``, falling back to settings."""

    settings = get_settings()
    request = request or CaptureRequest()
    device = _parse_device(request.device if request.device is not None else settings.default_mic_device)

    try:
        from .sounddevice_backend import SoundDeviceCapture
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise CaptureConfigurationError("sounddevice dependency is required for audio capture") from exc

    info = CaptureInfo(
        name="instruction",
        sample_rate=request.sample_rate or settings.sample_rate,
        channels=request.channels or settings.channels,
        device="default" if device is None else str(device),
    )
    try:
        return SoundDeviceCapture(info=info, device=device)
    except CaptureError as exc:
        raise CaptureConfigurationError(str(exc)) from exc


__all__ = ["CaptureConfigurationError", "CaptureRequest", "create_capture"]
