"""Helpers for enumerating microphones using sounddevice."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from ...logging import get_logger

LOGGER = get_logger(__name__)


@dataclass
class DeviceInfo:
    id: int
    name: str
    max_input_channels: int
    default_samplerate: float
    hostapi: str
    is_default: bool = False


def list_input_devices() -> List[DeviceInfo]:
    try:
        import sounddevice as sd
    except (ImportError, OSError) as exc:
        LOGGER.warning("sounddevice unavailable; cannot list devices: %s", exc)
        return []

    hostapis = sd.query_hostapis()
    default_input = sd.default.device[0] if sd.default.device else None
    results: List[DeviceInfo] = []
    for idx, info in enumerate(sd.query_devices()):
        max_input = int(info.get("max_input_channels") or 0)
        if max_input <= 0:
            continue
        hostapi = hostapis[info["hostapi"]]["name"] if hostapis else "unknown"
        results.append(
            DeviceInfo(
                id=idx,
                name=info["name"],
                max_input_channels=max_input,
                default_samplerate=info.get("default_samplerate", 0.0),
                hostapi=hostapi,
                is_default=idx == default_input,
            )
        )
    return results


def format_device_table(devices: Optional[Iterable[DeviceInfo]] = None) -> str:
    """Render microphones as a fixed-width table; ``*`` marks the system default."""

    rows = list_input_devices() if devices is None else list(devices)
    if not rows:
        return (
            "No microphones detected. Install PortAudio for sounddevice and ensure "
            "audio hardware is accessible."
        )

    out = [f"  {'ID':>3}  {'Microphone':<40}  {'Ch':>2}  {'Hz':>6}  API"]
    for row in rows:
        marker = "*" if row.is_default else " "
        out.append(
            f"{marker} {row.id:>3}  {row.name[:40]:<40}  {row.max_input_channels:>2}  "
            f"{int(row.default_samplerate):>6}  {row.hostapi}"
        )
    return "\n".join(out)


__all__ = ["DeviceInfo", "format_device_table", "list_input_devices"]
