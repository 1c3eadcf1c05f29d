"""Microphone capture on top of sounddevice/PortAudio."""

from __future__ import annotations

import contextlib
import queue
from typing import Iterator, Optional, Union

import numpy as np

from ...logging import get_logger
from .base import AudioCapture, CaptureError, CaptureInfo

LOGGER = get_logger(__name__)

# Tried in order after the requested rate and the device's own default.
_COMMON_RATES = (48_000, 44_100, 32_000, 22_050, 16_000, 8_000)


class SoundDeviceCapture(AudioCapture):
    """Buffers microphone blocks delivered by a PortAudio callback."""

    def __init__(
        self,
        info: CaptureInfo,
        device: Optional[Union[int, str]] = None,
        blocksize: int = 1024,
    ) -> None:
        try:
            import sounddevice
        except (ImportError, OSError) as exc:  # pragma: no cover - PortAudio missing at runtime
            raise CaptureError("sounddevice and PortAudio are required to record instructions") from exc

        self._sd = sounddevice
        self.info = info
        self.device = device
        self.blocksize = blocksize
        self._blocks: "queue.Queue[np.ndarray]" = queue.Queue()
        self._stream = None

    def start(self) -> None:
        if self._stream is not None:
            return
        label = self.device if self.device is not None else "default microphone"
        failure: Optional[Exception] = None
        for rate in self._candidate_rates():
            try:
                self._stream = self._open(rate)
            except self._sd.PortAudioError as exc:  # pragma: no cover - depends on hardware
                failure = exc
                if "sample rate" not in str(exc).lower():
                    raise CaptureError(f"Could not open the microphone: {exc}") from exc
                LOGGER.debug("%s rejected %s Hz", label, rate)
                continue
            if rate != self.info.sample_rate:
                LOGGER.warning("Recording from %s at %s Hz instead of %s Hz", label, rate, self.info.sample_rate)
                self.info.sample_rate = rate
            LOGGER.info("Microphone %s open", label)
            return
        raise CaptureError(f"{label} supports none of the tried sample rates ({failure})") from failure

    def stop(self) -> None:
        if self._stream is None:
            return
        with contextlib.suppress(self._sd.PortAudioError):
            self._stream.stop()

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            with contextlib.suppress(self._sd.PortAudioError):
                stream.close()
        self._blocks = queue.Queue()

    def read(self, timeout: Optional[float] = None) -> Optional[np.ndarray]:
        try:
            if timeout and timeout > 0:
                return self._blocks.get(timeout=timeout)
            return self._blocks.get_nowait()
        except queue.Empty:
            return None

    def _open(self, rate: int):
        def on_block(indata, frames, time_info, status) -> None:  # pragma: no cover - PortAudio thread
            if status:
                LOGGER.debug("Input overflow/underflow: %s", status)
            self._blocks.put(indata.copy())

        stream = self._sd.InputStream(
            samplerate=rate,
            channels=self.info.channels,
            dtype="float32",
            blocksize=self.blocksize,
            device=self.device,
            callback=on_block,
        )
        stream.start()
        return stream

    def _candidate_rates(self) -> Iterator[int]:
        seen = set()
        preferred = [int(self.info.sample_rate or 0)]
        try:
            details = self._sd.query_devices(self.device, "input")
            preferred.append(int(float(details.get("default_samplerate") or 0)))
        except (self._sd.PortAudioError, ValueError, TypeError) as exc:  # pragma: no cover - runtime
            LOGGER.debug("Could not query %s: %s", self.device, exc)
        for rate in (*preferred, *_COMMON_RATES):
            if rate and rate not in seen:
                seen.add(rate)
                yield rate


__all__ = ["SoundDeviceCapture"]
