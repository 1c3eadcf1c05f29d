"""Two-state recorder producing spoken improvement instructions."""

from __future__ import annotations

import threading
from enum import Enum
from typing import Callable, Optional

from ...data.models import AudioInstructionBlob
from ...logging import get_logger
from .base import AudioCapture, CaptureError
from .writers import WavBuffer

LOGGER = get_logger(__name__)

CaptureFactory = Callable[[], AudioCapture]
CompletionCallback = Callable[[AudioInstructionBlob], None]


class RecorderState(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"


class MicrophoneAccessError(CaptureError):
    """Raised when the microphone cannot be opened for recording."""


class InstructionRecorder:
    """Record a single spoken instruction at a time.

    ``start`` opens a fresh capture from ``capture_factory``; ``stop`` encodes
    everything buffered into a WAV blob, releases the device and hands the
    blob to ``on_complete``.
    """

    def __init__(
        self,
        capture_factory: CaptureFactory,
        on_complete: Optional[CompletionCallback] = None,
    ) -> None:
        self._capture_factory = capture_factory
        self._on_complete = on_complete
        self._capture: Optional[AudioCapture] = None
        self._state = RecorderState.IDLE
        self._lock = threading.Lock()

    @property
    def state(self) -> RecorderState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is RecorderState.RECORDING

    def start(self) -> None:
        with self._lock:
            if self._state is RecorderState.RECORDING:
                LOGGER.debug("Recorder already running; ignoring start request")
                return
            capture: Optional[AudioCapture] = None
            try:
                capture = self._capture_factory()
                capture.start()
            except CaptureError as exc:
                if capture is not None:
                    capture.close()
                LOGGER.error("Microphone access failed: %s", exc)
                raise MicrophoneAccessError(f"Could not access the microphone: {exc}") from exc
            self._capture = capture
            self._state = RecorderState.RECORDING
            LOGGER.info("Recording instruction from %s", capture.info.device or "default microphone")

    def stop(self) -> Optional[AudioInstructionBlob]:
        with self._lock:
            if self._state is not RecorderState.RECORDING or self._capture is None:
                return None
            capture = self._capture
            buffer = WavBuffer(capture.info.sample_rate, capture.info.channels)
            try:
                capture.stop()
                buffer.extend(capture.drain())
            finally:
                capture.close()
                self._capture = None
                self._state = RecorderState.IDLE

            blob = AudioInstructionBlob(
                data=buffer.to_bytes(),
                mime_type="audio/wav",
                duration=buffer.duration,
            )
            LOGGER.info("Recorded instruction of %.1f seconds", blob.duration)

        if self._on_complete is not None:
            self._on_complete(blob)
        return blob

    def toggle(self) -> Optional[AudioInstructionBlob]:
        """Start when idle, stop when recording; returns the blob on stop."""

        if self.is_recording:
            return self.stop()
        self.start()
        return None


__all__ = ["InstructionRecorder", "MicrophoneAccessError", "RecorderState"]
