from __future__ import annotations

import io
import queue
import wave
from typing import List

import numpy as np
import pytest

from resay.core.audio.base import AudioCapture, CaptureError, CaptureInfo
from resay.core.audio.recorder import InstructionRecorder, MicrophoneAccessError, RecorderState
from resay.data.models import AudioInstructionBlob


class FakeCapture(AudioCapture):
    def __init__(self, chunks: List[np.ndarray], fail_start: bool = False) -> None:
        self.info = CaptureInfo(name="instruction", sample_rate=8000, channels=1, device="fake")
        self._queue: "queue.Queue[np.ndarray]" = queue.Queue()
        self._chunks = chunks
        self._fail_start = fail_start
        self.events: List[str] = []

    def start(self) -> None:
        self.events.append("start")
        if self._fail_start:
            raise CaptureError("Permission denied")
        for chunk in self._chunks:
            self._queue.put(chunk)

    def stop(self) -> None:
        self.events.append("stop")

    def close(self) -> None:
        self.events.append("close")

    def read(self, timeout: float | None = None):
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None


def _chunks() -> List[np.ndarray]:
    return [np.full((4000, 1), 0.25, dtype=np.float32), np.full((4000, 1), -0.25, dtype=np.float32)]


def test_start_stop_produces_wav_blob() -> None:
    capture = FakeCapture(_chunks())
    completed: List[AudioInstructionBlob] = []
    recorder = InstructionRecorder(lambda: capture, on_complete=completed.append)

    recorder.start()
    assert recorder.state is RecorderState.RECORDING

    blob = recorder.stop()

    assert recorder.state is RecorderState.IDLE
    assert blob is not None
    assert blob.mime_type == "audio/wav"
    assert blob.duration == pytest.approx(1.0)
    assert completed == [blob]
    assert capture.events == ["start", "stop", "close"]
    with wave.open(io.BytesIO(blob.data), "rb") as handle:
        assert handle.getnframes() == 8000
        assert handle.getframerate() == 8000


def test_start_while_recording_is_noop() -> None:
    factories: List[FakeCapture] = []

    def factory() -> FakeCapture:
        capture = FakeCapture(_chunks())
        factories.append(capture)
        return capture

    recorder = InstructionRecorder(factory)
    recorder.start()
    recorder.start()

    assert len(factories) == 1
    assert recorder.is_recording


def test_permission_error_leaves_recorder_idle() -> None:
    capture = FakeCapture([], fail_start=True)
    recorder = InstructionRecorder(lambda: capture)

    with pytest.raises(MicrophoneAccessError):
        recorder.start()

    assert recorder.state is RecorderState.IDLE
    assert capture.events == ["start", "close"]
    assert recorder.stop() is None


def test_each_recording_is_delivered_once_through_callback() -> None:
    completed: List[AudioInstructionBlob] = []
    recorder = InstructionRecorder(lambda: FakeCapture(_chunks()), on_complete=completed.append)

    assert recorder.toggle() is None
    first = recorder.toggle()
    recorder.toggle()
    second = recorder.toggle()

    assert first is not None and second is not None
    assert first is not second
    assert completed == [first, second]
    assert recorder.stop() is None
    assert completed == [first, second]
