"""In-memory WAV encoding for recorded instructions."""

from __future__ import annotations

import io
import wave
from typing import Iterable, List

import numpy as np

_PCM16_SCALE = 32767.0


def to_pcm16(chunk: np.ndarray, channels: int) -> np.ndarray:
    """Convert float samples in ``[-1, 1]`` to interleavable int16 frames."""

    frames = np.asarray(chunk, dtype=np.float32)
    if frames.ndim == 1:
        frames = frames.reshape(-1, 1)
    width = frames.shape[1]
    if width != channels:
        if width == 1:
            frames = np.tile(frames, (1, channels))
        elif channels == 1:
            frames = frames.mean(axis=1, keepdims=True)
        else:
            raise ValueError(f"Cannot map {width} channel(s) onto {channels}")
    return (np.clip(frames, -1.0, 1.0) * _PCM16_SCALE).astype(np.int16)


class WavBuffer:
    """Accumulates captured chunks and renders them as one WAV container."""

    def __init__(self, sample_rate: int, channels: int) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self._frames: List[np.ndarray] = []

    def append(self, chunk: np.ndarray) -> None:
        self._frames.append(to_pcm16(chunk, self.channels))

    def extend(self, chunks: Iterable[np.ndarray]) -> None:
        for chunk in chunks:
            self.append(chunk)

    @property
    def frame_count(self) -> int:
        return sum(block.shape[0] for block in self._frames)

    @property
    def duration(self) -> float:
        return self.frame_count / float(self.sample_rate) if self.sample_rate else 0.0

    def to_bytes(self) -> bytes:
        out = io.BytesIO()
        with wave.open(out, "wb") as handle:
            handle.setnchannels(self.channels)
            handle.setsampwidth(2)
            handle.setframerate(self.sample_rate)
            for block in self._frames:
                handle.writeframes(block.tobytes())
        return out.getvalue()


def encode_wav(chunks: Iterable[np.ndarray], sample_rate: int, channels: int) -> bytes:
    buffer = WavBuffer(sample_rate, channels)
    buffer.extend(chunks)
    return buffer.to_bytes()


__all__ = ["WavBuffer", "encode_wav", "to_pcm16"]
