"""Capture interface shared by microphone implementations and test fakes."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import List, Optional

import numpy as np


@dataclass
class CaptureInfo:
    name: str
    sample_rate: int
    channels: int
    device: Optional[str] = None


class CaptureError(RuntimeError):
    """The microphone could not be opened or is unavailable."""


class AudioCapture(abc.ABC):
    """Source of float32 sample blocks shaped ``(frames, channels)``."""

    info: CaptureInfo

    @abc.abstractmethod
    def start(self) -> None:
        """Acquire the device; blocks become readable as they arrive."""

    @abc.abstractmethod
    def stop(self) -> None:
        """Stop delivering new blocks without discarding buffered ones."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the device and forget anything still buffered."""

    @abc.abstractmethod
    def read(self, timeout: Optional[float] = None) -> Optional[np.ndarray]:
        """Next buffered block, or ``None`` once nothing is pending."""

    def drain(self) -> List[np.ndarray]:
        blocks: List[np.ndarray] = []
        block = self.read(timeout=0)
        while block is not None:
            blocks.append(block)
            block = self.read(timeout=0)
        return blocks


__all__ = ["AudioCapture", "CaptureError", "CaptureInfo"]
