"""Microphone capture for spoken instructions."""

from .base import AudioCapture, CaptureError, CaptureInfo

__all__ = ["AudioCapture", "CaptureError", "CaptureInfo"]
