"""Factories for runtime service selection."""

from __future__ import annotations

from typing import Optional

from ..config import BACKEND_CHOICES
from .generation.base import GenerativeBackend
from .generation.dummy import DummyBackend


class ServiceConfigurationError(ValueError):
    """Raised when an unknown backend is requested."""


BACKEND_NAMES = BACKEND_CHOICES


def _normalise(name: Optional[str]) -> str:
    if not name:
        return ""
    return name.strip().lower()


def resolve_backend(name: Optional[str]) -> GenerativeBackend:
    backend = _normalise(name)
    if backend == "dummy":
        return DummyBackend()
    if backend == "gemini":
        from .generation.gemini import GeminiBackend

        return GeminiBackend()
    if backend == "openai":
        from .generation.openai_backend import OpenAIBackend

        return OpenAIBackend()
    raise ServiceConfigurationError(
        f"Unknown generation backend: {name} (choose from {', '.join(BACKEND_NAMES)})"
    )


__all__ = ["BACKEND_NAMES", "ServiceConfigurationError", "resolve_backend"]
