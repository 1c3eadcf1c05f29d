"""Generative backends."""

from .base import BackendError, GenerativeBackend
from .dummy import DummyBackend

__all__ = ["BackendError", "DummyBackend", "GenerativeBackend"]
