"""Generative backend abstractions."""

from __future__ import annotations

import abc
from typing import Sequence, Tuple

from ...data.models import ContentPart, ModelProfile

# Content filters switched off on every request.
DISABLED_HARM_CATEGORIES: Tuple[str, ...] = (
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


class BackendError(RuntimeError):
    """Raised when the generative service fails or returns nothing usable."""


class GenerativeBackend(abc.ABC):
    """Turn content parts into generated text."""

    name: str = "backend"

    @abc.abstractmethod
    def generate(self, parts: Sequence[ContentPart], profile: ModelProfile) -> str:
        raise NotImplementedError


__all__ = ["BackendError", "DISABLED_HARM_CATEGORIES", "GenerativeBackend"]
