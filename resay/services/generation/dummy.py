"""Dummy generator for offline usage."""

from __future__ import annotations

from typing import List, Sequence

from ...data.models import ContentPart, InlineDataPart, ModelProfile, TextPart
from .base import GenerativeBackend


class DummyBackend(GenerativeBackend):
    """Return canned text derived from the request; records every call."""

    name = "dummy"

    def __init__(self) -> None:
        self.calls: List[tuple[ModelProfile, List[ContentPart]]] = []

    def generate(self, parts: Sequence[ContentPart], profile: ModelProfile) -> str:
        self.calls.append((profile, list(parts)))
        audio = [part for part in parts if isinstance(part, InlineDataPart)]
        text = " ".join(part.text for part in parts if isinstance(part, TextPart))
        if profile is ModelProfile.FAST:
            if audio:
                return (
                    f"Dummy transcript of {len(audio[0].data)} bytes of {audio[0].mime_type}. "
                    "Replace with a real generative backend."
                )
            return "Dummy transcript for a linked video. Replace with a real generative backend."
        preview = text.strip().splitlines()[0][:80] if text.strip() else ""
        suffix = " (with a spoken instruction)" if audio else ""
        return f"Dummy rewrite{suffix}: {preview} #resay"


__all__ = ["DummyBackend"]
