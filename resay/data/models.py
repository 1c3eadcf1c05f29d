"""Data models used by resay."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field


# ----------------------------------------------------------------------
# Source descriptors
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class FileSource:
    """Audio uploaded from the local file system."""

    name: str
    mime_type: str
    data: bytes

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class UrlSource:
    """A remote video or audio link handed to the backend as a reference."""

    url: str

    @property
    def label(self) -> str:
        return self.url


SourceDescriptor = Union[FileSource, UrlSource]


# ----------------------------------------------------------------------
# Backend content parts
# ----------------------------------------------------------------------
class TextPart(BaseModel):
    text: str


class InlineDataPart(BaseModel):
    """Binary payload sent inline with its MIME type."""

    data: bytes
    mime_type: str

    def as_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


ContentPart = Union[TextPart, InlineDataPart]


class ModelProfile(str, Enum):
    """Caller-side routing hint: cheap transcription vs. high quality writing."""

    FAST = "fast"
    QUALITY = "quality"


# ----------------------------------------------------------------------
# Recorded instructions
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class AudioInstructionBlob:
    """Recorded spoken instruction ready to be sent inline."""

    data: bytes
    mime_type: str = "audio/wav"
    duration: float = 0.0

    def to_part(self) -> InlineDataPart:
        return InlineDataPart(data=self.data, mime_type=self.mime_type)


# ----------------------------------------------------------------------
# Pipeline state
# ----------------------------------------------------------------------
@dataclass
class PipelineState:
    """Single owned record mutated by the pipeline stages."""

    source: Optional[SourceDescriptor] = None
    transcript: str = ""
    draft: str = ""
    instruction: str = ""
    is_busy: bool = False
    status: str = ""
    revision: int = 0


class InstructionFile(BaseModel):
    """Plain-text dump of the permanent instructions, one per line."""

    instructions: List[str] = Field(default_factory=list)

    def to_text(self) -> str:
        return "\n".join(self.instructions)

    @classmethod
    def from_text(cls, text: str) -> "InstructionFile":
        # Only "\n" separates entries; a trailing "\r" is accepted from CRLF files.
        lines = (line[:-1] if line.endswith("\r") else line for line in text.split("\n"))
        return cls(instructions=[line for line in lines if line.strip()])


__all__ = [
    "AudioInstructionBlob",
    "ContentPart",
    "FileSource",
    "InlineDataPart",
    "InstructionFile",
    "ModelProfile",
    "PipelineState",
    "SourceDescriptor",
    "TextPart",
    "UrlSource",
]
