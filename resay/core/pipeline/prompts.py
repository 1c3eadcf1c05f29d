"""Request builders for the transcription, rewrite and improvement stages.

Each stage input is a typed request assembled by pure functions from the
pipeline state, so prompt construction can be checked without a backend.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

from pydantic import BaseModel, Field, model_validator

from ...data.models import (
    ContentPart,
    FileSource,
    InlineDataPart,
    SourceDescriptor,
    TextPart,
    UrlSource,
)

TRANSCRIPTION_DIRECTIVE = (
    "Transcribe the spoken dialogue of this audio in the language it is spoken in. "
    "Leave out filler words, false starts and background noise so the result is a clean "
    "text ready to be used as the basis for new content. Return only the transcript."
)

URL_REFERENCE_DIRECTIVE = (
    "The content above is a link to a video. Extract only what is said aloud in it and "
    "ignore titles, captions, descriptions, comments and any other surrounding text or metadata."
)

REWRITE_RULES_LEAD = "For this rewrite, apply these permanent rules and instructions at all times:"
IMPROVE_RULES_LEAD = "Additionally, apply these permanent rules and instructions at all times:"

SPOKEN_INSTRUCTION_PLACEHOLDER = "the instruction was recorded as audio and is attached."

_REWRITE_TEMPLATE = """You are a viral content creator. Based on the following "Original Transcript", \
rewrite the text creatively with a social media tone (dynamic, casual, with hashtags and emojis) \
so it can be published as new content. Write in the language of the transcript unless a \
rule below asks otherwise.

{rules}

Original Transcript:
---
{transcript}
---

Please write the new alternative content."""

_IMPROVE_TEMPLATE = """Improve the following "Current Alternative Content" using the \
"Original Transcript" and the "Improvement Instruction" below. Keep the language of the \
current content unless the instruction asks otherwise.

{rules}

Improvement Instruction: "{instruction}"

Original Transcript:
---
{transcript}
---

Current Alternative Content:
---
{draft}
---

Please write the "New Improved Alternative Content":"""


def permanent_rules_clause(lead: str, instructions: Sequence[str]) -> str:
    """Join permanent instructions into one sentence, or ``""`` when there are none."""

    if not instructions:
        return ""
    return f"{lead} {'. '.join(instructions)}"


class TranscriptionRequest(BaseModel):
    """Exactly one payload (inline audio or URL reference) plus the directive."""

    payload: Union[InlineDataPart, TextPart]
    directive: str
    source_label: str

    def parts(self) -> List[ContentPart]:
        return [self.payload, TextPart(text=self.directive)]


class RewriteRequest(BaseModel):
    transcript: str = Field(min_length=1)
    permanent_instructions: List[str] = Field(default_factory=list)

    def prompt(self) -> str:
        return _REWRITE_TEMPLATE.format(
            rules=permanent_rules_clause(REWRITE_RULES_LEAD, self.permanent_instructions),
            transcript=self.transcript,
        )

    def parts(self) -> List[ContentPart]:
        return [TextPart(text=self.prompt())]


class ImprovementRequest(BaseModel):
    transcript: str
    draft: str = Field(min_length=1)
    instruction: Optional[str] = None
    audio: Optional[InlineDataPart] = None
    permanent_instructions: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _require_instruction(self) -> "ImprovementRequest":
        if not (self.instruction and self.instruction.strip()) and self.audio is None:
            raise ValueError("an improvement needs a typed instruction or a recorded one")
        return self

    @property
    def effective_instruction(self) -> str:
        if self.instruction and self.instruction.strip():
            return self.instruction
        return SPOKEN_INSTRUCTION_PLACEHOLDER

    def prompt(self) -> str:
        return _IMPROVE_TEMPLATE.format(
            rules=permanent_rules_clause(IMPROVE_RULES_LEAD, self.permanent_instructions),
            instruction=self.effective_instruction,
            transcript=self.transcript,
            draft=self.draft,
        )

    def parts(self) -> List[ContentPart]:
        parts: List[ContentPart] = [TextPart(text=self.prompt())]
        if self.audio is not None:
            parts.append(self.audio)
        return parts


def build_transcription_request(source: SourceDescriptor) -> TranscriptionRequest:
    if isinstance(source, FileSource):
        return TranscriptionRequest(
            payload=InlineDataPart(data=source.data, mime_type=source.mime_type),
            directive=TRANSCRIPTION_DIRECTIVE,
            source_label=source.label,
        )
    if isinstance(source, UrlSource):
        return TranscriptionRequest(
            payload=TextPart(text=f"Video link: {source.url}"),
            directive=f"{TRANSCRIPTION_DIRECTIVE} {URL_REFERENCE_DIRECTIVE}",
            source_label=source.label,
        )
    raise TypeError(f"Unsupported source: {type(source).__name__}")


def build_rewrite_request(transcript: str, permanent_instructions: Sequence[str]) -> RewriteRequest:
    return RewriteRequest(transcript=transcript, permanent_instructions=list(permanent_instructions))


def build_improvement_request(
    transcript: str,
    draft: str,
    instruction: Optional[str],
    audio: Optional[InlineDataPart],
    permanent_instructions: Sequence[str],
) -> ImprovementRequest:
    return ImprovementRequest(
        transcript=transcript,
        draft=draft,
        instruction=instruction or None,
        audio=audio,
        permanent_instructions=list(permanent_instructions),
    )


__all__ = [
    "IMPROVE_RULES_LEAD",
    "ImprovementRequest",
    "REWRITE_RULES_LEAD",
    "RewriteRequest",
    "SPOKEN_INSTRUCTION_PLACEHOLDER",
    "TRANSCRIPTION_DIRECTIVE",
    "TranscriptionRequest",
    "URL_REFERENCE_DIRECTIVE",
    "build_improvement_request",
    "build_rewrite_request",
    "build_transcription_request",
    "permanent_rules_clause",
]
