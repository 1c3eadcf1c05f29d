"""OpenAI powered generation through audio-capable chat models."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from ...config import get_settings
from ...data.models import ContentPart, InlineDataPart, ModelProfile, TextPart
from ...logging import get_logger
from .base import BackendError, GenerativeBackend

LOGGER = get_logger(__name__)

_AUDIO_FORMATS = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
}


class OpenAIBackend(GenerativeBackend):
    name = "openai"

    def __init__(
        self,
        transcription_model: Optional[str] = None,
        rewrite_model: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.models = {
            ModelProfile.FAST: transcription_model or settings.openai_transcription_model,
            ModelProfile.QUALITY: rewrite_model or settings.openai_rewrite_model,
        }
        try:
            from openai import OpenAI, OpenAIError  # type: ignore
        except ImportError as exc:  # pragma: no cover - runtime dependency guard
            raise RuntimeError("openai package is required for OpenAIBackend") from exc
        client_kwargs = {}
        if settings.openai_api_key:
            client_kwargs["api_key"] = settings.openai_api_key

        self._openai_error_cls = OpenAIError
        try:
            self.client = OpenAI(**client_kwargs)
        except OpenAIError as exc:
            message = str(exc)
            if "api_key" in message.lower():
                raise RuntimeError(
                    "OpenAI API key not configured. Set the OPENAI_API_KEY environment variable "
                    "or configure RESAY_OPENAI_API_KEY from the environment menu."
                ) from exc
            raise RuntimeError(f"Failed to initialise OpenAI client: {message}") from exc

    def generate(self, parts: Sequence[ContentPart], profile: ModelProfile) -> str:
        model = self.models[profile]
        content = [_to_content(part) for part in parts]
        LOGGER.info("Requesting OpenAI generation with %s (%s part(s))", model, len(content))
        try:
            response = self.client.chat.completions.create(
                model=model,
                modalities=["text"],
                messages=[{"role": "user", "content": content}],
            )
        except self._openai_error_cls as exc:
            raise BackendError(str(exc)) from exc

        text = _extract_text(response)
        if not text.strip():
            raise BackendError("Empty text in OpenAI response")
        return text


def _to_content(part: ContentPart) -> Dict[str, Any]:
    if isinstance(part, TextPart):
        return {"type": "text", "text": part.text}
    if isinstance(part, InlineDataPart):
        audio_format = _AUDIO_FORMATS.get(part.mime_type.split(";")[0].strip().lower())
        if audio_format is None:
            raise BackendError(
                f"OpenAI audio input supports wav or mp3 only, got {part.mime_type}"
            )
        return {
            "type": "input_audio",
            "input_audio": {"data": part.as_base64(), "format": audio_format},
        }
    raise TypeError(f"Unsupported content part: {type(part).__name__}")


def _extract_text(response: Any) -> str:
    choices: List[Any] = list(getattr(response, "choices", None) or [])
    if not choices:
        raise BackendError("No choices in OpenAI response")
    message = getattr(choices[0], "message", None)
    return str(getattr(message, "content", None) or "")


__all__ = ["OpenAIBackend"]
