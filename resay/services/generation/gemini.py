"""Gemini powered generation using the google-genai SDK."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from google import genai
from google.genai import errors, types

from ...config import get_settings
from ...data.models import ContentPart, InlineDataPart, ModelProfile, TextPart
from ...logging import get_logger
from .base import DISABLED_HARM_CATEGORIES, BackendError, GenerativeBackend

LOGGER = get_logger(__name__)

_ACCEPTED_FINISH_REASONS = {"STOP", "FINISH_REASON_UNSPECIFIED", "UNSPECIFIED"}


def safety_settings() -> List[types.SafetySetting]:
    return [
        types.SafetySetting(
            category=types.HarmCategory(category),
            threshold=types.HarmBlockThreshold.BLOCK_NONE,
        )
        for category in DISABLED_HARM_CATEGORIES
    ]


class GeminiBackend(GenerativeBackend):
    name = "gemini"

    def __init__(
        self,
        transcription_model: Optional[str] = None,
        rewrite_model: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.models = {
            ModelProfile.FAST: transcription_model or settings.gemini_transcription_model,
            ModelProfile.QUALITY: rewrite_model or settings.gemini_rewrite_model,
        }
        client_kwargs = {}
        key = api_key or settings.gemini_api_key
        if key:
            client_kwargs["api_key"] = key
        try:
            self.client = genai.Client(**client_kwargs)
        except ValueError as exc:
            raise RuntimeError(
                "Gemini API key not configured. Set GEMINI_API_KEY or RESAY_GEMINI_API_KEY "
                "from the environment menu."
            ) from exc

    def generate(self, parts: Sequence[ContentPart], profile: ModelProfile) -> str:
        model = self.models[profile]
        LOGGER.info("Requesting Gemini generation with %s (%s part(s))", model, len(parts))
        try:
            response = self.client.models.generate_content(
                model=model,
                contents=[types.Content(role="user", parts=[_to_part(part) for part in parts])],
                config=types.GenerateContentConfig(safety_settings=safety_settings()),
            )
        except errors.APIError as exc:
            raise BackendError(getattr(exc, "message", None) or str(exc)) from exc

        text = _validate_response(response)
        LOGGER.info("Gemini generation complete: %s chars", len(text))
        return text


def _to_part(part: ContentPart) -> types.Part:
    if isinstance(part, TextPart):
        return types.Part.from_text(text=part.text)
    if isinstance(part, InlineDataPart):
        return types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
    raise TypeError(f"Unsupported content part: {type(part).__name__}")


def _validate_response(response: Any) -> str:
    """Return the response text or raise when the call produced nothing usable."""

    if response is None:
        raise BackendError("Empty response from Gemini API")

    feedback = getattr(response, "prompt_feedback", None)
    block_reason = getattr(feedback, "block_reason", None) if feedback else None
    if block_reason:
        raise BackendError(f"Request blocked by Gemini: {_enum_name(block_reason)}")

    candidates = getattr(response, "candidates", None)
    if not candidates:
        raise BackendError("No candidates in Gemini response")

    finish = getattr(candidates[0], "finish_reason", None)
    text = getattr(response, "text", None) or ""
    if finish is not None and _enum_name(finish) not in _ACCEPTED_FINISH_REASONS:
        if _enum_name(finish) == "MAX_TOKENS" and text.strip():
            LOGGER.warning("Gemini response hit the token limit; returning partial content")
            return text
        raise BackendError(f"Abnormal finish reason: {_enum_name(finish)}")

    if not text.strip():
        raise BackendError("Empty text in Gemini response")
    return text


def _enum_name(value: Any) -> str:
    return str(getattr(value, "name", None) or value).split(".")[-1]


__all__ = ["GeminiBackend", "safety_settings"]
