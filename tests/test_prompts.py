from __future__ import annotations

import pytest
from pydantic import ValidationError

from resay.core.pipeline.prompts import (
    IMPROVE_RULES_LEAD,
    REWRITE_RULES_LEAD,
    SPOKEN_INSTRUCTION_PLACEHOLDER,
    TRANSCRIPTION_DIRECTIVE,
    URL_REFERENCE_DIRECTIVE,
    build_improvement_request,
    build_rewrite_request,
    build_transcription_request,
    permanent_rules_clause,
)
from resay.data.models import FileSource, InlineDataPart, TextPart, UrlSource


def test_file_source_becomes_single_inline_payload():
    source = FileSource(name="pitch.mp3", mime_type="audio/mpeg", data=b"ID3data")

    parts = build_transcription_request(source).parts()

    assert len(parts) == 2
    assert isinstance(parts[0], InlineDataPart)
    assert parts[0].data == b"ID3data"
    assert parts[0].mime_type == "audio/mpeg"
    assert parts[1] == TextPart(text=TRANSCRIPTION_DIRECTIVE)


def test_url_source_becomes_reference_payload():
    source = UrlSource(url="https://videos.example/watch?v=42")

    request = build_transcription_request(source)
    parts = request.parts()

    assert [type(part) for part in parts] == [TextPart, TextPart]
    assert "https://videos.example/watch?v=42" in parts[0].text
    assert URL_REFERENCE_DIRECTIVE in parts[1].text
    assert request.source_label == "https://videos.example/watch?v=42"


def test_rules_clause_joins_with_period_space():
    assert permanent_rules_clause(REWRITE_RULES_LEAD, []) == ""
    assert permanent_rules_clause(REWRITE_RULES_LEAD, ["Use emojis", "Max 3 hashtags"]) == (
        f"{REWRITE_RULES_LEAD} Use emojis. Max 3 hashtags"
    )


def test_rewrite_prompt_passes_transcript_through_unmodified():
    transcript = "hello world\n  with   odd spacing  "

    request = build_rewrite_request(transcript, [])
    (part,) = request.parts()

    assert transcript in part.text
    assert REWRITE_RULES_LEAD not in part.text


def test_rewrite_prompt_includes_permanent_rules():
    request = build_rewrite_request("hello world", ["Use emojis"])

    assert f"{REWRITE_RULES_LEAD} Use emojis" in request.prompt()


def test_rewrite_request_requires_transcript():
    with pytest.raises(ValidationError):
        build_rewrite_request("", [])


def test_improvement_places_text_before_audio():
    audio = InlineDataPart(data=b"RIFF", mime_type="audio/wav")

    request = build_improvement_request("hello", "Hi!", "make it shorter", audio, ["Use emojis"])
    parts = request.parts()

    assert isinstance(parts[0], TextPart)
    assert parts[1] is audio
    assert 'Improvement Instruction: "make it shorter"' in parts[0].text
    assert f"{IMPROVE_RULES_LEAD} Use emojis" in parts[0].text
    assert "Hi!" in parts[0].text


def test_audio_only_improvement_uses_placeholder():
    audio = InlineDataPart(data=b"RIFF", mime_type="audio/wav")

    request = build_improvement_request("hello", "Hi!", "", audio, [])

    assert request.instruction is None
    assert request.effective_instruction == SPOKEN_INSTRUCTION_PLACEHOLDER
    assert SPOKEN_INSTRUCTION_PLACEHOLDER in request.prompt()


def test_improvement_without_any_instruction_is_rejected():
    with pytest.raises(ValidationError):
        build_improvement_request("hello", "Hi!", "   ", None, [])


def test_improvement_requires_draft():
    with pytest.raises(ValidationError):
        build_improvement_request("hello", "", "shorter", None, [])
