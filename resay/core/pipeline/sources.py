"""Helpers for turning user input into source descriptors."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Union
from urllib.parse import urlparse

from ...data.models import FileSource, SourceDescriptor, UrlSource

FALLBACK_MIME_TYPE = "application/octet-stream"

# Containers that mimetypes does not know on every platform.
_EXTRA_AUDIO_TYPES = {
    ".m4a": "audio/mp4",
    ".opus": "audio/ogg",
    ".webm": "audio/webm",
    ".aac": "audio/aac",
    ".flac": "audio/flac",
    ".3gp": "audio/3gpp",
}


def guess_mime_type(filename: str) -> str:
    suffix = Path(filename).suffix.lower()
    if suffix in _EXTRA_AUDIO_TYPES:
        return _EXTRA_AUDIO_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or FALLBACK_MIME_TYPE


def load_file_source(path: Union[str, Path]) -> FileSource:
    path = Path(path)
    return FileSource(name=path.name, mime_type=guess_mime_type(path.name), data=path.read_bytes())


def is_url(text: str) -> bool:
    parsed = urlparse(text.strip())
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def parse_source(value: str) -> SourceDescriptor:
    """Interpret a command line argument as either a link or a local file."""

    if is_url(value):
        return UrlSource(url=value.strip())
    path = Path(value).expanduser()
    if not path.is_file():
        raise FileNotFoundError(f"Audio file not found: {path}")
    return load_file_source(path)


__all__ = ["guess_mime_type", "is_url", "load_file_source", "parse_source"]
