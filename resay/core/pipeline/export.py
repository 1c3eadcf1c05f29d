"""Plain-text exports of pipeline results and permanent instructions."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from ...data.instructions import InstructionStore
from ...data.models import FileSource, SourceDescriptor, UrlSource

DEFAULT_DOCUMENT_STEM = "rewritten-content"
INSTRUCTIONS_FILENAME = "permanent-instructions.txt"

_RULE = "=" * 41
_SECTION_RULE = "-" * 41

_DOCUMENT_TEMPLATE = """{rule}
CONTENT RECORD
{rule}

Original source: {source}
Processed at: {timestamp}

{section}
1. BASE TRANSCRIPT
{section}

{transcript}

{section}
2. ANOTHER WAY TO SAY IT (social media content)
{section}

{draft}"""


def source_label(source: Optional[SourceDescriptor]) -> str:
    if source is None:
        return "Voice recording"
    return source.label


def build_document(
    source: Optional[SourceDescriptor],
    transcript: str,
    draft: str,
    now: Optional[datetime] = None,
) -> str:
    now = now or datetime.now()
    return _DOCUMENT_TEMPLATE.format(
        rule=_RULE,
        section=_SECTION_RULE,
        source=source_label(source),
        timestamp=now.strftime("%Y-%m-%d %H:%M:%S"),
        transcript=transcript,
        draft=draft,
    ).strip()


def suggest_filename(source: Optional[SourceDescriptor], max_length: int = 30) -> str:
    """Derive a ``.txt`` file name from the file stem or the sanitised URL."""

    stem = ""
    if isinstance(source, FileSource):
        stem = Path(source.name).stem
    elif isinstance(source, UrlSource):
        stem = re.sub(r"[^a-z0-9]", "_", source.url, flags=re.IGNORECASE)[:max_length]
    return f"{stem or DEFAULT_DOCUMENT_STEM}.txt"


def write_document(
    directory: Path,
    source: Optional[SourceDescriptor],
    transcript: str,
    draft: str,
    *,
    max_length: int = 30,
    now: Optional[datetime] = None,
) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / suggest_filename(source, max_length)
    path.write_text(build_document(source, transcript, draft, now), encoding="utf-8")
    return path


def export_instructions(store: InstructionStore, path: Path) -> Optional[Path]:
    """Write the instruction dump; returns ``None`` when there is nothing to export."""

    if not len(store):
        return None
    path = Path(path)
    if path.is_dir() or not path.suffix:
        path = path / INSTRUCTIONS_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(store.export_text(), encoding="utf-8")
    return path


def import_instructions(store: InstructionStore, path: Path) -> int:
    return store.import_text(Path(path).read_text(encoding="utf-8"))


__all__ = [
    "DEFAULT_DOCUMENT_STEM",
    "INSTRUCTIONS_FILENAME",
    "build_document",
    "export_instructions",
    "import_instructions",
    "source_label",
    "suggest_filename",
    "write_document",
]
