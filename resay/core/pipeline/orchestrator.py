"""Content pipeline coordinating source selection, transcription and rewriting."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from ...config import get_settings
from ...data.instructions import InstructionStore
from ...data.models import (
    AudioInstructionBlob,
    FileSource,
    ModelProfile,
    PipelineState,
    SourceDescriptor,
    UrlSource,
)
from ...logging import get_logger
from ...services.generation.base import BackendError, GenerativeBackend
from .errors import PipelineBusyError, PreconditionError, StageFailedError, StaleResponseError
from .export import write_document
from .prompts import (
    build_improvement_request,
    build_rewrite_request,
    build_transcription_request,
)
from .sources import load_file_source

LOGGER = get_logger(__name__)

WELCOME_STATUS = "Select an audio file, paste a video link or record an instruction."
URL_FAILURE_HINT = "(Fetching audio from a link depends on the backend and may not be supported.)"
BUSY_MESSAGE = "Another request is still running. Wait for it to finish."

StatusCallback = Callable[[str], None]


@dataclass(frozen=True)
class _Snapshot:
    revision: int
    transcript: str
    draft: str


class ContentPipeline:
    """Owns the pipeline state and runs each stage against the generative backend.

    Stage calls are serialised by a non-blocking lock: a second call while
    one is outstanding raises :class:`PipelineBusyError` instead of queueing.
    """

    def __init__(
        self,
        backend: GenerativeBackend,
        instructions: InstructionStore,
        on_status: Optional[StatusCallback] = None,
    ) -> None:
        self.backend = backend
        self.instructions = instructions
        self.state = PipelineState(status=WELCOME_STATUS)
        self._pending_audio: Optional[AudioInstructionBlob] = None
        self._busy = threading.Lock()
        self._on_status = on_status

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def status(self) -> str:
        return self.state.status

    @property
    def is_busy(self) -> bool:
        return self.state.is_busy

    @property
    def transcript(self) -> str:
        return self.state.transcript

    @property
    def draft(self) -> str:
        return self.state.draft

    @property
    def pending_audio(self) -> Optional[AudioInstructionBlob]:
        return self._pending_audio

    def current(self) -> Optional[SourceDescriptor]:
        return self.state.source

    def can_transcribe(self) -> bool:
        return self.state.source is not None and not self.state.is_busy

    # ------------------------------------------------------------------
    # Source selection
    # ------------------------------------------------------------------
    def select_file(self, file: Union[FileSource, str, Path]) -> FileSource:
        source = file if isinstance(file, FileSource) else load_file_source(file)
        self._reset_source(source)
        self._set_status(f"Selected file: {source.name}")
        return source

    def set_url(self, text: str) -> Optional[SourceDescriptor]:
        url = (text or "").strip()
        if url:
            self._reset_source(UrlSource(url=url))
            self._set_status(f"Video link set: {url}")
        elif isinstance(self.state.source, FileSource):
            # An empty link never displaces a selected file.
            return self.state.source
        else:
            self._reset_source(None)
            self._set_status(WELCOME_STATUS)
        return self.state.source

    def _reset_source(self, source: Optional[SourceDescriptor]) -> None:
        """Replace the whole state: new source, empty transcript and draft."""

        previous = self.state
        self.state = PipelineState(
            source=source,
            instruction=previous.instruction,
            is_busy=previous.is_busy,
            status=previous.status,
            revision=previous.revision + 1,
        )

    # ------------------------------------------------------------------
    # One-shot instruction inputs
    # ------------------------------------------------------------------
    def set_instruction(self, text: str) -> None:
        self.state.instruction = text or ""

    def attach_audio(self, blob: AudioInstructionBlob) -> None:
        if self._pending_audio is not None:
            LOGGER.info("Replacing unused recorded instruction")
        self._pending_audio = blob
        self._set_status("Recording finished. Apply an improvement to use it.")

    def discard_audio(self) -> None:
        self._pending_audio = None

    def edit_draft(self, text: str) -> None:
        self.state.draft = text

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    def transcribe(self) -> str:
        self._ensure_idle()
        source = self.state.source
        if source is None:
            self._reject("Select an audio file or paste a video link first.")

        self._begin()
        try:
            snapshot = self._snapshot()
            request = build_transcription_request(source)
            self._set_status(f"Transcribing {request.source_label}...")
            try:
                text = self.backend.generate(request.parts(), ModelProfile.FAST)
            except BackendError as exc:
                message = f"Transcription failed: {exc}"
                if isinstance(source, UrlSource):
                    message = f"{message} {URL_FAILURE_HINT}"
                self._report_failure(message)
                raise StageFailedError(message) from exc

            self._ensure_current(snapshot, "transcription")
            self.state.transcript = text
            self.state.draft = ""
            self._set_status(
                f"Transcription of {request.source_label} complete. "
                "You can now generate the alternative content."
            )
            return text
        finally:
            self._end()

    def generate_draft(self) -> str:
        self._ensure_idle()
        if not self.state.transcript:
            self._reject("There is no transcript to rewrite yet.")

        self._begin()
        try:
            snapshot = self._snapshot()
            request = build_rewrite_request(self.state.transcript, self.instructions.instructions)
            self._set_status("Generating alternative content...")
            try:
                text = self.backend.generate(request.parts(), ModelProfile.QUALITY)
            except BackendError as exc:
                message = f"Failed to generate alternative content: {exc}"
                self._report_failure(message)
                raise StageFailedError(message) from exc

            self._ensure_current(snapshot, "rewrite")
            self.state.draft = text
            self._set_status("Alternative content generated. You can improve it next.")
            return text
        finally:
            self._end()

    def improve(
        self,
        persist: bool = False,
        instruction: Optional[str] = None,
        audio: Optional[AudioInstructionBlob] = None,
    ) -> str:
        """Refine the draft with a typed and/or spoken one-shot instruction.

        ``instruction`` and ``audio`` default to the pending instruction field
        and the pending recording. On success both are cleared; on failure
        they are kept so the same instruction can be retried.
        """

        self._ensure_idle()
        if not self.state.draft:
            self._reject("Generate the alternative content before improving it.")
        text = self.state.instruction if instruction is None else instruction
        text = text if text and text.strip() else ""
        blob = self._pending_audio if audio is None else audio
        if not text and blob is None:
            self._reject("Type or record an instruction for the improvement.")

        self._begin()
        try:
            snapshot = self._snapshot()
            request = build_improvement_request(
                self.state.transcript,
                self.state.draft,
                text,
                blob.to_part() if blob is not None else None,
                self.instructions.instructions,
            )
            self._set_status("Applying improvements to the alternative content...")
            try:
                result = self.backend.generate(request.parts(), ModelProfile.QUALITY)
            except BackendError as exc:
                message = f"Failed to improve the content: {exc}"
                self._report_failure(message)
                raise StageFailedError(message) from exc

            self._ensure_current(snapshot, "improvement")
            self.state.draft = result
            saved = False
            if persist and text:
                saved = self.instructions.add(text)
            self.state.instruction = ""
            self._pending_audio = None
            message = "Alternative content improved."
            if saved:
                message = f"{message} The instruction was saved as permanent."
            self._set_status(message)
            return result
        finally:
            self._end()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export_document(self, directory: Optional[Path] = None) -> Path:
        if self.state.source is None and not self.state.transcript:
            self._reject("Nothing to export yet.")
        settings = get_settings()
        path = write_document(
            Path(directory or settings.export_dir),
            self.state.source,
            self.state.transcript,
            self.state.draft,
            max_length=settings.export_name_max_length,
        )
        self._set_status(f"Document saved to {path}")
        return path

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ensure_idle(self) -> None:
        if self.state.is_busy:
            raise PipelineBusyError(BUSY_MESSAGE)

    def _begin(self) -> None:
        if not self._busy.acquire(blocking=False):
            raise PipelineBusyError(BUSY_MESSAGE)
        self.state.is_busy = True

    def _end(self) -> None:
        self.state.is_busy = False
        self._busy.release()

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            revision=self.state.revision,
            transcript=self.state.transcript,
            draft=self.state.draft,
        )

    def _ensure_current(self, snapshot: _Snapshot, stage: str) -> None:
        if snapshot == self._snapshot():
            return
        LOGGER.warning("Discarding %s response: inputs changed while the request was running", stage)
        self._set_status(f"The {stage} result was discarded because its input changed meanwhile.")
        raise StaleResponseError(f"The {stage} result no longer matches the current content.")

    def _reject(self, message: str) -> None:
        self._set_status(message)
        raise PreconditionError(message)

    def _report_failure(self, message: str) -> None:
        LOGGER.error("%s", message)
        self._set_status(message)

    def _set_status(self, message: str) -> None:
        self.state.status = message
        LOGGER.info("%s", message)
        if self._on_status is not None:
            try:
                self._on_status(message)
            except Exception:  # pragma: no cover - callbacks should not break pipeline
                LOGGER.exception("Status callback raised an exception")


__all__ = ["ContentPipeline", "URL_FAILURE_HINT", "WELCOME_STATUS"]
