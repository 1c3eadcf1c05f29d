"""Interactive console UI driving the content pipeline."""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Any, Callable, Deque, List, Optional

from ..config import (
    EnvironmentSettingError,
    Settings,
    clear_environment_setting,
    get_settings,
    list_environment_settings,
    update_environment_setting,
)
from ..core.audio.base import AudioCapture
from ..core.audio.devices import format_device_table
from ..core.audio.factory import CaptureConfigurationError, CaptureRequest, create_capture
from ..core.audio.recorder import InstructionRecorder, MicrophoneAccessError
from ..core.pipeline.errors import PipelineError
from ..core.pipeline.export import export_instructions, import_instructions
from ..core.pipeline.orchestrator import ContentPipeline
from ..logging import get_logger

LOGGER = get_logger(__name__)

_PREVIEW_LENGTH = 400
_END_OF_TEXT = "."


class PipelineConsoleUI:
    """Menu-driven console mirroring the transcribe, rewrite and improve screens."""

    def __init__(
        self,
        pipeline: ContentPipeline,
        *,
        settings: Optional[Settings] = None,
        recorder: Optional[InstructionRecorder] = None,
        input_func: Callable[[str], str] = input,
    ) -> None:
        self._settings = settings or get_settings()
        self._pipeline = pipeline
        self._recorder = recorder or InstructionRecorder(
            self._create_capture, on_complete=pipeline.attach_audio
        )
        self._input = input_func
        self._messages: Deque[str] = deque()
        self._running = True

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def run(self) -> None:
        """Enter the interactive UI loop."""

        self._info("Launching resay interactive UI. Press Ctrl+C to exit.")
        self._info(self._pipeline.status)
        try:
            while self._running:
                self._flush_messages()
                self._print_menu()
                try:
                    choice = self._input("Select option: ").strip().lower()
                except (KeyboardInterrupt, EOFError):
                    print()
                    choice = "q"
                self._handle_choice(choice)
        finally:
            if self._recorder.is_recording:
                self._recorder.stop()
            self._flush_messages()
            print("Goodbye!")

    # ------------------------------------------------------------------
    # Menu handlers
    # ------------------------------------------------------------------
    def _handle_choice(self, choice: str) -> None:
        if choice in {"1", "file", "f"}:
            self._select_file()
        elif choice in {"2", "link", "url", "u"}:
            self._set_url()
        elif choice in {"3", "transcribe", "t"}:
            self._run_stage(self._pipeline.transcribe)
        elif choice in {"4", "generate", "g"}:
            self._run_stage(self._pipeline.generate_draft)
        elif choice in {"5", "instruction", "i"}:
            self._type_instruction()
        elif choice in {"6", "record", "r"}:
            self._toggle_recording()
        elif choice in {"7", "improve", "m"}:
            self._run_stage(lambda: self._pipeline.improve(persist=False))
        elif choice in {"8", "save", "ms"}:
            self._run_stage(lambda: self._pipeline.improve(persist=True))
        elif choice in {"9", "edit", "e"}:
            self._edit_draft()
        elif choice in {"10", "show", "v"}:
            self._show_content()
        elif choice in {"11", "export", "x"}:
            self._export_document()
        elif choice in {"12", "rules", "p"}:
            self._manage_instructions()
        elif choice in {"13", "devices", "d"}:
            self._show_devices()
        elif choice in {"14", "env", "config", "c"}:
            self._configure_environment()
        elif choice in {"15", "discard", "z"}:
            self._discard_recording()
        elif choice in {"q", "quit", "exit"}:
            self._running = False
        else:
            self._info("Unknown option. Please choose one of the menu entries.")

    def _select_file(self) -> None:
        value = self._input("Path to the audio file: ").strip()
        if not value:
            self._info("No file selected.")
            return
        try:
            self._pipeline.select_file(Path(value).expanduser())
        except OSError as exc:
            self._error(f"Could not read {value}: {exc}")
            return
        self._info(self._pipeline.status)

    def _set_url(self) -> None:
        value = self._input("Video link (leave empty to clear): ")
        self._pipeline.set_url(value)
        self._info(self._pipeline.status)

    def _run_stage(self, stage: Callable[[], str]) -> None:
        if self._recorder.is_recording:
            self._warning("A recording is still running. Stop it before sending a request.")
            return
        try:
            result = stage()
        except PipelineError as exc:
            self._error(str(exc))
            return
        self._info(self._pipeline.status)
        print()
        print(self._preview(result))

    def _type_instruction(self) -> None:
        current = self._pipeline.state.instruction
        suffix = f" [{current}]" if current else ""
        value = self._input(f"Improvement instruction{suffix}: ").strip()
        if value:
            self._pipeline.set_instruction(value)
            self._info("Instruction ready. Choose improve to apply it.")
        elif current:
            self._info("Keeping the current instruction.")

    def _toggle_recording(self) -> None:
        try:
            blob = self._recorder.toggle()
        except MicrophoneAccessError as exc:
            self._error(str(exc))
            return
        if blob is None:
            self._info("Recording instruction... choose the record option again to stop.")
        else:
            self._info(f"Captured {blob.duration:.1f}s of spoken instruction.")

    def _discard_recording(self) -> None:
        if self._pipeline.pending_audio is None:
            self._info("There is no recorded instruction to discard.")
            return
        self._pipeline.discard_audio()
        self._info("Recorded instruction discarded.")

    def _edit_draft(self) -> None:
        if not self._pipeline.draft:
            self._info("There is no alternative content to edit yet.")
            return
        print()
        print(self._pipeline.draft)
        print()
        lines = self._read_multiline(
            f"Type the new content. Finish with a line containing only '{_END_OF_TEXT}'."
        )
        if not lines:
            self._info("Content left unchanged.")
            return
        self._pipeline.edit_draft("\n".join(lines))
        self._info("Alternative content updated.")

    def _show_content(self) -> None:
        source = self._pipeline.current()
        print()
        print(f"Source: {source.label if source is not None else '(none)'}")
        print(f"Pending instruction: {self._pipeline.state.instruction or '(none)'}")
        audio = self._pipeline.pending_audio
        print(f"Pending recording: {f'{audio.duration:.1f}s' if audio else '(none)'}")
        print()
        print("Transcript:")
        print(self._pipeline.transcript or "(empty)")
        print()
        print("Alternative content:")
        print(self._pipeline.draft or "(empty)")

    def _export_document(self) -> None:
        try:
            self._pipeline.export_document()
        except PipelineError as exc:
            self._error(str(exc))
            return
        except OSError as exc:
            LOGGER.error("Failed to write the document: %s", exc)
            self._error(f"Failed to write the document: {exc}")
            return
        self._info(self._pipeline.status)

    def _manage_instructions(self) -> None:
        store = self._pipeline.instructions
        while True:
            print()
            print("Permanent instructions:")
            items = store.instructions
            if not items:
                print("  (none)")
            for idx, item in enumerate(items, start=1):
                print(f"  {idx}. {item}")
            print("a) Add  d) Delete  i) Import  e) Export  b) Back")

            choice = self._input("Select action: ").strip().lower()
            if choice in {"b", "back", "q", "exit"}:
                return
            if choice in {"a", "add"}:
                text = self._input("New instruction: ").strip()
                if store.add(text):
                    self._info("Instruction added.")
                else:
                    self._info("Instruction is empty or already present.")
            elif choice in {"d", "delete", "remove"}:
                self._remove_instruction()
            elif choice in {"i", "import"}:
                path = self._input("File to import: ").strip()
                if not path:
                    continue
                try:
                    count = import_instructions(store, Path(path).expanduser())
                except OSError as exc:
                    self._error(f"Could not import {path}: {exc}")
                else:
                    self._info(f"Imported {count} instruction(s).")
            elif choice in {"e", "export"}:
                target = self._input(f"Export to [{self._settings.export_dir}]: ").strip()
                try:
                    written = export_instructions(
                        store, Path(target).expanduser() if target else self._settings.export_dir
                    )
                except OSError as exc:
                    self._error(f"Could not export instructions: {exc}")
                else:
                    if written is None:
                        self._info("There are no permanent instructions to export.")
                    else:
                        self._info(f"Instructions exported to {written}")
            else:
                self._info("Unknown action.")
            self._flush_messages()

    def _remove_instruction(self) -> None:
        value = self._input("Number to delete: ").strip()
        try:
            index = int(value)
        except ValueError:
            self._info("Invalid selection.")
            return
        try:
            removed = self._pipeline.instructions.remove(index - 1)
        except IndexError:
            self._info("Selection out of range.")
            return
        self._info(f"Removed: {removed}")

    def _show_devices(self) -> None:
        print()
        print(format_device_table())

    def _configure_environment(self) -> None:
        while True:
            settings = list(list_environment_settings(self._settings))
            print()
            print("Environment configuration:")
            for idx, entry in enumerate(settings, start=1):
                print(
                    f"{idx}) {entry.env_name} = {self._format_entry_value(entry.secret, entry.value)}"
                    f" (default: {self._format_env_value(entry.default)})"
                )
            print("b) Back to main menu")

            choice = self._input("Select variable to edit: ").strip().lower()
            if choice in {"b", "back", "q", "exit"}:
                return

            try:
                index = int(choice)
            except ValueError:
                self._info("Invalid selection. Choose a number from the list or 'b' to go back.")
                self._flush_messages()
                continue

            if not 1 <= index <= len(settings):
                self._info("Selection out of range. Try again.")
                self._flush_messages()
                continue

            selected = settings[index - 1]
            new_value = self._input(
                f"Enter new value for {selected.env_name} (leave empty to reset to default): "
            ).strip()

            try:
                if new_value:
                    self._settings = update_environment_setting(selected.field, new_value)
                    verb = "updated"
                else:
                    self._settings = clear_environment_setting(selected.field)
                    verb = "reset"
            except EnvironmentSettingError as exc:
                self._error(f"Failed to update {selected.env_name}: {exc}")
                self._flush_messages()
                continue

            current = getattr(self._settings, selected.field)
            self._info(
                f"{selected.env_name} {verb}. "
                f"Current value: {self._format_entry_value(selected.secret, current)}."
            )
            if selected.field == "backend" or selected.field.endswith(("_model", "_api_key")):
                self._info("Restart resay for backend changes to take effect.")
            self._flush_messages()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _create_capture(self) -> AudioCapture:
        try:
            return create_capture(
                CaptureRequest(
                    device=self._settings.default_mic_device,
                    sample_rate=self._settings.sample_rate,
                    channels=self._settings.channels,
                )
            )
        except CaptureConfigurationError as exc:
            raise MicrophoneAccessError(str(exc)) from exc

    def _read_multiline(self, prompt: str) -> List[str]:
        print(prompt)
        lines: List[str] = []
        while True:
            try:
                line = self._input("")
            except EOFError:
                break
            if line.strip() == _END_OF_TEXT:
                break
            lines.append(line)
        return lines

    def _preview(self, text: str) -> str:
        if len(text) <= _PREVIEW_LENGTH:
            return text
        return f"{text[:_PREVIEW_LENGTH]}... (use the show option for the full text)"

    def _format_env_value(self, value: Any) -> str:
        if value is None:
            return "(unset)"
        if isinstance(value, Path):
            return str(value)
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def _format_entry_value(self, secret: bool, value: Any) -> str:
        if value and secret:
            return "********"
        return self._format_env_value(value)

    def _print_menu(self) -> None:
        print()
        source = self._pipeline.current()
        status = f"Source: {source.label}" if source is not None else "No source selected."
        if self._recorder.is_recording:
            status = f"{status} (recording instruction)"
        print(status)
        print("1) Select audio file")
        print("2) Set video link")
        print("3) Transcribe")
        print("4) Generate alternative content")
        print("5) Type improvement instruction")
        print("6) Start/stop recording an instruction")
        print("7) Improve content")
        print("8) Improve and save the instruction as permanent")
        print("9) Edit alternative content")
        print("10) Show transcript and content")
        print("11) Export document")
        print("12) Manage permanent instructions")
        print("13) Show audio devices")
        print("14) Configure environment variables")
        print("15) Discard recorded instruction")
        print("q) Quit")

    def _info(self, message: str) -> None:
        self._messages.append(f"[info] {message}")

    def _warning(self, message: str) -> None:
        self._messages.append(f"[warning] {message}")

    def _error(self, message: str) -> None:
        self._messages.append(f"[error] {message}")

    def _flush_messages(self) -> None:
        while self._messages:
            print(self._messages.popleft())


__all__ = ["PipelineConsoleUI"]
