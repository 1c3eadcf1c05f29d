"""Typer CLI entry point for resay."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from .config import get_settings
from .core.audio.devices import format_device_table
from .core.pipeline.errors import PipelineError
from .core.pipeline.export import export_instructions, import_instructions
from .core.pipeline.orchestrator import ContentPipeline
from .core.pipeline.sources import parse_source
from .data.instructions import InstructionStore
from .data.models import FileSource
from .data.storage import KeyValueStore
from .logging import configure_logging, get_logger
from .services.factory import ServiceConfigurationError, resolve_backend
from .services.generation.base import GenerativeBackend

app = typer.Typer(help="resay: transcribe audio and rewrite it as social media content")
instructions_app = typer.Typer(help="Manage permanent rewrite instructions")
app.add_typer(instructions_app, name="instructions")
LOGGER = get_logger(__name__)


def _open_store() -> InstructionStore:
    settings = get_settings()
    storage = KeyValueStore(settings.database_path)
    storage.initialize()
    store = InstructionStore(storage)
    store.load()
    return store


def _get_backend(name: Optional[str]) -> GenerativeBackend:
    try:
        return resolve_backend(name or get_settings().backend)
    except ServiceConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except RuntimeError as exc:
        LOGGER.error("Failed to initialise generation backend: %s", exc)
        raise typer.BadParameter(str(exc)) from exc


def _build_pipeline(backend: Optional[str]) -> ContentPipeline:
    return ContentPipeline(_get_backend(backend), _open_store())


@app.command()
def shell(
    backend: Optional[str] = typer.Option(None, help="Generation backend: gemini/openai/dummy"),
) -> None:
    """Launch the interactive console."""

    from .ui.console import PipelineConsoleUI

    configure_logging()
    PipelineConsoleUI(_build_pipeline(backend)).run()


@app.command()
def process(
    source: str = typer.Argument(..., help="Audio file path or http(s) video link"),
    improve: Optional[List[str]] = typer.Option(
        None, "--improve", "-i", help="Improvement instruction; repeat to apply several in order"
    ),
    persist: bool = typer.Option(False, "--persist", help="Save improvement instructions as permanent"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Directory for the exported document"),
    backend: Optional[str] = typer.Option(None, help="Generation backend: gemini/openai/dummy"),
) -> None:
    """Transcribe SOURCE, rewrite it and apply optional improvements."""

    configure_logging()
    try:
        descriptor = parse_source(source)
    except FileNotFoundError as exc:
        raise typer.BadParameter(str(exc)) from exc

    pipeline = _build_pipeline(backend)
    if isinstance(descriptor, FileSource):
        pipeline.select_file(descriptor)
    else:
        pipeline.set_url(descriptor.url)

    try:
        pipeline.transcribe()
        pipeline.generate_draft()
        for instruction in improve or []:
            pipeline.improve(persist=persist, instruction=instruction)
    except PipelineError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo("Transcript:")
    typer.echo(pipeline.transcript)
    typer.echo("")
    typer.echo("Alternative content:")
    typer.echo(pipeline.draft)

    if output is not None:
        path = pipeline.export_document(output)
        typer.echo(f"Document saved to {path}")


@app.command()
def devices() -> None:
    """List available microphones."""

    configure_logging()
    typer.echo(format_device_table())


@instructions_app.command("list")
def list_instructions() -> None:
    """Show the permanent instructions in the order they are applied."""

    store = _open_store()
    if not len(store):
        typer.echo("No permanent instructions saved.")
        return
    for idx, item in enumerate(store, start=1):
        typer.echo(f"{idx}. {item}")


@instructions_app.command("add")
def add_instruction(text: str = typer.Argument(..., help="Instruction text")) -> None:
    """Append a permanent instruction."""

    if _open_store().add(text):
        typer.echo("Instruction added.")
    else:
        typer.echo("Instruction is empty or already present.")


@instructions_app.command("remove")
def remove_instruction(position: int = typer.Argument(..., help="1-based position from 'list'")) -> None:
    """Delete a permanent instruction by position."""

    try:
        removed = _open_store().remove(position - 1)
    except IndexError as exc:
        raise typer.BadParameter(f"No instruction at position {position}") from exc
    typer.echo(f"Removed: {removed}")


@instructions_app.command("import")
def import_command(path: Path = typer.Argument(..., help="Text file with one instruction per line")) -> None:
    """Replace the permanent instructions with the contents of PATH."""

    try:
        count = import_instructions(_open_store(), path)
    except OSError as exc:
        raise typer.BadParameter(f"Could not read {path}: {exc}") from exc
    typer.echo(f"Imported {count} instruction(s).")


@instructions_app.command("export")
def export_command(
    path: Optional[Path] = typer.Argument(None, help="Target file or directory (defaults to the export dir)"),
) -> None:
    """Write the permanent instructions to a text file."""

    written = export_instructions(_open_store(), path or get_settings().export_dir)
    if written is None:
        typer.echo("There are no permanent instructions to export.")
        return
    typer.echo(f"Instructions exported to {written}")


if __name__ == "__main__":  # pragma: no cover
    app()
