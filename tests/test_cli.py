"""Tests for the command line interface."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from resay import cli
from resay.core.pipeline.export import INSTRUCTIONS_FILENAME


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "pitch.mp3"
    path.write_bytes(b"ID3 fake audio")
    return path


def test_process_file_with_dummy_backend(runner, audio_file, tmp_path) -> None:
    result = runner.invoke(
        cli.app,
        [
            "process",
            str(audio_file),
            "--backend",
            "dummy",
            "--improve",
            "make it shorter",
            "--persist",
            "--output",
            str(tmp_path / "out"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Dummy transcript of 14 bytes of audio/mpeg" in result.output
    assert (tmp_path / "out" / "pitch.txt").exists()

    listed = runner.invoke(cli.app, ["instructions", "list"])
    assert "1. make it shorter" in listed.output


def test_process_url_with_dummy_backend(runner) -> None:
    result = runner.invoke(cli.app, ["process", "https://videos.example/watch?v=1", "--backend", "dummy"])

    assert result.exit_code == 0, result.output
    assert "linked video" in result.output


def test_process_missing_file_is_bad_parameter(runner, tmp_path) -> None:
    result = runner.invoke(cli.app, ["process", str(tmp_path / "missing.mp3"), "--backend", "dummy"])

    assert result.exit_code != 0


def test_unknown_backend_is_bad_parameter(runner, audio_file) -> None:
    result = runner.invoke(cli.app, ["process", str(audio_file), "--backend", "nope"])

    assert result.exit_code != 0


def test_instruction_commands_round_trip(runner, tmp_path) -> None:
    assert "No permanent instructions" in runner.invoke(cli.app, ["instructions", "list"]).output

    runner.invoke(cli.app, ["instructions", "add", "Use emojis"])
    runner.invoke(cli.app, ["instructions", "add", "Max 3 hashtags"])
    duplicate = runner.invoke(cli.app, ["instructions", "add", "Use emojis"])
    assert "already present" in duplicate.output

    exported = runner.invoke(cli.app, ["instructions", "export", str(tmp_path)])
    assert exported.exit_code == 0, exported.output
    assert (tmp_path / INSTRUCTIONS_FILENAME).read_text(encoding="utf-8") == "Use emojis\nMax 3 hashtags"

    removed = runner.invoke(cli.app, ["instructions", "remove", "1"])
    assert "Removed: Use emojis" in removed.output
    out_of_range = runner.invoke(cli.app, ["instructions", "remove", "5"])
    assert out_of_range.exit_code != 0

    rules = tmp_path / "rules.txt"
    rules.write_text("A\nB\nA\n", encoding="utf-8")
    imported = runner.invoke(cli.app, ["instructions", "import", str(rules)])
    assert "Imported 3 instruction(s)." in imported.output

    listed = runner.invoke(cli.app, ["instructions", "list"]).output
    assert "1. A" in listed and "2. B" in listed and "3. A" in listed


def test_export_with_no_instructions(runner, tmp_path) -> None:
    result = runner.invoke(cli.app, ["instructions", "export", str(tmp_path)])

    assert "no permanent instructions" in result.output


def test_devices_command(runner, monkeypatch) -> None:
    monkeypatch.setattr(cli, "format_device_table", lambda: "ID | Name")

    result = runner.invoke(cli.app, ["devices"])

    assert result.exit_code == 0
    assert "ID | Name" in result.output
