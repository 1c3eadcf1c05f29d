from __future__ import annotations

import json

import pytest

from fakes import MemoryKeyValueStore

from resay.data.instructions import INSTRUCTIONS_KEY, InstructionStore
from resay.data.storage import KeyValueStore


def _store(initial=None) -> tuple[InstructionStore, MemoryKeyValueStore]:
    backend = MemoryKeyValueStore(initial)
    store = InstructionStore(backend)
    store.load()
    return store, backend


def test_load_missing_key_yields_empty_set():
    store, _ = _store()

    assert store.instructions == []


@pytest.mark.parametrize("raw", ["{not json", json.dumps({"a": 1}), json.dumps([1, 2])])
def test_load_corrupt_data_yields_empty_set(raw):
    store, _ = _store({INSTRUCTIONS_KEY: raw})

    assert store.instructions == []


def test_add_writes_through_and_rejects_duplicates_and_blanks():
    store, backend = _store()

    assert store.add("Use emojis")
    assert not store.add("Use emojis")
    assert not store.add("")
    assert not store.add("   ")
    assert store.add("Keep it short")

    assert store.instructions == ["Use emojis", "Keep it short"]
    assert json.loads(backend.get(INSTRUCTIONS_KEY)) == ["Use emojis", "Keep it short"]


def test_remove_by_position_persists():
    store, backend = _store({INSTRUCTIONS_KEY: json.dumps(["a", "b", "c"])})

    assert store.remove(1) == "b"

    assert store.instructions == ["a", "c"]
    assert json.loads(backend.get(INSTRUCTIONS_KEY)) == ["a", "c"]


def test_remove_out_of_range_raises():
    store, _ = _store({INSTRUCTIONS_KEY: json.dumps(["a"])})

    with pytest.raises(IndexError):
        store.remove(3)
    assert store.instructions == ["a"]


def test_import_replaces_without_deduplication():
    store, _ = _store({INSTRUCTIONS_KEY: json.dumps(["old"])})

    count = store.import_text("first\n\n  \nsecond\nfirst\n")

    assert count == 3
    assert store.instructions == ["first", "second", "first"]


def test_export_text_is_newline_joined():
    store, _ = _store()
    store.add("one")
    store.add("two")

    assert store.export_text() == "one\ntwo"


def test_instructions_persist_across_sessions(tmp_path):
    storage = KeyValueStore(tmp_path / "resay.db")
    storage.initialize()
    InstructionStore(storage).add("Écris en français")

    reloaded = InstructionStore(storage)

    assert reloaded.load() == ["Écris en français"]
    assert "Écris en français" in reloaded
    assert len(reloaded) == 1


@pytest.mark.parametrize(
    "entry",
    ["Carriage\rreturn", "Page\x0cbreak", "Line\u2028sep", "Group\x1dsep", "Next\x85line", "Vertical\x0btab"],
)
def test_export_then_import_restores_entries_with_other_line_breaks(entry):
    store, _ = _store()
    original = ["first", entry, "last"]
    store.replace_all(original)

    store.import_text(store.export_text())

    assert store.instructions == original


def test_import_accepts_crlf_files():
    store, _ = _store()

    count = store.import_text("one\r\ntwo\r\n\r\n")

    assert count == 2
    assert store.instructions == ["one", "two"]
