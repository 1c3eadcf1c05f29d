"""Persisted set of permanent rewrite instructions."""

from __future__ import annotations

import json
from typing import Iterable, List, Optional, Protocol

from ..logging import get_logger
from .models import InstructionFile

LOGGER = get_logger(__name__)

INSTRUCTIONS_KEY = "global_instructions"


class KeyValueBackend(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class InstructionStore:
    """Ordered, de-duplicated instruction list with write-through persistence.

    The list is read once in :meth:`load` and every mutation rewrites the
    whole entry, so the persisted value never holds a partial update.
    """

    def __init__(self, storage: KeyValueBackend, key: str = INSTRUCTIONS_KEY) -> None:
        self._storage = storage
        self._key = key
        self._items: List[str] = []

    @property
    def instructions(self) -> List[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    def __contains__(self, text: object) -> bool:
        return text in self._items

    def load(self) -> List[str]:
        raw = self._storage.get(self._key)
        if raw is None:
            self._items = []
            return self.instructions
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            LOGGER.error("Failed to parse stored instructions; starting empty: %s", exc)
            self._items = []
            return self.instructions
        if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
            LOGGER.error("Stored instructions are not a list of strings; starting empty")
            self._items = []
            return self.instructions
        self._items = data
        LOGGER.debug("Loaded %s permanent instruction(s)", len(self._items))
        return self.instructions

    def add(self, text: str) -> bool:
        """Append ``text`` unless it is blank or already present."""

        if not text or not text.strip() or text in self._items:
            return False
        self._save([*self._items, text])
        LOGGER.info("Added permanent instruction #%s", len(self._items))
        return True

    def remove(self, index: int) -> str:
        if not 0 <= index < len(self._items):
            raise IndexError(f"No instruction at position {index}")
        items = list(self._items)
        removed = items.pop(index)
        self._save(items)
        LOGGER.info("Removed permanent instruction at position %s", index)
        return removed

    def replace_all(self, instructions: Iterable[str]) -> None:
        """Overwrite the set as-is; imports are trusted and not de-duplicated."""

        self._save(list(instructions))
        LOGGER.info("Replaced permanent instructions (%s entries)", len(self._items))

    def export_text(self) -> str:
        return InstructionFile(instructions=self._items).to_text()

    def import_text(self, text: str) -> int:
        parsed = InstructionFile.from_text(text)
        self.replace_all(parsed.instructions)
        return len(parsed.instructions)

    def _save(self, items: List[str]) -> None:
        self._storage.set(self._key, json.dumps(items, ensure_ascii=False))
        self._items = items


__all__ = ["INSTRUCTIONS_KEY", "InstructionStore", "KeyValueBackend"]
