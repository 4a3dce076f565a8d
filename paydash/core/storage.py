"""Key-value storage for the override map used outside the database."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

from paydash.core.schedule import (
    MalformedOverrideSource,
    dump_overrides,
    load_overrides,
    set_status,
)

logger = logging.getLogger(__name__)

OVERRIDES_KEY = "payment-statuses"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """Dictionary-backed store, used by tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """Persist string values in a single JSON object file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read()
        except ValueError:
            logger.warning("Replacing unreadable store file %s", self.path)
            data = {}
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")


class OverrideStore:
    """Read and write the override map stored under a single key."""

    def __init__(self, store: KeyValueStore, key: str = OVERRIDES_KEY) -> None:
        self.store = store
        self.key = key

    def raw(self) -> Optional[str]:
        try:
            return self.store.get(self.key)
        except ValueError as exc:
            logger.warning("Could not read override store: %s", exc)
            return None

    def load(self) -> Dict[str, str]:
        try:
            return load_overrides(self.raw())
        except MalformedOverrideSource as exc:
            logger.warning("Ignoring stored overrides: %s", exc)
            return {}

    def save(self, overrides: Dict[str, str]) -> None:
        self.store.set(self.key, dump_overrides(overrides))

    def set_status(self, payment_date, status) -> Dict[str, str]:
        updated = set_status(self.load(), payment_date, status)
        self.save(updated)
        return updated


__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "OVERRIDES_KEY",
    "OverrideStore",
]
