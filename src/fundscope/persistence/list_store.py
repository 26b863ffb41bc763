"""
User-curated fund id lists: watchlist, compare and overlap.

The store holds the lists; a ``ListRepository`` decides where they live.
``JsonFileListRepository`` writes atomically (temp file + replace) under an
in-process lock.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Protocol
from uuid import uuid4

LOGGER = logging.getLogger("fundscope.persistence.list_store")

LIST_NAMES = ("watchlist", "compare", "overlap")
LIST_CAPACITY: dict[str, int | None] = {
    "watchlist": None,
    "compare": 5,
    "overlap": 5,
}


class ListStoreError(RuntimeError):
    """Raised when fund list store operations fail."""


class ListCapacityError(ListStoreError):
    """Raised when adding to a list that is already full."""


class ListRepository(Protocol):
    def load(self) -> dict[str, list[str]]: ...

    def save(self, state: dict[str, list[str]]) -> None: ...


def _empty_state() -> dict[str, list[str]]:
    return {name: [] for name in LIST_NAMES}


def _clean_ids(values: object) -> list[str]:
    if not isinstance(values, list):
        return []
    out: list[str] = []
    for value in values:
        text = str(value or "").strip()
        if text and text not in out:
            out.append(text)
    return out


class InMemoryListRepository:
    def __init__(self, initial: dict[str, list[str]] | None = None) -> None:
        self._state = _empty_state()
        for name, ids in (initial or {}).items():
            if name in self._state:
                self._state[name] = _clean_ids(ids)

    def load(self) -> dict[str, list[str]]:
        return {name: list(ids) for name, ids in self._state.items()}

    def save(self, state: dict[str, list[str]]) -> None:
        self._state = {name: list(ids) for name, ids in state.items()}


class JsonFileListRepository:
    """JSON-backed repository; a missing or corrupt file reads as empty lists."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser().resolve()

    def load(self) -> dict[str, list[str]]:
        state = _empty_state()
        if not self.path.exists():
            return state
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.warning("Ignoring unreadable fund list file %s: %s", self.path, exc)
            return state
        if not isinstance(payload, dict):
            return state
        for name in LIST_NAMES:
            state[name] = _clean_ids(payload.get(name))
        return state

    def save(self, state: dict[str, list[str]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(f"{self.path.name}.{uuid4().hex}.tmp")
        try:
            tmp.write_text(json.dumps(state, ensure_ascii=True, indent=2) + "\n", encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise ListStoreError(f"Failed to write fund lists to {self.path}: {exc}") from exc


class FundListStore:
    def __init__(self, repository: ListRepository) -> None:
        self._repository = repository
        self._lock = Lock()

    @staticmethod
    def _check_name(name: str) -> str:
        key = str(name or "").strip().lower()
        if key not in LIST_NAMES:
            raise ListStoreError(f"Unknown fund list {name!r}; expected one of {list(LIST_NAMES)}")
        return key

    @staticmethod
    def _check_id(fund_id: str) -> str:
        text = str(fund_id or "").strip()
        if not text:
            raise ListStoreError("fund id must be a non-empty string")
        return text

    def _append(self, state: dict[str, list[str]], key: str, fund_id: str) -> None:
        capacity = LIST_CAPACITY[key]
        if capacity is not None and len(state[key]) >= capacity:
            raise ListCapacityError(f"The {key} list holds at most {capacity} funds")
        state[key].append(fund_id)
        self._repository.save(state)

    def items(self, name: str) -> list[str]:
        key = self._check_name(name)
        with self._lock:
            return list(self._repository.load()[key])

    def contains(self, name: str, fund_id: str) -> bool:
        return str(fund_id or "").strip() in self.items(name)

    def add(self, name: str, fund_id: str) -> list[str]:
        """Append *fund_id* unless present; full capped lists raise ``ListCapacityError``."""
        key = self._check_name(name)
        fund_id = self._check_id(fund_id)
        with self._lock:
            state = self._repository.load()
            ids = state[key]
            if fund_id not in ids:
                self._append(state, key, fund_id)
            return list(ids)

    def remove(self, name: str, fund_id: str) -> list[str]:
        key = self._check_name(name)
        fund_id = self._check_id(fund_id)
        with self._lock:
            state = self._repository.load()
            if fund_id in state[key]:
                state[key] = [item for item in state[key] if item != fund_id]
                self._repository.save(state)
            return list(state[key])

    def toggle(self, name: str, fund_id: str) -> bool:
        """Add or remove *fund_id*; returns True when it is in the list afterwards."""
        key = self._check_name(name)
        fund_id = self._check_id(fund_id)
        with self._lock:
            state = self._repository.load()
            ids = state[key]
            if fund_id in ids:
                state[key] = [item for item in ids if item != fund_id]
                self._repository.save(state)
                return False
            self._append(state, key, fund_id)
            return True

    def clear(self, name: str) -> None:
        key = self._check_name(name)
        with self._lock:
            state = self._repository.load()
            state[key] = []
            self._repository.save(state)
