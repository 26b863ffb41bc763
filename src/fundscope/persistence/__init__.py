"""Persistence package for fundscope."""

from .list_store import (
    LIST_NAMES,
    FundListStore,
    InMemoryListRepository,
    JsonFileListRepository,
    ListCapacityError,
    ListRepository,
    ListStoreError,
)

__all__ = [
    "LIST_NAMES",
    "FundListStore",
    "InMemoryListRepository",
    "JsonFileListRepository",
    "ListCapacityError",
    "ListRepository",
    "ListStoreError",
]
