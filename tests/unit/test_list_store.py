"""Unit tests for fundscope.persistence.list_store."""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from fundscope.persistence import (
    FundListStore,
    InMemoryListRepository,
    JsonFileListRepository,
    ListCapacityError,
    ListStoreError,
)


@pytest.fixture
def store() -> FundListStore:
    return FundListStore(InMemoryListRepository())


class TestFundListStore:
    def test_add_preserves_order_and_dedupes(self, store):
        store.add("watchlist", "b")
        store.add("watchlist", "a")
        assert store.add("watchlist", "b") == ["b", "a"]

    def test_remove(self, store):
        store.add("compare", "a")
        store.add("compare", "b")
        assert store.remove("compare", "a") == ["b"]
        assert store.remove("compare", "missing") == ["b"]

    def test_toggle(self, store):
        assert store.toggle("watchlist", "x") is True
        assert store.contains("watchlist", "x")
        assert store.toggle("watchlist", "x") is False
        assert store.items("watchlist") == []

    def test_toggle_respects_capacity(self, store):
        for idx in range(5):
            store.add("compare", str(idx))
        with pytest.raises(ListCapacityError):
            store.toggle("compare", "new")
        assert store.toggle("compare", "0") is False
        assert store.toggle("compare", "new") is True
        assert store.items("compare") == ["1", "2", "3", "4", "new"]

    def test_concurrent_toggles_are_serialized(self, tmp_path):
        store = FundListStore(JsonFileListRepository(tmp_path / "lists.json"))
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: store.toggle("watchlist", "f1"), range(40)))
        # an even number of toggles leaves the id out, and each call flipped the state once
        assert results.count(True) == results.count(False) == 20
        assert store.items("watchlist") == []

    def test_capacity(self, store):
        for idx in range(5):
            store.add("overlap", str(idx))
        with pytest.raises(ListCapacityError):
            store.add("overlap", "6")
        # re-adding an existing id is not a capacity violation
        assert len(store.add("overlap", "0")) == 5

    def test_watchlist_is_unbounded(self, store):
        for idx in range(20):
            store.add("watchlist", str(idx))
        assert len(store.items("watchlist")) == 20

    def test_clear(self, store):
        store.add("compare", "a")
        store.clear("compare")
        assert store.items("compare") == []

    def test_lists_are_independent(self, store):
        store.add("compare", "a")
        assert store.items("watchlist") == []

    def test_unknown_list(self, store):
        with pytest.raises(ListStoreError, match="Unknown fund list"):
            store.add("favourites", "a")

    def test_blank_id(self, store):
        with pytest.raises(ListStoreError):
            store.add("watchlist", "  ")

    def test_items_returns_copy(self, store):
        store.add("watchlist", "a")
        store.items("watchlist").append("b")
        assert store.items("watchlist") == ["a"]


class TestJsonFileListRepository:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "nested" / "lists.json"
        FundListStore(JsonFileListRepository(path)).add("watchlist", "118834")

        reopened = FundListStore(JsonFileListRepository(path))
        assert reopened.items("watchlist") == ["118834"]
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload == {"watchlist": ["118834"], "compare": [], "overlap": []}

    def test_no_temp_files_left(self, tmp_path):
        path = tmp_path / "lists.json"
        FundListStore(JsonFileListRepository(path)).add("compare", "a")
        assert [p.name for p in tmp_path.iterdir()] == ["lists.json"]

    def test_missing_file_is_empty(self, tmp_path):
        state = JsonFileListRepository(tmp_path / "absent.json").load()
        assert state == {"watchlist": [], "compare": [], "overlap": []}

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "lists.json"
        path.write_text("{not json", encoding="utf-8")
        assert JsonFileListRepository(path).load()["watchlist"] == []

    def test_cleans_loaded_ids(self, tmp_path):
        path = tmp_path / "lists.json"
        path.write_text(json.dumps({"watchlist": ["a", "a", "", None, 5], "compare": "x"}), encoding="utf-8")
        state = JsonFileListRepository(path).load()
        assert state["watchlist"] == ["a", "5"]
        assert state["compare"] == []

    def test_concurrent_adds(self, tmp_path):
        store = FundListStore(JsonFileListRepository(tmp_path / "lists.json"))
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda idx: store.add("watchlist", f"f{idx}"), range(40)))
        assert sorted(store.items("watchlist")) == sorted(f"f{idx}" for idx in range(40))
