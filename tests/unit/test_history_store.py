import asyncio
import json

import pytest

from nlq_console.config import HistoryConfig
from nlq_console.history import HistoryStore
from nlq_console.storage import InMemoryStorage
from nlq_console.types import Dataset, ErrorResult, SuccessResult


def test_history_is_capped_newest_first() -> None:
    storage = InMemoryStorage()
    store = HistoryStore(storage)

    for i in range(25):
        store.record(f"query {i}", SuccessResult(message="ok"))

    items = store.items
    assert len(items) == 20
    assert items[0].query == "query 24"
    assert items[-1].query == "query 5"
    assert all(a.id > b.id for a, b in zip(items, items[1:]))

    persisted = json.loads(storage.load("queryHistory"))
    assert len(persisted) == 20
    assert persisted[0]["query"] == "query 24"


def test_history_item_summarizes_result_shape_only() -> None:
    store = HistoryStore(InMemoryStorage())
    table = Dataset.from_records([{"region": "North", "revenue": 10}])

    item = store.record(
        "revenue by region",
        SuccessResult(message="done", table=table, chart={"type": "bar"}, result_type="chart"),
    )
    failed = store.record("broken", ErrorResult(message="bad"))

    assert (item.result_type, item.has_table, item.has_chart) == ("chart", True, True)
    assert (failed.result_type, failed.has_table, failed.has_chart) == ("error", False, False)
    assert set(item.to_dict()) == {"id", "query", "timestamp", "resultType", "hasChart", "hasTable"}


def test_history_survives_reload() -> None:
    storage = InMemoryStorage()
    HistoryStore(storage).record("first", SuccessResult(message="ok"))

    reloaded = HistoryStore(storage)
    items = reloaded.load()

    assert [item.query for item in items] == ["first"]
    newer = reloaded.record("second", SuccessResult(message="ok"))
    assert newer.id > items[0].id


def test_corrupt_history_loads_empty() -> None:
    storage = InMemoryStorage()
    storage.save("queryHistory", "{not json")

    assert HistoryStore(storage).load() == ()


def test_malformed_entries_are_skipped() -> None:
    storage = InMemoryStorage()
    storage.save_json(
        "queryHistory",
        [
            {"id": 1, "query": "ok", "timestamp": "2024-05-01T10:00:00.000Z", "resultType": "text"},
            {"query": "missing id"},
            "garbage",
        ],
    )

    items = HistoryStore(storage).load()

    assert [item.id for item in items] == [1]
    assert items[0].timestamp.year == 2024


def test_custom_cap_and_lookup() -> None:
    store = HistoryStore(InMemoryStorage(), HistoryConfig(max_items=2))
    first = store.record("a", SuccessResult(message=""))
    store.record("b", SuccessResult(message=""))
    third = store.record("c", SuccessResult(message=""))

    assert [item.query for item in store.items] == ["c", "b"]
    assert store.get(third.id) == third
    with pytest.raises(KeyError):
        store.get(first.id)


def test_repeat_submits_item_query() -> None:
    store = HistoryStore(InMemoryStorage())
    item = store.record("average sales", SuccessResult(message=""))
    seen: list[str] = []

    async def _submit(query: str) -> str:
        seen.append(query)
        return "submitted"

    assert asyncio.run(store.repeat(item, _submit)) == "submitted"
    assert seen == ["average sales"]
