from nlq_console.data.resolver import DatasetResolver
from nlq_console.storage import InMemoryStorage
from nlq_console.types import Dataset, DatasetOrigin


def test_columns_derive_from_first_record() -> None:
    dataset = Dataset.from_records([{"a": 1, "b": 2}, {"a": 3, "c": 4}])

    assert dataset.column_names == ("a", "b")


def test_explicit_dataset_wins() -> None:
    storage = InMemoryStorage()
    resolver = DatasetResolver(storage)
    resolver.remember(Dataset.from_records([{"x": 1}]))
    explicit = Dataset.from_records([{"y": 2}])

    assert resolver.resolve(explicit) is explicit


def test_session_dataset_beats_sample() -> None:
    storage = InMemoryStorage()
    resolver = DatasetResolver(storage)
    resolver.remember(Dataset.from_records([{"city": "Oslo", "temp": 3}], ["city", "temp"]))

    resolved = resolver.resolve()

    assert resolved.origin is DatasetOrigin.SESSION
    assert resolved.column_names == ("city", "temp")
    assert resolved.records() == [{"city": "Oslo", "temp": 3}]


def test_sample_used_when_nothing_uploaded() -> None:
    resolved = DatasetResolver(InMemoryStorage()).resolve()

    assert resolved.origin is DatasetOrigin.SAMPLE
    assert not resolved.is_empty
    assert "revenue" in resolved.column_names


def test_empty_sample_resolves_to_empty_dataset() -> None:
    resolver = DatasetResolver(InMemoryStorage(), sample=Dataset.empty())

    assert resolver.resolve().is_empty


def test_corrupt_session_data_falls_back_to_sample() -> None:
    storage = InMemoryStorage()
    storage.save("uploadedData", "[{broken")

    resolved = DatasetResolver(storage).resolve()

    assert resolved.origin is DatasetOrigin.SAMPLE


def test_session_columns_missing_are_derived() -> None:
    storage = InMemoryStorage()
    storage.save_json("uploadedData", [{"k": "v"}])

    resolved = DatasetResolver(storage).resolve()

    assert resolved.column_names == ("k",)


def test_forget_clears_session_keys() -> None:
    storage = InMemoryStorage()
    resolver = DatasetResolver(storage)
    resolver.remember(Dataset.from_records([{"x": 1}]))
    resolver.forget()

    assert storage.load("uploadedData") is None
    assert storage.load("uploadedColumns") is None


def test_summary_reports_missing_values_and_preview() -> None:
    rows = [
        {"name": "a", "score": 1.0, "note": ""},
        {"name": "b", "score": float("nan"), "note": None},
        {"name": "c", "score": 3.0, "note": "ok"},
        {"name": "d", "score": 4.0, "note": "ok"},
        {"name": "e", "score": 5.0, "note": "ok"},
        {"name": "f", "score": 6.0, "note": "ok"},
    ]
    resolver = DatasetResolver(InMemoryStorage())

    summary = resolver.summarize(Dataset.from_records(rows))

    assert (summary.rows, summary.columns) == (6, 3)
    assert len(summary.sample) == 5
    assert set(summary.missing_values) == {"score", "note"}
    assert summary.missing_values["note"].count == 2
    assert summary.missing_values["note"].percentage == 33.3
    assert summary.missing_values["score"].percentage == 16.7
    assert summary.demo_mode is False


def test_sample_summary_is_demo_mode() -> None:
    resolver = DatasetResolver(InMemoryStorage())

    assert resolver.summarize(resolver.resolve()).demo_mode is True
