"""Bundled demo dataset used when nothing has been uploaded."""

from __future__ import annotations

from nlq_console.types import Dataset, DatasetOrigin, Record

SAMPLE_ROWS: list[Record] = [
    {"date": "2024-01-05", "region": "North", "product": "Laptop", "units": 12, "revenue": 14400.0},
    {"date": "2024-01-12", "region": "South", "product": "Monitor", "units": 30, "revenue": 7500.0},
    {"date": "2024-01-19", "region": "East", "product": "Keyboard", "units": 55, "revenue": 2750.0},
    {"date": "2024-01-26", "region": "West", "product": "Laptop", "units": 9, "revenue": 10800.0},
    {"date": "2024-02-02", "region": "North", "product": "Mouse", "units": 80, "revenue": 2000.0},
    {"date": "2024-02-09", "region": "South", "product": "Laptop", "units": 15, "revenue": 18000.0},
    {"date": "2024-02-16", "region": "East", "product": "Monitor", "units": 22, "revenue": 5500.0},
    {"date": "2024-02-23", "region": "West", "product": "Keyboard", "units": 40, "revenue": 2000.0},
    {"date": "2024-03-01", "region": "North", "product": "Monitor", "units": 18, "revenue": 4500.0},
    {"date": "2024-03-08", "region": "South", "product": "Mouse", "units": 95, "revenue": 2375.0},
    {"date": "2024-03-15", "region": "East", "product": "Laptop", "units": 11, "revenue": 13200.0},
    {"date": "2024-03-22", "region": "West", "product": "Monitor", "units": None, "revenue": 6250.0},
]


def sample_dataset() -> Dataset:
    return Dataset.from_records(SAMPLE_ROWS, origin=DatasetOrigin.SAMPLE)
