"""Dataset resolution across upload, session storage and the bundled sample."""

from __future__ import annotations

import logging
import math
from typing import Any

from nlq_console.config import SessionConfig
from nlq_console.data.sample import sample_dataset
from nlq_console.storage import Storage
from nlq_console.types import Dataset, DatasetOrigin, DatasetSummary, MissingValues

logger = logging.getLogger(__name__)


class DatasetResolver:
    """Picks the dataset a query runs against.

    Precedence is the explicit in-memory upload, then the rows persisted in
    session storage, then the bundled sample. An empty result is returned as
    is; deciding that "no data" is an error belongs to the orchestrator.
    """

    def __init__(
        self,
        session_storage: Storage,
        *,
        sample: Dataset | None = None,
        config: SessionConfig | None = None,
    ) -> None:
        self.session_storage = session_storage
        self.sample = sample if sample is not None else sample_dataset()
        self.config = config or SessionConfig()

    def resolve(self, explicit: Dataset | None = None) -> Dataset:
        if explicit is not None:
            return explicit
        persisted = self._load_session_dataset()
        if persisted is not None:
            return persisted
        return self.sample

    def remember(self, dataset: Dataset) -> None:
        """Persist an uploaded dataset for the rest of the session."""
        self.session_storage.save_json(self.config.data_key, dataset.records())
        self.session_storage.save_json(self.config.columns_key, list(dataset.column_names))
        logger.info(
            "Stored uploaded dataset in session: %d rows, %d columns",
            len(dataset.rows),
            len(dataset.column_names),
        )

    def forget(self) -> None:
        self.session_storage.delete(self.config.data_key)
        self.session_storage.delete(self.config.columns_key)

    def summarize(self, dataset: Dataset) -> DatasetSummary:
        missing = _missing_values(dataset)
        shown = dict(list(missing.items())[: self.config.missing_values_shown])
        return DatasetSummary(
            rows=len(dataset.rows),
            columns=len(dataset.column_names),
            column_names=dataset.column_names,
            sample=dataset.rows[: self.config.preview_rows],
            missing_values=shown,
            origin=dataset.origin,
            hidden_missing_columns=len(missing) - len(shown),
        )

    def _load_session_dataset(self) -> Dataset | None:
        try:
            rows = self.session_storage.load_json(self.config.data_key)
        except ValueError:
            logger.warning("Ignoring corrupt session dataset under %r", self.config.data_key)
            return None
        if rows is None:
            return None
        if not isinstance(rows, list):
            logger.warning("Ignoring session dataset that is not a list of records")
            return None

        try:
            columns = self.session_storage.load_json(self.config.columns_key)
        except ValueError:
            logger.warning("Ignoring corrupt session columns under %r", self.config.columns_key)
            columns = None
        if not isinstance(columns, list):
            columns = None

        return Dataset.from_records(
            [row for row in rows if isinstance(row, dict)],
            columns,
            origin=DatasetOrigin.SESSION,
        )


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float):
        return math.isnan(value)
    return False


def _missing_values(dataset: Dataset) -> dict[str, MissingValues]:
    total = len(dataset.rows)
    if total == 0:
        return {}
    report: dict[str, MissingValues] = {}
    for column in dataset.column_names:
        count = sum(1 for row in dataset.rows if _is_missing(row.get(column)))
        if count > 0:
            report[column] = MissingValues(
                count=count, percentage=round(count / total * 100.0, 1)
            )
    return report
