"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Iterator, Literal

Record = dict[str, Any]
ChartSpec = dict[str, Any]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Parse ISO-8601 text (including a trailing ``Z``) into an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        return utc_now()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# Inline spans -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PlainText:
    value: str
    kind: Literal["text"] = "text"


@dataclass(frozen=True, slots=True)
class Bold:
    value: str
    kind: Literal["bold"] = "bold"


@dataclass(frozen=True, slots=True)
class Code:
    value: str
    kind: Literal["code"] = "code"


InlineSpan = PlainText | Bold | Code
InlineRun = tuple[InlineSpan, ...]


def run_text(run: Iterable[InlineSpan]) -> str:
    """Visible text of a run with all markers removed."""
    return "".join(span.value for span in run)


# Blocks -----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Heading:
    text: str
    kind: Literal["heading"] = "heading"


@dataclass(frozen=True, slots=True)
class ListBlock:
    items: tuple[InlineRun, ...]
    kind: Literal["list"] = "list"


@dataclass(frozen=True, slots=True)
class Paragraph:
    runs: InlineRun
    kind: Literal["paragraph"] = "paragraph"


Block = Heading | ListBlock | Paragraph


@dataclass(frozen=True, slots=True)
class Document:
    """Ordered blocks produced from one rendered message."""

    blocks: tuple[Block, ...] = ()

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)


# Datasets ---------------------------------------------------------------------


class DatasetOrigin(str, Enum):
    UPLOAD = "upload"
    SESSION = "session"
    SAMPLE = "sample"


@dataclass(frozen=True, slots=True)
class Dataset:
    """Tabular rows plus ordered column names."""

    rows: tuple[Record, ...]
    column_names: tuple[str, ...]
    origin: DatasetOrigin = DatasetOrigin.UPLOAD

    @classmethod
    def from_records(
        cls,
        rows: Iterable[Record],
        column_names: Iterable[str] | None = None,
        *,
        origin: DatasetOrigin = DatasetOrigin.UPLOAD,
    ) -> Dataset:
        records = tuple(dict(row) for row in rows)
        names = list(column_names) if column_names is not None else []
        if not names and records:
            names = list(records[0].keys())
        return cls(
            rows=records,
            column_names=tuple(str(name) for name in names),
            origin=origin,
        )

    @classmethod
    def empty(cls, origin: DatasetOrigin = DatasetOrigin.SAMPLE) -> Dataset:
        return cls(rows=(), column_names=(), origin=origin)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def records(self) -> list[Record]:
        return [dict(row) for row in self.rows]


@dataclass(frozen=True, slots=True)
class MissingValues:
    count: int
    percentage: float


@dataclass(frozen=True, slots=True)
class DatasetSummary:
    """What the data panel shows about the dataset backing the next query."""

    rows: int
    columns: int
    column_names: tuple[str, ...]
    sample: tuple[Record, ...]
    missing_values: dict[str, MissingValues]
    origin: DatasetOrigin
    hidden_missing_columns: int = 0

    @property
    def demo_mode(self) -> bool:
        return self.origin is DatasetOrigin.SAMPLE


# Logs -------------------------------------------------------------------------


class Severity(str, Enum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class LogEntry:
    message: str
    severity: Severity = Severity.INFO
    timestamp: datetime = field(default_factory=utc_now)

    def display(self) -> str:
        return f"{self.timestamp.astimezone():%H:%M:%S} {self.message}"

    def to_dict(self) -> dict[str, str]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
            "severity": self.severity.value,
        }


# Results ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SuccessResult:
    message: str
    table: Dataset | None = None
    chart: ChartSpec | None = None
    logs: tuple[LogEntry, ...] = ()
    result_type: str = "text"
    kind: Literal["success"] = "success"

    @property
    def has_table(self) -> bool:
        return self.table is not None

    @property
    def has_chart(self) -> bool:
        return self.chart is not None


@dataclass(frozen=True, slots=True)
class ErrorResult:
    message: str
    details: Any = None
    stack: str | None = None
    logs: tuple[LogEntry, ...] = ()
    kind: Literal["error"] = "error"

    @property
    def result_type(self) -> str:
        return "error"

    @property
    def has_table(self) -> bool:
        return False

    @property
    def has_chart(self) -> bool:
        return False


QueryResult = SuccessResult | ErrorResult


@dataclass(frozen=True, slots=True)
class ResultView:
    """Displayable composition handed to rendering collaborators."""

    document: Document
    table: Dataset | None
    chart: ChartSpec | None
    technical_details: str | None
    is_error: bool


# History ----------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class QueryHistoryItem:
    """Summary of one past query; never holds the result payload."""

    id: int
    query: str
    timestamp: datetime
    result_type: str
    has_chart: bool
    has_table: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "query": self.query,
            "timestamp": self.timestamp.isoformat(),
            "resultType": self.result_type,
            "hasChart": self.has_chart,
            "hasTable": self.has_table,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> QueryHistoryItem:
        return cls(
            id=int(payload["id"]),
            query=str(payload["query"]),
            timestamp=parse_timestamp(payload.get("timestamp")),
            result_type=str(payload.get("resultType") or "text"),
            has_chart=bool(payload.get("hasChart", False)),
            has_table=bool(payload.get("hasTable", False)),
        )


HistoryLog = tuple[QueryHistoryItem, ...]
