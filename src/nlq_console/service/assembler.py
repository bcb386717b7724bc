"""Maps raw service replies onto query results and displayable views."""

from __future__ import annotations

import json
from typing import Any

from nlq_console.errors import DEFAULT_ERROR_MESSAGE, ServiceError
from nlq_console.obs.logs import parse_log_entries
from nlq_console.render.blocks import TextBlockParser
from nlq_console.service.client import ServiceResponse
from nlq_console.types import (
    ChartSpec,
    Dataset,
    ErrorResult,
    QueryResult,
    ResultView,
    SuccessResult,
)


def compose_error_message(payload: dict[str, Any]) -> str:
    """Human-readable failure text from a service error body.

    The primary string is followed by the pretty-printed ``details`` block and,
    when the details carry one, a suggestion line.
    """

    message = str(payload.get("error") or payload.get("message") or DEFAULT_ERROR_MESSAGE)
    details = payload.get("details")
    if details is not None and details != "":
        message += f"\n\nDetails:\n{_pretty_json(details)}"
        if isinstance(details, dict) and details.get("suggestion"):
            message += f"\n\n💡 Suggestion: {details['suggestion']}"
    return message


class ResultAssembler:
    """Builds ``QueryResult`` values and the view handed to renderers."""

    def __init__(self, parser: TextBlockParser | None = None) -> None:
        self.parser = parser or TextBlockParser()

    def assemble(self, response: ServiceResponse) -> QueryResult:
        payload = response.payload
        if not response.ok:
            return ErrorResult(
                message=compose_error_message(payload),
                details=payload.get("details"),
                stack=_optional_text(payload.get("stack")),
                logs=parse_log_entries(payload.get("logs")),
            )
        return SuccessResult(
            message=str(payload.get("message") or ""),
            table=_table_from_payload(payload.get("table")),
            chart=_chart_from_payload(payload.get("chart")),
            logs=parse_log_entries(payload.get("logs")),
            result_type=str(payload.get("type") or "text"),
        )

    def service_error(self, response: ServiceResponse) -> ServiceError:
        payload = response.payload
        return ServiceError(
            compose_error_message(payload),
            status_code=response.status_code,
            details=payload.get("details"),
            stack=_optional_text(payload.get("stack")),
        )

    def view(self, result: QueryResult) -> ResultView:
        if isinstance(result, ErrorResult):
            technical = result.stack
            if technical is None and result.details not in (None, ""):
                technical = _pretty_json(result.details)
            return ResultView(
                document=self.parser.parse(result.message),
                table=None,
                chart=None,
                technical_details=technical,
                is_error=True,
            )
        return ResultView(
            document=self.parser.parse(result.message),
            table=result.table,
            chart=result.chart,
            technical_details=None,
            is_error=False,
        )


def _pretty_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2, default=str)


def _optional_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _table_from_payload(raw: Any) -> Dataset | None:
    if isinstance(raw, list):
        records = [row for row in raw if isinstance(row, dict)]
        return Dataset.from_records(records)
    if isinstance(raw, dict):
        rows = raw.get("rows", raw.get("data"))
        if not isinstance(rows, list):
            return None
        columns = raw.get("columns")
        if isinstance(columns, list):
            names = [
                str(col.get("name", "")) if isinstance(col, dict) else str(col)
                for col in columns
            ]
        else:
            names = None
        # Row-major arrays are zipped onto the column names.
        if names and rows and all(isinstance(row, list) for row in rows):
            rows = [dict(zip(names, row)) for row in rows]
        records = [row for row in rows if isinstance(row, dict)]
        return Dataset.from_records(records, names)
    return None


def _chart_from_payload(raw: Any) -> ChartSpec | None:
    if isinstance(raw, dict):
        return dict(raw)
    return None
