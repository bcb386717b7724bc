import json

from nlq_console.errors import ServiceError
from nlq_console.service.assembler import ResultAssembler, compose_error_message
from nlq_console.service.client import ServiceResponse
from nlq_console.types import ErrorResult, Heading, Severity, SuccessResult


def test_error_message_includes_details_and_suggestion() -> None:
    response = ServiceResponse(
        status_code=400, payload={"error": "bad", "details": {"suggestion": "retry"}}
    )

    result = ResultAssembler().assemble(response)

    assert isinstance(result, ErrorResult)
    assert "bad" in result.message
    assert json.dumps({"suggestion": "retry"}, indent=2) in result.message
    assert "retry" in result.message.split("Suggestion:")[1]
    assert result.details == {"suggestion": "retry"}


def test_error_message_falls_back_to_message_then_default() -> None:
    assert compose_error_message({"message": "quota exceeded"}) == "quota exceeded"
    assert compose_error_message({}) == "Error processing request"
    assert compose_error_message({"error": "x", "details": ["a"]}) == 'x\n\nDetails:\n[\n  "a"\n]'


def test_success_maps_table_chart_and_logs() -> None:
    response = ServiceResponse(
        status_code=200,
        payload={
            "type": "chart",
            "message": "**Sales**\n\nNorth leads.",
            "table": [{"region": "North", "revenue": 10}],
            "chart": {"type": "bar", "x": "region", "y": "revenue"},
            "logs": [
                {"timestamp": "2024-01-01T00:00:00Z", "message": "Parsed query"},
                {"timestamp": "2024-01-01T00:00:01Z", "message": "❌ ERROR: fallback used"},
            ],
        },
    )

    result = ResultAssembler().assemble(response)

    assert isinstance(result, SuccessResult)
    assert result.result_type == "chart"
    assert result.table is not None and result.table.column_names == ("region", "revenue")
    assert result.chart == {"type": "bar", "x": "region", "y": "revenue"}
    assert [entry.severity for entry in result.logs] == [Severity.INFO, Severity.ERROR]


def test_table_accepts_columns_and_row_arrays() -> None:
    response = ServiceResponse(
        status_code=200,
        payload={"message": "ok", "table": {"columns": ["a", "b"], "rows": [[1, 2], [3, 4]]}},
    )

    result = ResultAssembler().assemble(response)

    assert isinstance(result, SuccessResult)
    assert result.table is not None
    assert result.table.records() == [{"a": 1, "b": 2}, {"a": 3, "b": 4}]


def test_unusable_table_and_chart_are_dropped() -> None:
    response = ServiceResponse(status_code=200, payload={"message": "ok", "table": "n/a", "chart": "bar"})

    result = ResultAssembler().assemble(response)

    assert isinstance(result, SuccessResult)
    assert result.table is None
    assert result.chart is None
    assert result.has_table is False
    assert result.has_chart is False
    assert result.result_type == "text"


def test_empty_table_and_chart_still_count_as_present() -> None:
    response = ServiceResponse(status_code=200, payload={"message": "ok", "table": [], "chart": {}})

    result = ResultAssembler().assemble(response)

    assert isinstance(result, SuccessResult)
    assert result.table is not None and result.table.is_empty
    assert result.chart == {}
    assert result.has_table is True
    assert result.has_chart is True


def test_service_error_carries_status_and_stack() -> None:
    response = ServiceResponse(status_code=503, payload={"error": "down", "stack": "Trace..."})

    error = ResultAssembler().service_error(response)

    assert isinstance(error, ServiceError)
    assert error.status_code == 503
    assert error.stack == "Trace..."
    assert error.message == "down"


def test_view_renders_message_and_technical_details() -> None:
    assembler = ResultAssembler()

    success_view = assembler.view(SuccessResult(message="**Done**"))
    error_view = assembler.view(ErrorResult(message="failed", details={"code": 7}))

    assert success_view.document.blocks == (Heading(text="Done"),)
    assert success_view.is_error is False
    assert error_view.is_error is True
    assert error_view.technical_details == json.dumps({"code": 7}, indent=2)
