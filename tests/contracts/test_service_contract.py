import asyncio
import json

import httpx

from nlq_console.config import ServiceConfig
from nlq_console.service.client import QueryServiceClient, build_request_body
from nlq_console.types import Dataset


def test_request_body_has_exactly_query_data_columns() -> None:
    dataset = Dataset.from_records([{"a": 1}], ["a"])

    assert build_request_body("q", dataset) == {"query": "q", "data": [{"a": 1}], "columns": ["a"]}


def test_client_posts_json_to_configured_endpoint() -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(404, json={"error": "no such table"})

    client = QueryServiceClient(
        ServiceConfig(endpoint="http://service.test/api/query"),
        client=httpx.AsyncClient(transport=httpx.MockTransport(_handler)),
    )
    dataset = Dataset.from_records([{"when": "2024-01-01", "n": 2}])

    response = asyncio.run(client.query("count rows", dataset))

    assert response.ok is False
    assert response.status_code == 404
    assert response.payload == {"error": "no such table"}
    assert seen[0].method == "POST"
    assert str(seen[0].url) == "http://service.test/api/query"
    assert seen[0].headers["content-type"] == "application/json"
    assert json.loads(seen[0].content) == {
        "query": "count rows",
        "data": [{"when": "2024-01-01", "n": 2}],
        "columns": ["when", "n"],
    }
