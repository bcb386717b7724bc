"""Async HTTP boundary to the remote query-answering service."""

from __future__ import annotations

import json
import logging
import traceback
from dataclasses import dataclass
from typing import Any

import httpx

from nlq_console.config import ServiceConfig
from nlq_console.errors import TransportError
from nlq_console.types import Dataset

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServiceResponse:
    """Decoded service reply: HTTP status plus its JSON object body."""

    status_code: int
    payload: dict[str, Any]

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def build_request_body(query: str, dataset: Dataset) -> dict[str, Any]:
    return {
        "query": query,
        "data": dataset.records(),
        "columns": list(dataset.column_names),
    }


def format_stack(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


class QueryServiceClient:
    """Posts ``{query, data, columns}`` and returns the decoded reply.

    Non-2xx replies are returned, not raised: the caller decides how to turn
    the service's error body into a message. Only failures of the call itself
    (network errors, timeouts, non-JSON bodies) raise ``TransportError``.
    """

    def __init__(
        self,
        config: ServiceConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or ServiceConfig()
        self._client = client

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout_seconds)
        return self._client

    async def query(self, query: str, dataset: Dataset) -> ServiceResponse:
        body = build_request_body(query, dataset)
        logger.info(
            "Sending query to %s: %d rows, %d columns",
            self.config.endpoint,
            len(dataset.rows),
            len(dataset.column_names),
        )
        try:
            response = await self._http().post(
                self.config.endpoint,
                content=json.dumps(body, ensure_ascii=False, default=str).encode("utf-8"),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            logger.error("Query service request failed: %s", exc)
            raise TransportError(
                str(exc) or exc.__class__.__name__, stack=format_stack(exc)
            ) from exc

        logger.info("Query service answered with status %s", response.status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("Query service returned malformed JSON: %s", exc)
            raise TransportError(
                f"Malformed JSON from query service (HTTP {response.status_code}): {exc}",
                stack=format_stack(exc),
            ) from exc

        if not isinstance(payload, dict):
            raise TransportError(
                f"Query service returned {type(payload).__name__} instead of a JSON object"
            )
        return ServiceResponse(status_code=response.status_code, payload=payload)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
