"""FastAPI entrypoint for dataset, query, history and render endpoints."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from nlq_console.config import HistoryConfig, ServiceConfig
from nlq_console.data.resolver import DatasetResolver
from nlq_console.history import HistoryStore
from nlq_console.obs.logs import parse_log_entries
from nlq_console.orchestrator import QueryOrchestrator
from nlq_console.render.blocks import TextBlockParser
from nlq_console.service.assembler import ResultAssembler
from nlq_console.service.client import QueryServiceClient
from nlq_console.storage import InMemoryStorage, SqliteStorage
from nlq_console.types import Dataset, DatasetSummary

logger = logging.getLogger(__name__)


class DatasetUpload(BaseModel):
    rows: list[dict[str, Any]]
    columns: list[str] | None = None
    logs: list[dict[str, Any]] = Field(default_factory=list)


class QueryRequest(BaseModel):
    query: str


class RenderRequest(BaseModel):
    text: str


def _create_orchestrator() -> QueryOrchestrator:
    service_config = ServiceConfig(
        endpoint=os.getenv("QUERY_SERVICE_URL", "http://localhost:3000/api/query"),
        timeout_seconds=float(os.getenv("QUERY_SERVICE_TIMEOUT", "60")),
    )
    history = HistoryStore(
        SqliteStorage(os.getenv("NLQ_HISTORY_DB", "nlq_console.db")), HistoryConfig()
    )
    history.load()
    logger.info(
        "Query console using %s (%d history items loaded)",
        service_config.endpoint,
        len(history.items),
    )
    return QueryOrchestrator(
        service=QueryServiceClient(service_config),
        resolver=DatasetResolver(InMemoryStorage()),
        history=history,
        assembler=ResultAssembler(),
    )


def _summary_payload(summary: DatasetSummary) -> dict[str, Any]:
    payload = asdict(summary)
    payload["demo_mode"] = summary.demo_mode
    return payload


def _result_payload(orchestrator: QueryOrchestrator) -> dict[str, Any] | None:
    result = orchestrator.state.result
    view = orchestrator.state.view
    if result is None or view is None:
        return None
    return {
        "kind": result.kind,
        "type": result.result_type,
        "message": result.message,
        "view": asdict(view),
    }


def create_app(orchestrator: QueryOrchestrator | None = None) -> FastAPI:
    console = orchestrator or _create_orchestrator()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await console.service.aclose()

    app = FastAPI(title="NL Query Console", version="0.1.0", lifespan=lifespan)
    parser = TextBlockParser()
    app.state.orchestrator = console

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "service_endpoint": console.service.config.endpoint,
            "loading": console.loading,
            "history_count": len(console.history.items),
        }

    @app.get("/dataset")
    def dataset() -> dict[str, Any]:
        return _summary_payload(console.resolver.summarize(console.current_dataset()))

    @app.post("/dataset")
    def upload_dataset(request: DatasetUpload) -> dict[str, Any]:
        try:
            uploaded = Dataset.from_records(request.rows, request.columns)
            logs = list(parse_log_entries(request.logs))
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        summary = console.load_dataset(uploaded, logs=logs)
        return _summary_payload(summary)

    @app.post("/query")
    async def query(request: QueryRequest) -> dict[str, Any]:
        result = await console.submit(request.query)
        return {
            "accepted": result is not None,
            "result": _result_payload(console) if result is not None else None,
            "logs": [entry.to_dict() for entry in console.logs.entries],
        }

    @app.get("/state")
    def state() -> dict[str, Any]:
        return {
            "phase": console.state.phase.value,
            "loading": console.loading,
            "query": console.state.query,
            "result": _result_payload(console),
            "logs": [entry.to_dict() for entry in console.logs.entries],
        }

    @app.get("/history")
    def history(limit: int = Query(default=20, ge=1, le=20)) -> dict[str, Any]:
        return {"items": [item.to_dict() for item in console.history.items[:limit]]}

    @app.post("/history/{item_id}/repeat")
    async def repeat(item_id: int) -> dict[str, Any]:
        try:
            item = console.history.get(item_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        result = await console.repeat(item)
        return {
            "accepted": result is not None,
            "result": _result_payload(console) if result is not None else None,
            "logs": [entry.to_dict() for entry in console.logs.entries],
        }

    @app.post("/render")
    def render(request: RenderRequest) -> dict[str, Any]:
        return asdict(parser.parse(request.text))

    return app


app = create_app()
