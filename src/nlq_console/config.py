"""Configuration models for the query console."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ServiceConfig(BaseModel):
    """Configures the remote query-answering service endpoint."""

    endpoint: str = Field(default="http://localhost:3000/api/query", min_length=1)
    timeout_seconds: float = Field(default=60.0, gt=0.0)


class HistoryConfig(BaseModel):
    """Configures the bounded, persisted query history."""

    max_items: int = Field(default=20, ge=1)
    storage_key: str = Field(default="queryHistory", min_length=1)


class SessionConfig(BaseModel):
    """Configures session-scoped dataset storage keys and previews."""

    data_key: str = Field(default="uploadedData", min_length=1)
    columns_key: str = Field(default="uploadedColumns", min_length=1)
    preview_rows: int = Field(default=5, ge=1)
    missing_values_shown: int = Field(default=5, ge=1)


class LogConfig(BaseModel):
    """Configures the per-query log stream shown next to results."""

    details_preview_chars: int = Field(default=500, ge=50)
