"""Pydantic response schemas for the status API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error envelope returned for every non-2xx response."""

    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str = Field(description='"ok" or "degraded"')
    cache_synced: bool
    ready: bool
    ready_error: str | None = None


class StatusResponse(BaseModel):
    """Current view of the coordination protocol."""

    version: str
    mode: str
    target_namespace: str
    secret_name: str
    secret_namespace: str
    annotation_key: str
    authoritative_grs: list[str]
    external_grs: list[str]
    managed_grs: list[str] = Field(description="Result of the most recent poll")
    cached_secrets: int
