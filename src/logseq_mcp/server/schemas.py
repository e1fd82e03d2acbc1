"""Pydantic request/response models for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field


# ========== Common ==========

class ErrorResponse(BaseModel):
    error: str
    detail: str


# ========== Graph ==========

class RelationshipRequest(BaseModel):
    topic_a: str
    topic_b: str
    relationship_type: str = Field(
        description="references | referenced-by | in-pages-linking-to | connected-within"
    )
    max_distance: int = Field(default=2, ge=0, le=3)


class ContextRequest(BaseModel):
    topic: str
    max_blocks: int = Field(default=50, ge=0)
    max_related_pages: int = Field(default=10, ge=0)
    max_references: int = Field(default=20, ge=0)
    include_temporal_context: bool = True


class QueryContextRequest(BaseModel):
    query: str


# ========== Server ==========

class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    uptime_seconds: float


class StatusResponse(BaseModel):
    status: str = "ok"
    version: str
    uptime_seconds: float
    mode: str
    api_url: str
    graph_name: str | None = None
    graph_path: str | None = None
