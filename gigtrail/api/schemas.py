"""Pydantic response schemas for the gigtrail HTTP API.

``/api/performances`` returns :class:`~gigtrail.models.PerformanceResult`
directly; the models here cover the service endpoints and error bodies.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None


class CacheStatsResponse(BaseModel):
    """Live-entry count and keys of the result cache."""

    size: int
    keys: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    services: dict[str, bool]
    config_valid: bool
    missing_keys: list[str] = Field(default_factory=list)
    cache: CacheStatsResponse | None = None


class RootResponse(BaseModel):
    """Self-description served at ``/``."""

    name: str
    version: str
    description: str
    endpoints: dict[str, str]
    data_sources: list[str]
    examples: list[str] = Field(default_factory=list)
