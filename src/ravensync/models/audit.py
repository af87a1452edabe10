"""Audit log entry models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AuditRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None


class AuditResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: int
    status_text: str = ""
    ok: bool
    body: str | None = None


class AuditLogEntry(BaseModel):
    """One completed request/response pair."""

    model_config = ConfigDict(frozen=True)

    id: int
    timestamp: datetime
    endpoint: str
    request: AuditRequest
    response: AuditResponse
