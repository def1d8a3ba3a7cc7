# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request/response schemas for the HTTP service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..models.outcome import ProbeOutcome, ProbeStatus


class BulkHealthRequest(BaseModel):
    """Optional override of the configured bulk target list."""

    urls: list[str] | None = Field(default=None, description="Ordered target URLs to probe")


class ProbeOutcomeSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    status: ProbeStatus
    http_status_code: int | None = Field(default=None, alias="httpStatusCode")
    detail: str | None = None
    latency_ms: int = Field(alias="latencyMs", ge=0)

    @classmethod
    def from_outcome(cls, outcome: ProbeOutcome) -> ProbeOutcomeSchema:
        return cls(
            url=outcome.url,
            status=outcome.status,
            http_status_code=outcome.http_status_code,
            detail=outcome.detail,
            latency_ms=outcome.latency_ms,
        )


class SelfCheckResponse(BaseModel):
    status: str
    service: str


__all__ = ["BulkHealthRequest", "ProbeOutcomeSchema", "SelfCheckResponse"]
