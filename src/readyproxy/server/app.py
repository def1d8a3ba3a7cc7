# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
FastAPI service exposing the aggregator.

- ``GET /dummy``: static self-check, no outbound calls.
- ``GET /verify-readiness``: single configured target, 200 when UP, otherwise 503.
- ``POST /health/bulk``: configured (or request-supplied) target list, always 200.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from fastapi import APIRouter, Body, FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..config import ProxySettings, load_proxy_settings
from ..errors import ConfigurationError
from ..models.outcome import ProbeStatus
from ..runtime import ReadyProxy
from ..version import __version__
from .schemas import BulkHealthRequest, ProbeOutcomeSchema, SelfCheckResponse

logger = logging.getLogger(__name__)


def readiness_status_code(outcome_status: ProbeStatus) -> int:
    if outcome_status == ProbeStatus.UP:
        return status.HTTP_200_OK
    return status.HTTP_503_SERVICE_UNAVAILABLE


def _requested_urls(payload: BulkHealthRequest | list[str] | None) -> list[str] | None:
    if payload is None:
        return None
    if isinstance(payload, list):
        return payload
    return payload.urls


def create_router(proxy: ReadyProxy) -> APIRouter:
    router = APIRouter(tags=["health"])

    @router.get("/dummy", summary="Self-check", response_model=SelfCheckResponse)
    def self_check() -> dict[str, str]:
        return proxy.self_check()

    @router.get("/verify-readiness", summary="Single-target readiness")
    def verify_readiness() -> JSONResponse:
        outcome = proxy.verify_readiness()
        return JSONResponse(
            content=outcome.to_dict(),
            status_code=readiness_status_code(outcome.status),
        )

    @router.post(
        "/health/bulk",
        summary="Bulk health aggregation",
        response_model=list[ProbeOutcomeSchema],
        response_model_exclude_none=True,
    )
    def bulk_health(
        payload: BulkHealthRequest | list[str] | None = Body(default=None),
    ) -> list[ProbeOutcomeSchema]:
        result = proxy.check_bulk(_requested_urls(payload))
        return [ProbeOutcomeSchema.from_outcome(outcome) for outcome in result]

    return router


def create_app(proxy: ReadyProxy | None = None, settings: ProxySettings | None = None) -> FastAPI:
    """
    Build the service.

    The configured target list is validated here, once, so a malformed URL fails
    startup rather than every request.
    """
    if proxy is None:
        proxy = ReadyProxy(settings=settings or load_proxy_settings())
    proxy.settings.targets()
    if proxy.settings.readiness_url:
        proxy.settings.readiness_target()

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "%s starting: %d bulk targets, readiness target %s",
            proxy.settings.service_name,
            len(proxy.settings.bulk_urls),
            proxy.settings.readiness_url or "-",
        )
        yield
        logger.info("%s shutting down", proxy.settings.service_name)
        proxy.close()

    application = FastAPI(
        title="readyproxy",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.proxy = proxy

    @application.exception_handler(ConfigurationError)
    async def configuration_error_handler(_request: Request, exc: ConfigurationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    application.include_router(create_router(proxy))
    return application


__all__ = ["create_app", "create_router", "readiness_status_code"]
