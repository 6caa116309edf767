"""FastAPI adapter mapping HTTP requests onto IAS public API calls."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

from packages.fieldlog_shared.errors import codes, not_found_error
from packages.fieldlog_shared.http import error_response
from services.state.inspection_authority.broadcaster import (
    ConnectionRegistry,
    Subscription,
)
from services.state.inspection_authority.config import InspectionAuthoritySettings
from services.state.inspection_authority.domain import InspectionStatus
from services.state.inspection_authority.interfaces import StorageUnavailable
from services.state.inspection_authority.service import InspectionAuthorityService
from services.state.inspection_authority.validation import (
    SubmitInspectionRequest,
    SyncInspectionRequest,
)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def register_routes(
    app: FastAPI,
    *,
    service: InspectionAuthorityService,
    registry: ConnectionRegistry,
    settings: InspectionAuthoritySettings,
) -> None:
    """Mount IAS routes and the storage failure handler on ``app``."""
    router = APIRouter()

    @router.post("/inspections", status_code=201)
    def submit_inspection(body: SubmitInspectionRequest) -> dict[str, Any]:
        record = service.submit(submission=body.to_submission())
        return record.to_json()

    @router.post("/inspections/sync", status_code=201)
    def sync_inspection(body: SyncInspectionRequest) -> dict[str, Any]:
        record = service.submit(submission=body.to_submission())
        return record.to_json()

    @router.get("/inspections")
    def list_inspections() -> list[dict[str, Any]]:
        return [record.to_json() for record in service.list_inspections()]

    @router.get("/inspections/status/{status}")
    def list_inspections_by_status(status: InspectionStatus) -> list[dict[str, Any]]:
        return [
            record.to_json()
            for record in service.list_inspections_by_status(status=status)
        ]

    @router.get("/inspections/events/stream")
    async def stream_inspections() -> StreamingResponse:
        subscription = await run_in_threadpool(
            registry.subscribe, loop=asyncio.get_running_loop()
        )
        return StreamingResponse(
            sse_frames(
                registry,
                subscription,
                heartbeat_interval=settings.heartbeat_interval_seconds,
            ),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    @router.get("/inspections/events/connections")
    def active_connections() -> dict[str, int]:
        return {"activeConnections": registry.active_connections}

    @router.get("/inspections/{inspection_id}", response_model=None)
    def get_inspection(inspection_id: str) -> dict[str, Any] | JSONResponse:
        record = service.get_inspection(inspection_id=inspection_id)
        if record is None:
            return error_response(
                status_code=404,
                errors=[
                    not_found_error(
                        "inspection not found",
                        code=codes.RESOURCE_NOT_FOUND,
                        metadata={"id": inspection_id},
                    )
                ],
            )
        return record.to_json()

    @router.get("/health", response_model=None)
    def health() -> dict[str, Any] | JSONResponse:
        status = service.health()
        body = {
            "serviceReady": status.service_ready,
            "storageReady": status.storage_ready,
            "activeConnections": status.active_connections,
            "detail": status.detail,
        }
        if not status.storage_ready:
            return JSONResponse(status_code=503, content=body)
        return body

    async def _on_storage_unavailable(
        request: Request, exc: StorageUnavailable
    ) -> JSONResponse:
        del request
        return error_response(status_code=503, errors=[exc.error])

    app.add_exception_handler(StorageUnavailable, _on_storage_unavailable)
    app.include_router(router)


async def sse_frames(
    registry: ConnectionRegistry,
    subscription: Subscription,
    *,
    heartbeat_interval: float,
) -> AsyncIterator[str]:
    """Stream one subscription's frames and unsubscribe when the client leaves."""
    try:
        async for frame in subscription.frames(heartbeat_interval=heartbeat_interval):
            yield frame
    finally:
        registry.unsubscribe(subscription)
