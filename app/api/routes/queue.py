from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, HTTPException, Query, Request, Response, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from app.dependencies.auth import AdminCaller, CurrentCaller
from app.dependencies.queue import (
    QUEUE_TOKEN_COOKIE,
    ActiveTicket,
    QueueServiceDep,
    SettingsDep,
    missing_token_error,
    queue_http_error,
    read_queue_token,
    status_payload,
)
from app.metrics.exporters import PrometheusExporter
from app.queue.errors import TicketExpiredError, TicketNotFoundError

router = APIRouter(prefix="/api/queue", tags=["queue"])


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class QueueJoinResponse(_CamelModel):
    queue_token: str = Field(alias="queueToken")
    queue_number: int = Field(alias="queueNumber")
    active: bool
    position: int | None = None


class QueueStatusBody(_CamelModel):
    active: bool
    position: int
    estimated_wait_seconds: int = Field(alias="estimatedWaitSeconds")


class QueueStatusResponse(_CamelModel):
    queue_status: QueueStatusBody = Field(alias="queueStatus")


class QueueLeaveRequest(_CamelModel):
    token: str | None = Field(default=None, max_length=256)


class QueueLeaveResponse(BaseModel):
    released: bool


class QueueAccessResponse(_CamelModel):
    active: bool
    queue_number: int | None = Field(default=None, alias="queueNumber")


class QueueResetResponse(BaseModel):
    removed: int
    active: int
    waiting: int


class QueueStatsResponse(_CamelModel):
    capacity: int
    active: int
    waiting: int
    average_release_interval_seconds: float = Field(alias="averageReleaseIntervalSeconds")


@router.post("/join", response_model=QueueJoinResponse, response_model_exclude_none=True)
async def join_queue(
    response: Response,
    service: QueueServiceDep,
    settings: SettingsDep,
    caller: CurrentCaller,
) -> QueueJoinResponse:
    result = await service.join(caller.identity)
    response.set_cookie(
        QUEUE_TOKEN_COOKIE,
        result.token,
        max_age=settings.queue_cookie_max_age_seconds,
        path="/",
        secure=settings.queue_cookie_secure,
        httponly=False,
        samesite="lax",
    )
    return QueueJoinResponse(
        queue_token=result.token,
        queue_number=result.queue_number,
        active=result.active,
        position=None if result.active else result.position,
    )


@router.get("/status", response_model=QueueStatusResponse)
async def get_queue_status(
    service: QueueServiceDep,
    token: str | None = Query(default=None, max_length=256),
) -> QueueStatusResponse:
    if token is None or not token.strip():
        raise missing_token_error()
    try:
        queue_status = await service.status(token.strip())
    except (TicketNotFoundError, TicketExpiredError) as exc:
        raise queue_http_error(exc) from exc
    return QueueStatusResponse(queue_status=QueueStatusBody.model_validate(status_payload(queue_status)))


@router.post("/leave", response_model=QueueLeaveResponse)
async def leave_queue(
    request: Request,
    response: Response,
    service: QueueServiceDep,
    payload: Annotated[QueueLeaveRequest | None, Body()] = None,
) -> QueueLeaveResponse:
    token = payload.token if payload is not None and payload.token else read_queue_token(request)
    released = await service.release(token) if token else False
    response.delete_cookie(QUEUE_TOKEN_COOKIE, path="/")
    return QueueLeaveResponse(released=released)


@router.get("/access", response_model=QueueAccessResponse, response_model_exclude_none=True)
async def check_queue_access(ticket: ActiveTicket) -> QueueAccessResponse:
    if ticket is None:
        return QueueAccessResponse(active=True)
    return QueueAccessResponse(active=True, queue_number=ticket.sequence)


@router.post("/reset", response_model=QueueResetResponse)
async def reset_queue(service: QueueServiceDep, settings: SettingsDep, _: AdminCaller) -> QueueResetResponse:
    if not settings.queue_admin_reset_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Queue reset is disabled")
    return QueueResetResponse(**await service.reset())


@router.get("/stats", response_model=QueueStatsResponse)
async def get_queue_stats(service: QueueServiceDep, _: AdminCaller) -> QueueStatsResponse:
    stats = await service.stats()
    return QueueStatsResponse(
        capacity=stats.capacity,
        active=stats.active,
        waiting=stats.waiting,
        average_release_interval_seconds=stats.average_release_interval_seconds,
    )


@router.get("/metrics", response_class=PlainTextResponse)
async def get_queue_metrics(service: QueueServiceDep) -> PlainTextResponse:
    exporter = PrometheusExporter(service.metrics)
    return PlainTextResponse(exporter.export(), media_type=PrometheusExporter.content_type)
