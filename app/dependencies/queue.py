from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request

from app.core.config import Settings, get_settings
from app.queue.errors import (
    QueueError,
    QueueNotActiveError,
    TicketExpiredError,
    TicketNotFoundError,
)
from app.queue.models import QueueStatus, Ticket
from app.queue.service import QueueService

QUEUE_TOKEN_COOKIE = "queueToken"
QUEUE_TOKEN_HEADER = "X-Queue-Token"
QUEUE_TOKEN_INVALID = "QUEUE_TOKEN_INVALID"

_STATUS_CODES: dict[type[QueueError], int] = {
    TicketNotFoundError: 404,
    TicketExpiredError: 410,
    QueueNotActiveError: 403,
}


async def get_queue_service(request: Request) -> QueueService:
    service = getattr(request.app.state, "queue_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Queue service is not configured")
    return service


QueueServiceDep = Annotated[QueueService, Depends(get_queue_service)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def read_queue_token(request: Request) -> str | None:
    """Return the queue token from the cookie, falling back to the header."""

    token = request.cookies.get(QUEUE_TOKEN_COOKIE) or request.headers.get(QUEUE_TOKEN_HEADER)
    if token is None or not token.strip():
        return None
    return token.strip()


def status_payload(status: QueueStatus) -> dict[str, Any]:
    return {
        "active": status.active,
        "position": status.position,
        "estimatedWaitSeconds": status.estimated_wait_seconds,
    }


def missing_token_error() -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={"code": QUEUE_TOKEN_INVALID, "message": "Queue token is missing. Join the queue again."},
    )


def queue_http_error(exc: QueueError) -> HTTPException:
    """Translate a client-facing queue error; every one of them means rejoin."""

    detail: dict[str, Any] = {"code": exc.code, "message": str(exc)}
    if isinstance(exc, QueueNotActiveError):
        detail["queueStatus"] = status_payload(exc.status)
    return HTTPException(status_code=_STATUS_CODES.get(type(exc), 400), detail=detail)


async def require_active_queue_token(
    request: Request,
    service: QueueServiceDep,
    settings: SettingsDep,
) -> Ticket | None:
    """Gate for registration endpoints: only admitted callers pass.

    Returns ``None`` when the queue is switched off.
    """

    if not settings.queue_enabled:
        return None

    token = read_queue_token(request)
    if token is None:
        raise missing_token_error()
    try:
        return await service.validate_active(token)
    except (TicketNotFoundError, TicketExpiredError, QueueNotActiveError) as exc:
        raise queue_http_error(exc) from exc


ActiveTicket = Annotated[Ticket | None, Depends(require_active_queue_token)]
