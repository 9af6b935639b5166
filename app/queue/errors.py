"""Error taxonomy for the admission queue.

Every client-facing error is terminal for the token it names: the only
recovery is a fresh join.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .models import QueueStatus, Ticket


class QueueError(RuntimeError):
    """Base error for queue issues."""

    code = "QUEUE_ERROR"


class TicketNotFoundError(QueueError):
    """Raised when a token is unknown or its ticket has been purged."""

    code = "QUEUE_TOKEN_NOT_FOUND"


class TicketExpiredError(QueueError):
    """Raised when a token is recognised but its ticket has expired."""

    code = "QUEUE_TOKEN_EXPIRED"


class AlreadyQueuedError(QueueError):
    """Raised by the store when an identity already holds a live ticket."""

    code = "QUEUE_ALREADY_QUEUED"

    def __init__(self, ticket: Ticket) -> None:
        super().__init__("Identity already holds a queue ticket")
        self.ticket = ticket


class InvalidTransitionError(QueueError):
    """Raised when a ticket move violates the lifecycle order."""

    code = "QUEUE_INVALID_TRANSITION"


class QueueNotActiveError(QueueError):
    """Raised by the admission gate for a ticket that is still waiting."""

    code = "QUEUE_NOT_ACTIVE"

    def __init__(self, status: QueueStatus) -> None:
        super().__init__("Queue ticket is not active yet")
        self.status = status
