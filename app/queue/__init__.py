"""Admission-control waiting queue for the registration backend."""

from .errors import (
    AlreadyQueuedError,
    InvalidTransitionError,
    QueueError,
    QueueNotActiveError,
    TicketExpiredError,
    TicketNotFoundError,
)
from .models import JoinResult, QueueConfig, QueueStats, QueueStatus, Ticket
from .scheduler import PeriodicTask, QueueScheduler
from .sequencer import Sequencer
from .service import QueueService
from .state import TicketState, TicketStateMachine
from .store import TicketStore

__all__ = [
    "AlreadyQueuedError",
    "InvalidTransitionError",
    "JoinResult",
    "PeriodicTask",
    "QueueConfig",
    "QueueError",
    "QueueNotActiveError",
    "QueueScheduler",
    "QueueService",
    "QueueStats",
    "QueueStatus",
    "Sequencer",
    "Ticket",
    "TicketExpiredError",
    "TicketNotFoundError",
    "TicketState",
    "TicketStateMachine",
    "TicketStore",
]
