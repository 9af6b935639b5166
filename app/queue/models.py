from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from .state import TicketState

if TYPE_CHECKING:  # pragma: no cover
    from app.core.config import Settings


@dataclass(slots=True)
class Ticket:
    """Admission record bound to one caller identity."""

    token: str
    identity: str
    sequence: int
    state: TicketState
    created_at: datetime
    last_seen_at: datetime
    activated_at: datetime | None = None
    expired_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class QueueStatus:
    """Client-visible view of a ticket."""

    active: bool
    position: int
    estimated_wait_seconds: int


@dataclass(slots=True, frozen=True)
class JoinResult:
    """Outcome of a join call."""

    token: str
    queue_number: int
    status: QueueStatus

    @property
    def active(self) -> bool:
        return self.status.active

    @property
    def position(self) -> int:
        return self.status.position


@dataclass(slots=True, frozen=True)
class QueueStats:
    """Point-in-time snapshot of the queue."""

    capacity: int
    active: int
    waiting: int
    average_release_interval_seconds: float


@dataclass(slots=True, frozen=True)
class QueueConfig:
    """Tunables of the admission engine."""

    capacity: int = 100
    max_idle_wait: timedelta = timedelta(seconds=30)
    max_idle_active: timedelta = timedelta(seconds=600)
    max_active_lifetime: timedelta = timedelta(seconds=900)
    retention_window: timedelta = timedelta(seconds=60)
    promotion_tick_seconds: float = 1.0
    sweep_interval_seconds: float = 5.0
    default_estimated_wait_seconds: float = 10.0
    release_history_size: int = 50
    promotion_batch_size: int = 0

    def __post_init__(self) -> None:
        if self.capacity < 0:
            raise ValueError("capacity cannot be negative")
        if self.promotion_tick_seconds <= 0 or self.sweep_interval_seconds <= 0:
            raise ValueError("scheduler intervals must be positive")
        if self.release_history_size < 2:
            raise ValueError("release_history_size must be at least 2")
        if self.promotion_batch_size < 0:
            raise ValueError("promotion_batch_size cannot be negative")
        if self.default_estimated_wait_seconds < 0:
            raise ValueError("default_estimated_wait_seconds cannot be negative")
        for name in ("max_idle_wait", "max_idle_active", "max_active_lifetime", "retention_window"):
            if getattr(self, name) < timedelta(0):
                raise ValueError(f"{name} cannot be negative")

    @classmethod
    def from_settings(cls, settings: Settings) -> QueueConfig:
        return cls(
            capacity=settings.queue_capacity,
            max_idle_wait=timedelta(seconds=settings.queue_max_idle_wait_seconds),
            max_idle_active=timedelta(seconds=settings.queue_max_idle_active_seconds),
            max_active_lifetime=timedelta(seconds=settings.queue_max_active_lifetime_seconds),
            retention_window=timedelta(seconds=settings.queue_retention_window_seconds),
            promotion_tick_seconds=settings.queue_promotion_tick_seconds,
            sweep_interval_seconds=settings.queue_sweep_interval_seconds,
            default_estimated_wait_seconds=settings.queue_default_estimated_wait_seconds,
            release_history_size=settings.queue_release_history_size,
            promotion_batch_size=settings.queue_promotion_batch_size,
        )
