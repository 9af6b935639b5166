"""Public queue operations orchestrated under one lock."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from app.metrics import MetricsRegistry, metrics_registry as default_metrics_registry

from .admission import AdmissionController
from .errors import (
    InvalidTransitionError,
    QueueNotActiveError,
    TicketExpiredError,
    TicketNotFoundError,
)
from .estimator import ReleaseCadenceEstimator
from .models import JoinResult, QueueConfig, QueueStats, QueueStatus, Ticket
from .sequencer import Sequencer
from .state import TicketState
from .store import TicketStore, mask_token
from .sweeper import ExpirySweeper, SweepResult

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QueueService:
    """High level orchestration for the admission queue.

    Every store mutation and every read feeding a promotion decision happens
    while holding ``self._lock``, so the active count is never observed stale
    relative to a concurrent promotion or expiry.
    """

    def __init__(
        self,
        config: QueueConfig | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
        sequencer: Sequencer | None = None,
        store: TicketStore | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self.config = config or QueueConfig()
        self._clock = clock
        self.sequencer = sequencer or Sequencer()
        self.store = store or TicketStore(
            self.sequencer,
            clock=clock,
            retention_window=self.config.retention_window,
        )
        self.controller = AdmissionController(
            self.store,
            capacity=self.config.capacity,
            batch_size=self.config.promotion_batch_size,
        )
        self.sweeper = ExpirySweeper(self.store, self.config, clock=clock)
        self.estimator = ReleaseCadenceEstimator(
            history_size=self.config.release_history_size,
            default_interval_seconds=self.config.default_estimated_wait_seconds,
        )
        self.metrics = metrics or default_metrics_registry
        self._lock = asyncio.Lock()

    async def join(self, identity: str) -> JoinResult:
        async with self._lock:
            existing = self.store.find_by_identity(identity)
            if existing is not None:
                ticket = self.store.touch(existing.token)
                logger.debug("Identity already queued; returning ticket %s", mask_token(ticket.token))
            else:
                ticket = self.store.create(identity)
                self.metrics.counter("queue_joins_total").inc()
                logger.info("Ticket %s joined with sequence %d", mask_token(ticket.token), ticket.sequence)
                self._promote_locked()
            return JoinResult(
                token=ticket.token,
                queue_number=ticket.sequence,
                status=self._status_locked(ticket.token),
            )

    async def status(self, token: str) -> QueueStatus:
        async with self._lock:
            ticket = self.store.get(token)
            if ticket.state is TicketState.EXPIRED:
                raise TicketExpiredError(f"Queue token {mask_token(token)} has expired")
            self.store.touch(token)
            return self._status_locked(token)

    async def validate_active(self, token: str) -> Ticket:
        """Admission gate for protected endpoints.

        Refreshes ``last_seen_at`` so an admitted user stays active while they
        keep working.
        """

        async with self._lock:
            ticket = self.store.get(token)
            if ticket.state is TicketState.EXPIRED:
                raise TicketExpiredError(f"Queue token {mask_token(token)} has expired")
            ticket = self.store.touch(token)
            if ticket.state is not TicketState.ACTIVE:
                raise QueueNotActiveError(self._status_locked(token))
            return ticket

    async def release(self, token: str) -> bool:
        """End a ticket's session. Unknown or expired tokens are a no-op."""

        async with self._lock:
            try:
                ticket = self.store.get(token)
            except TicketNotFoundError:
                return False
            if ticket.state is TicketState.EXPIRED:
                return False

            self._transition(token, TicketState.EXPIRED)
            if ticket.state is TicketState.ACTIVE:
                self.estimator.record(self._clock())
                self.metrics.counter("queue_releases_total").inc()
                self.metrics.counter("queue_expirations_total", label_names=("reason",)).inc(
                    labels={"reason": "released"}
                )
                logger.info("Released active ticket %s", mask_token(token))
                self._promote_locked()
            else:
                self.metrics.counter("queue_expirations_total", label_names=("reason",)).inc(
                    labels={"reason": "withdrawn"}
                )
                logger.info("Withdrew waiting ticket %s", mask_token(token))
                self._record_gauges_locked()
            return True

    async def promote(self) -> list[Ticket]:
        async with self._lock:
            return self._promote_locked()

    async def sweep(self) -> SweepResult:
        async with self._lock:
            try:
                result = self.sweeper.sweep()
            except InvalidTransitionError:
                logger.exception("Sweep hit an invalid ticket transition")
                raise

            expirations = self.metrics.counter("queue_expirations_total", label_names=("reason",))
            if result.expired_waiting:
                expirations.inc(len(result.expired_waiting), labels={"reason": "waiting_idle"})
            if result.expired_active:
                expirations.inc(len(result.expired_active), labels={"reason": "active_timeout"})
                for lapsed_at in sorted(self.sweeper.lapsed_at(ticket) for ticket in result.expired_active):
                    self.estimator.record(lapsed_at)
                self._promote_locked()
            self._record_gauges_locked()
            return result

    async def reset(self) -> dict[str, int]:
        async with self._lock:
            active = self.store.count_active()
            waiting = self.store.count_waiting()
            removed = self.store.clear()
            self.estimator.reset()
            self._record_gauges_locked()
        logger.warning("Queue reset: removed %d ticket(s)", removed)
        return {"removed": removed, "active": active, "waiting": waiting}

    async def stats(self) -> QueueStats:
        async with self._lock:
            return QueueStats(
                capacity=self.config.capacity,
                active=self.store.count_active(),
                waiting=self.store.count_waiting(),
                average_release_interval_seconds=self.estimator.average_interval(),
            )

    def _promote_locked(self) -> list[Ticket]:
        try:
            promoted = self.controller.promote()
        except InvalidTransitionError:
            logger.exception("Promotion hit an invalid ticket transition")
            raise
        if promoted:
            self.metrics.counter("queue_promotions_total").inc(len(promoted))
        self._record_gauges_locked()
        return promoted

    def _record_gauges_locked(self) -> None:
        self.metrics.gauge("queue_active_tickets").set(self.store.count_active())
        self.metrics.gauge("queue_waiting_tickets").set(self.store.count_waiting())

    def _transition(self, token: str, new_state: TicketState) -> Ticket:
        try:
            return self.store.transition(token, new_state)
        except InvalidTransitionError:
            logger.exception("Invalid transition requested for ticket %s", mask_token(token))
            raise

    def _status_locked(self, token: str) -> QueueStatus:
        ticket = self.store.get(token)
        position = self.store.waiting_position(token)
        return QueueStatus(
            active=ticket.state is TicketState.ACTIVE,
            position=position,
            estimated_wait_seconds=self.estimator.estimate_wait(position, self._clock()),
        )
