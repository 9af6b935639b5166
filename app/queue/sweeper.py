from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from .models import QueueConfig, Ticket
from .state import TicketState
from .store import TicketStore, mask_token

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SweepResult:
    """Tickets expired and purged by one sweep."""

    expired_waiting: list[Ticket] = field(default_factory=list)
    expired_active: list[Ticket] = field(default_factory=list)
    purged: int = 0

    @property
    def freed_slots(self) -> int:
        return len(self.expired_active)


class ExpirySweeper:
    """Evict idle or over-lifetime tickets and purge retained expired ones.

    Idle timeouts are the only cancellation mechanism: a client that stops
    polling is reclaimed here. Callers must hold the queue lock.
    """

    def __init__(self, store: TicketStore, config: QueueConfig, *, clock: Callable[[], datetime]) -> None:
        self._store = store
        self._config = config
        self._clock = clock

    def sweep(self) -> SweepResult:
        now = self._clock()
        result = SweepResult()

        for ticket in self._store.list_waiting():
            if now - ticket.last_seen_at > self._config.max_idle_wait:
                result.expired_waiting.append(self._store.transition(ticket.token, TicketState.EXPIRED))
                logger.info("Expired idle waiting ticket %s (sequence %d)", mask_token(ticket.token), ticket.sequence)

        for ticket in self._store.list_active():
            reason = self._active_expiry_reason(ticket, now)
            if reason is None:
                continue
            result.expired_active.append(self._store.transition(ticket.token, TicketState.EXPIRED))
            logger.info("Expired active ticket %s (%s)", mask_token(ticket.token), reason)

        result.purged = self._store.purge_retained()
        if result.purged:
            logger.debug("Purged %d retained ticket(s)", result.purged)
        return result

    def lapsed_at(self, ticket: Ticket) -> datetime:
        """Instant an active ticket crossed its idle or lifetime limit."""

        deadline = ticket.last_seen_at + self._config.max_idle_active
        if ticket.activated_at is not None:
            deadline = min(deadline, ticket.activated_at + self._config.max_active_lifetime)
        return deadline

    def _active_expiry_reason(self, ticket: Ticket, now: datetime) -> str | None:
        if now - ticket.last_seen_at > self._config.max_idle_active:
            return "idle"
        if ticket.activated_at is not None and now - ticket.activated_at > self._config.max_active_lifetime:
            return "lifetime"
        return None
