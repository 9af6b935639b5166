from __future__ import annotations

import logging

from .models import Ticket
from .state import TicketState
from .store import TicketStore

logger = logging.getLogger(__name__)


class AdmissionController:
    """Promote waiting tickets into free active slots in strict FIFO order.

    Callers must hold the queue lock: the active count read here and the
    promotions that follow have to be one atomic step.

    Each pass sorts the whole wait-line even though only the first ``free``
    tickets are promoted. That is O(w log w) per tick for ``w`` waiting
    tickets, acceptable for a single registration window.
    """

    def __init__(self, store: TicketStore, *, capacity: int, batch_size: int = 0) -> None:
        self._store = store
        self.capacity = capacity
        self.batch_size = batch_size

    def free_slots(self) -> int:
        return self.capacity - self._store.count_active()

    def promote(self) -> list[Ticket]:
        free = self.free_slots()
        if free <= 0:
            logger.debug("Active window full (capacity=%d)", self.capacity)
            return []
        if self.batch_size:
            free = min(free, self.batch_size)

        candidates = self._store.list_waiting()[:free]
        if not candidates:
            return []

        promoted = [self._store.transition(ticket.token, TicketState.ACTIVE) for ticket in candidates]
        logger.info(
            "Promoted %d ticket(s) up to sequence %d (active %d/%d)",
            len(promoted),
            promoted[-1].sequence,
            self._store.count_active(),
            self.capacity,
        )
        return promoted
