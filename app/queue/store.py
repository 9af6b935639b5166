from __future__ import annotations

import secrets
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable

from .errors import AlreadyQueuedError, InvalidTransitionError, TicketNotFoundError
from .models import Ticket
from .sequencer import Sequencer
from .state import TicketState, TicketStateMachine

Clock = Callable[[], datetime]


def generate_token() -> str:
    return secrets.token_urlsafe(24)


class TicketStore:
    """In-memory holder of queue tickets.

    Keeps ``token -> Ticket`` and ``identity -> token`` consistent, plus the
    per-state indexes used by promotion and sweeping. Not synchronised on its
    own: callers serialise access (see ``QueueService``). Returned tickets are
    copies; the store is the only mutator.
    """

    def __init__(
        self,
        sequencer: Sequencer,
        *,
        clock: Clock,
        retention_window: timedelta,
        token_factory: Callable[[], str] = generate_token,
    ) -> None:
        self._sequencer = sequencer
        self._clock = clock
        self._retention_window = retention_window
        self._token_factory = token_factory
        self._tickets: dict[str, Ticket] = {}
        self._by_identity: dict[str, str] = {}
        self._waiting: dict[str, Ticket] = {}
        self._active: dict[str, Ticket] = {}

    def create(self, identity: str) -> Ticket:
        existing_token = self._by_identity.get(identity)
        if existing_token is not None:
            raise AlreadyQueuedError(replace(self._tickets[existing_token]))

        token = self._token_factory()
        while token in self._tickets:
            token = self._token_factory()

        now = self._clock()
        ticket = Ticket(
            token=token,
            identity=identity,
            sequence=self._sequencer.next(),
            state=TicketStateMachine.initial_state(),
            created_at=now,
            last_seen_at=now,
        )
        self._tickets[token] = ticket
        self._by_identity[identity] = token
        self._waiting[token] = ticket
        return replace(ticket)

    def get(self, token: str) -> Ticket:
        ticket = self._tickets.get(token)
        if ticket is None or self._past_retention(ticket, self._clock()):
            raise TicketNotFoundError(f"Queue token {mask_token(token)} not found")
        return replace(ticket)

    def find_by_identity(self, identity: str) -> Ticket | None:
        token = self._by_identity.get(identity)
        if token is None:
            return None
        return replace(self._tickets[token])

    def transition(self, token: str, new_state: TicketState) -> Ticket:
        ticket = self._tickets.get(token)
        if ticket is None:
            raise TicketNotFoundError(f"Queue token {mask_token(token)} not found")
        if not TicketStateMachine.can_transition(ticket.state, new_state):
            raise InvalidTransitionError(
                f"Cannot transition ticket {mask_token(token)}: {ticket.state.value} -> {new_state.value}"
            )

        now = self._clock()
        self._waiting.pop(token, None)
        self._active.pop(token, None)
        ticket.state = new_state
        if new_state is TicketState.ACTIVE:
            ticket.activated_at = now
            self._active[token] = ticket
        elif new_state is TicketState.EXPIRED:
            ticket.expired_at = now
            if self._by_identity.get(ticket.identity) == token:
                del self._by_identity[ticket.identity]
        return replace(ticket)

    def touch(self, token: str) -> Ticket:
        ticket = self._tickets.get(token)
        if ticket is None:
            raise TicketNotFoundError(f"Queue token {mask_token(token)} not found")
        ticket.last_seen_at = self._clock()
        return replace(ticket)

    def list_waiting(self) -> list[Ticket]:
        """Return the wait-line ascending by sequence."""

        ordered = sorted(self._waiting.values(), key=lambda ticket: ticket.sequence)
        return [replace(ticket) for ticket in ordered]

    def waiting_position(self, token: str) -> int:
        """1-based rank of ``token`` in the wait-line, 0 when not waiting."""

        target = self._waiting.get(token)
        if target is None:
            return 0
        return 1 + sum(1 for ticket in self._waiting.values() if ticket.sequence < target.sequence)

    def list_active(self) -> list[Ticket]:
        return [replace(ticket) for ticket in self._active.values()]

    def count_active(self) -> int:
        return len(self._active)

    def count_waiting(self) -> int:
        return len(self._waiting)

    def purge_retained(self) -> int:
        """Purge expired tickets whose retention window has elapsed."""

        now = self._clock()
        stale = [token for token, ticket in self._tickets.items() if self._past_retention(ticket, now)]
        for token in stale:
            del self._tickets[token]
        return len(stale)

    def clear(self) -> int:
        removed = len(self._tickets)
        self._tickets.clear()
        self._by_identity.clear()
        self._waiting.clear()
        self._active.clear()
        return removed

    def __len__(self) -> int:
        return len(self._tickets)

    def _past_retention(self, ticket: Ticket, now: datetime) -> bool:
        if ticket.state is not TicketState.EXPIRED or ticket.expired_at is None:
            return False
        return now - ticket.expired_at >= self._retention_window


def mask_token(token: str) -> str:
    """Shorten a token for log output."""

    if len(token) <= 8:
        return "********"
    return token[:8] + "****"
