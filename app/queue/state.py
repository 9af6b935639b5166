from __future__ import annotations

from enum import Enum


class TicketState(str, Enum):
    """Supported states for a queue ticket's lifecycle."""

    WAITING = "waiting"
    ACTIVE = "active"
    EXPIRED = "expired"


class TicketStateMachine:
    """Validate queue ticket lifecycle transitions."""

    _TRANSITIONS: dict[TicketState, set[TicketState]] = {
        TicketState.WAITING: {TicketState.ACTIVE, TicketState.EXPIRED},
        TicketState.ACTIVE: {TicketState.EXPIRED},
        TicketState.EXPIRED: set(),
    }

    @classmethod
    def initial_state(cls) -> TicketState:
        return TicketState.WAITING

    @classmethod
    def can_transition(cls, current: TicketState, new: TicketState) -> bool:
        return new in cls._TRANSITIONS.get(current, set())

    @classmethod
    def is_terminal(cls, state: TicketState) -> bool:
        return not cls._TRANSITIONS.get(state)
