from datetime import timedelta

import pytest

from app.queue.admission import AdmissionController
from app.queue.sequencer import Sequencer
from app.queue.state import TicketState
from app.queue.store import TicketStore


@pytest.fixture
def store(clock):
    return TicketStore(Sequencer(), clock=clock, retention_window=timedelta(seconds=60))


def test_promote_fills_free_slots_in_fifo_order(store):
    tokens = [store.create(f"student-{index}").token for index in range(5)]
    controller = AdmissionController(store, capacity=3)

    promoted = controller.promote()

    assert [ticket.token for ticket in promoted] == tokens[:3]
    assert all(ticket.state == TicketState.ACTIVE for ticket in promoted)
    assert store.count_active() == 3
    assert controller.free_slots() == 0


def test_promote_does_nothing_when_window_is_full(store):
    for index in range(3):
        store.create(f"student-{index}")
    controller = AdmissionController(store, capacity=2)
    controller.promote()

    assert controller.promote() == []
    assert store.count_active() == 2
    assert store.count_waiting() == 1


def test_promote_respects_batch_size(store):
    for index in range(5):
        store.create(f"student-{index}")
    controller = AdmissionController(store, capacity=5, batch_size=2)

    assert len(controller.promote()) == 2
    assert len(controller.promote()) == 2
    assert len(controller.promote()) == 1
    assert store.count_active() == 5


def test_zero_capacity_never_promotes(store):
    store.create("student-a")
    controller = AdmissionController(store, capacity=0)

    assert controller.promote() == []
    assert store.count_waiting() == 1


def test_released_slot_goes_to_longest_waiting_ticket(store):
    first = store.create("student-a")
    second = store.create("student-b")
    third = store.create("student-c")
    controller = AdmissionController(store, capacity=1)
    controller.promote()

    store.transition(first.token, TicketState.EXPIRED)
    promoted = controller.promote()

    assert [ticket.token for ticket in promoted] == [second.token]
    assert store.waiting_position(third.token) == 1
