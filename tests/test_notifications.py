import logging

import pytest

from conftest import at
from reservation_engine.events import ReservationTransitioned
from reservation_engine.intervals import Interval
from reservation_engine.lifecycle import Status
from reservation_engine.messagebus import MessageBus
from reservation_engine.notifications import Notifier


@pytest.fixture
def outbox(bus):
    sent = []
    Notifier(send=lambda to, template, context: sent.append((to, template, context))).register(bus)
    return sent


def test_creation_notifies_requester_and_owner(service, room, requester, outbox):
    service.create_reservation(room.id, requester.id, Interval(at(10), at(11)), "Réunion de quartier")

    assert [(to, template) for to, template, _ in outbox] == [
        ("u-1@example.com", "reservation_created"),
        ("mairie@example.com", "reservation_requested"),
    ]
    assert outbox[1][2]["message"] == "Réunion de quartier"


def test_confirm_and_cancel_notify_requester(service, room, requester, owner, outbox):
    reservation, _ = service.create_reservation(room.id, requester.id, Interval(at(10), at(11)))
    outbox.clear()

    service.change_status(reservation.id, Status.CONFIRMED, owner)
    service.change_status(reservation.id, Status.CANCELLED, owner, reason="Travaux")

    assert [template for _, template, _ in outbox] == ["reservation_confirmed", "reservation_cancelled"]
    assert outbox[1][2]["reason"] == "Travaux"


def test_completion_sends_nothing(service, room, requester, owner, outbox):
    reservation, _ = service.create_reservation(room.id, requester.id, Interval(at(10), at(11)))
    service.change_status(reservation.id, Status.CONFIRMED, owner)
    outbox.clear()

    service.change_status(reservation.id, Status.COMPLETED, owner)
    assert outbox == []


def test_payment_completion_notifies_requester(service, payment_service, room, requester, owner, outbox):
    reservation, _ = service.create_reservation(room.id, requester.id, Interval(at(10), at(11)))
    service.change_status(reservation.id, Status.CONFIRMED, owner)
    payment_service.open_payment(reservation.id, requester)
    outbox.clear()

    payment_service.record_completed(reservation.id)
    assert [(to, template) for to, template, _ in outbox] == [("u-1@example.com", "payment_completed")]


def test_failing_sender_is_logged_and_state_is_kept(service, bus, room, requester, owner, caplog):
    def smtp_down(to, template, context):
        raise ConnectionError("smtp down")

    Notifier(send=smtp_down).register(bus)
    reservation, _ = service.create_reservation(room.id, requester.id, Interval(at(10), at(11)))

    with caplog.at_level(logging.ERROR, logger="reservation_engine.messagebus"):
        confirmed, _ = service.change_status(reservation.id, Status.CONFIRMED, owner)

    assert confirmed.status is Status.CONFIRMED
    assert "smtp down" in caplog.text
    assert service.get_reservation(reservation.id, owner).status is Status.CONFIRMED


def test_bus_calls_handlers_in_order():
    bus = MessageBus()
    calls = []
    bus.subscribe(ReservationTransitioned, lambda e: calls.append("first"))
    bus.subscribe(ReservationTransitioned, lambda e: calls.append("second"))

    bus.publish(ReservationTransitioned(
        reservation_id="res-1", from_status=Status.PENDING, to_status=Status.CANCELLED, actor=None,
    ))
    assert calls == ["first", "second"]
