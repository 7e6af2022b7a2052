"""
Notification glue: turns lifecycle events into messages for the requester
and the room's organization. Rendering and delivery belong to the `send`
callable; the default one only logs.
"""

import logging
from typing import Callable

from reservation_engine.events import PaymentCompleted, ReservationCreated, ReservationTransitioned
from reservation_engine.status import Status

logger = logging.getLogger(__name__)

Sender = Callable[[str, str, dict], None]


def log_sender(recipient: str, template: str, context: dict) -> None:
    logger.info(f"[notify] {template} -> {recipient} {context}")


class Notifier:

    def __init__(self, send: Sender | None = None):
        self.send = send or log_sender

    def register(self, bus):
        bus.subscribe(ReservationCreated, self.on_reservation_created)
        bus.subscribe(ReservationTransitioned, self.on_reservation_transitioned)
        bus.subscribe(PaymentCompleted, self.on_payment_completed)
        return self

    def on_reservation_created(self, event: ReservationCreated):
        reservation = event.reservation
        context = {
            "reservation_id": reservation.id,
            "room_id": reservation.room_id,
            "start_date": reservation.start_date,
            "end_date": reservation.end_date,
            "total_price": reservation.total_price,
            "message": reservation.message,
        }
        if event.requester_email:
            self.send(event.requester_email, "reservation_created", context)
        if event.owner_email:
            self.send(event.owner_email, "reservation_requested", context)

    def on_reservation_transitioned(self, event: ReservationTransitioned):
        if not event.requester_email:
            return
        context = {"reservation_id": event.reservation_id, "total_price": event.total_price}
        if event.to_status is Status.CONFIRMED:
            self.send(event.requester_email, "reservation_confirmed", context)
        elif event.to_status is Status.CANCELLED:
            context["reason"] = event.reason
            self.send(event.requester_email, "reservation_cancelled", context)

    def on_payment_completed(self, event: PaymentCompleted):
        if event.requester_email:
            self.send(event.requester_email, "payment_completed", {
                "reservation_id": event.reservation_id,
                "amount": event.amount,
            })
