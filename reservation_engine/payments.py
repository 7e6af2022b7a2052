"""
Payment bookkeeping on the engine side.

The gateway (intent creation, capture, webhooks) is an external collaborator.
The engine only keeps one payment row per reservation so it can check that a
payment is opened for a CONFIRMED reservation at its stored price, and so a
paid reservation can no longer be deleted.
"""

import logging
from uuid import uuid4

from reservation_engine.authorization import Actor, Relationship
from reservation_engine.errors import Forbidden, InvalidState, NotFound
from reservation_engine.events import PaymentCompleted
from reservation_engine.intervals import utcnow
from reservation_engine.models import Payment, PaymentStatus
from reservation_engine.status import Status
from reservation_engine.uow import UnitOfWork

logger = logging.getLogger(__name__)


class PaymentService:

    def __init__(self, store, bus=None, clock=utcnow):
        self.store = store
        self.bus = bus
        self.clock = clock

    def open_payment(self, reservation_id: str, actor: Actor) -> Payment:
        """Create (or reopen) the PENDING payment for a confirmed reservation."""
        now = self.clock()
        with UnitOfWork(self.store, self.bus) as uow:
            reservation = uow.reservations.get(reservation_id)
            if reservation is None:
                raise NotFound(f"Reservation {reservation_id} not found.")
            if not Relationship.between(actor, reservation.requester_id, None).is_requester:
                raise Forbidden("Only the requester can pay for a reservation.")
            if Status(reservation.status) is not Status.CONFIRMED:
                raise InvalidState("The reservation must be confirmed before payment.")

            payment = uow.payments.for_reservation(reservation.id)
            if payment is None:
                payment = uow.payments.add(Payment(
                    id=str(uuid4()),
                    reservation_id=reservation.id,
                    amount=reservation.total_price,
                    status=PaymentStatus.PENDING,
                    created_at=now,
                    updated_at=now,
                ))
            elif payment.status == PaymentStatus.COMPLETED:
                raise InvalidState("This reservation has already been paid.")
            else:
                payment.amount = reservation.total_price
                payment.status = PaymentStatus.PENDING
                payment.updated_at = now

        logger.info(f"Payment {payment.id} opened for reservation {reservation_id} ({payment.amount})")
        return payment

    def record_completed(self, reservation_id: str,
                         external_reference: str | None = None) -> tuple[Payment, PaymentCompleted | None]:
        """
        Mark the reservation's payment as COMPLETED

        Reporting the same completion twice is harmless: the second call
        returns the payment and no event.
        """
        with UnitOfWork(self.store, self.bus) as uow:
            payment = uow.payments.for_reservation(reservation_id)
            if payment is None:
                raise NotFound(f"No payment for reservation {reservation_id}.")
            if payment.status == PaymentStatus.COMPLETED:
                return payment, None

            payment.status = PaymentStatus.COMPLETED
            payment.external_reference = external_reference or payment.external_reference
            payment.updated_at = self.clock()

            reservation = uow.reservations.get(reservation_id)
            event = PaymentCompleted(
                reservation_id=reservation_id,
                payment_id=payment.id,
                amount=payment.amount,
                requester_email=reservation.requester.email if reservation else None,
            )
            uow.collect(event)

        logger.info(f"Payment {payment.id} completed for reservation {reservation_id}")
        return payment, event

    def record_failed(self, reservation_id: str, external_reference: str | None = None) -> Payment:
        with UnitOfWork(self.store, self.bus) as uow:
            payment = uow.payments.for_reservation(reservation_id)
            if payment is None:
                raise NotFound(f"No payment for reservation {reservation_id}.")
            if payment.status == PaymentStatus.COMPLETED:
                raise InvalidState("A completed payment cannot be marked as failed.")
            payment.status = PaymentStatus.FAILED
            payment.external_reference = external_reference or payment.external_reference
            payment.updated_at = self.clock()

        logger.warning(f"Payment {payment.id} failed for reservation {reservation_id}")
        return payment
