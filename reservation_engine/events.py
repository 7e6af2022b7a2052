"""
Reservation lifecycle events

Value objects describing a completed state change. They are returned to the
caller and published on the message bus only after the transaction that
produced them has committed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from reservation_engine.intervals import utcnow

if TYPE_CHECKING:
    from reservation_engine.authorization import Actor
    from reservation_engine.status import Status
    from reservation_engine.models import Reservation


@dataclass(frozen=True)
class DomainEvent:
    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(default_factory=utcnow, kw_only=True)

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class ReservationCreated(DomainEvent):
    """
    A reservation request was stored in PENDING

    Triggers:
    - acknowledgement to the requester
    - new-request notice to the room's organization, when it has a contact address
    """
    reservation: Reservation
    requester_email: str | None = None
    owner_email: str | None = None

    @property
    def reservation_id(self) -> str:
        return self.reservation.id

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "reservation_id": self.reservation.id,
            "room_id": self.reservation.room_id,
            "requester_id": self.reservation.requester_id,
            "start_date": self.reservation.start_date.isoformat(),
            "end_date": self.reservation.end_date.isoformat(),
            "total_price": str(self.reservation.total_price),
        })
        return data


@dataclass(frozen=True)
class ReservationTransitioned(DomainEvent):
    """
    A reservation moved from one status to another

    Notification emails key off CONFIRMED and CANCELLED; the payment
    collaborator watches for CONFIRMED and uses total_price.
    """
    reservation_id: str
    from_status: Status
    to_status: Status
    actor: Actor
    reason: str | None = None
    total_price: Decimal | None = None
    requester_email: str | None = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "reservation_id": self.reservation_id,
            "from": self.from_status.value,
            "to": self.to_status.value,
            "actor": str(self.actor),
            "reason": self.reason,
        })
        return data


@dataclass(frozen=True)
class PaymentCompleted(DomainEvent):
    """The payment collaborator reported a successful capture."""
    reservation_id: str
    payment_id: str
    amount: Decimal
    requester_email: str | None = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            "reservation_id": self.reservation_id,
            "payment_id": self.payment_id,
            "amount": str(self.amount),
        })
        return data
