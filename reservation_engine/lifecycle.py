"""
Reservation status changes

Checks who may move a reservation where, then applies the move in memory.
The allowed moves themselves live in `reservation_engine.status`.
"""

from datetime import datetime

from reservation_engine.authorization import authorize_transition, is_stakeholder
from reservation_engine.errors import Forbidden, InvalidTransition
from reservation_engine.events import ReservationTransitioned
from reservation_engine.intervals import utcnow
from reservation_engine.status import BLOCKING_STATUSES, DELETABLE_STATUSES, TRANSITIONS, Status

__all__ = [
    "BLOCKING_STATUSES",
    "DELETABLE_STATUSES",
    "TRANSITIONS",
    "Status",
    "can_transition",
    "check_transition",
    "check_change",
    "transition",
]


def can_transition(current: Status, target: Status) -> bool:
    return target in TRANSITIONS[current]


def check_transition(current: Status, target: Status) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(f"Cannot move a reservation from {current.value} to {target.value}.")


def check_change(current: Status, target: Status, actor, relationship) -> None:
    """Validate a requested status change without touching anything.

    A stranger is refused before anything about the reservation is revealed.
    For stakeholders a terminal reservation reports InvalidTransition whatever
    the target, then the authorization matrix runs, then the transition table.
    """
    if not is_stakeholder(actor, relationship):
        raise Forbidden("You are not allowed to change this reservation.")
    if current.is_terminal:
        check_transition(current, target)
    authorize_transition(actor, relationship, target)
    check_transition(current, target)


def transition(reservation, target: Status, actor, relationship, reason: str | None = None,
               now: datetime | None = None) -> ReservationTransitioned:
    """Apply a status change to `reservation` in memory and describe it.

    Raises Forbidden or InvalidTransition before any attribute is modified.
    """
    current = Status(reservation.status)
    check_change(current, target, actor, relationship)

    reservation.status = target
    reservation.updated_at = now or utcnow()

    return ReservationTransitioned(
        reservation_id=reservation.id,
        from_status=current,
        to_status=target,
        actor=actor,
        reason=reason,
        total_price=reservation.total_price,
    )
