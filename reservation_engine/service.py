"""
Reservation Service

Use cases of the reservation engine. Each public method runs in its own
unit of work:

- create_reservation: locked conflict check + insert in one transaction
- change_status: state machine + authorization, written with compare-and-swap
- delete_reservation: requester-only removal of PENDING/CANCELLED reservations
- get_reservation / list_reservations: reads scoped by the actor's role
"""

import logging
from dataclasses import replace
from typing import Iterable
from uuid import uuid4

from reservation_engine.authorization import Actor, Relationship, Role, authorize_deletion, can_view
from reservation_engine.conflicts import find_conflicts
from reservation_engine.errors import (
    Conflict, Forbidden, InvalidFilter, InvalidInterval, InvalidState, InvalidTransition, NotFound,
    RoomUnavailable,
    SlotConflict,
)
from reservation_engine.events import ReservationCreated, ReservationTransitioned
from reservation_engine.intervals import Interval, utcnow
from reservation_engine.lifecycle import transition
from reservation_engine.models import PaymentStatus, Reservation
from reservation_engine.pricing import price
from reservation_engine.repository import ReservationRepository
from reservation_engine.status import DELETABLE_STATUSES, Status
from reservation_engine.uow import UnitOfWork

logger = logging.getLogger(__name__)

# one retry after a lost compare-and-swap, then Conflict
STATUS_WRITE_ATTEMPTS = 2


def parse_status(value) -> Status:
    if isinstance(value, Status):
        return value
    try:
        return Status(str(value).strip().upper())
    except ValueError:
        raise InvalidTransition(f"Unknown reservation status: {value!r}.") from None


def parse_status_filter(values: Iterable) -> list[Status]:
    wanted = []
    for value in values:
        try:
            wanted.append(value if isinstance(value, Status) else Status(str(value).strip().upper()))
        except ValueError:
            raise InvalidFilter(f"Unknown reservation status in filter: {value!r}.") from None
    return wanted


class ReservationService:

    def __init__(self, store, bus=None, clock=utcnow, reservation_repository=ReservationRepository):
        self.store = store
        self.bus = bus
        self.clock = clock
        self.reservation_repository = reservation_repository

    def _unit_of_work(self) -> UnitOfWork:
        return UnitOfWork(self.store, self.bus, reservation_repository=self.reservation_repository)

    def create_reservation(self, room_id: str, requester_id: str, interval: Interval,
                           message: str | None = None) -> tuple[Reservation, ReservationCreated]:
        """
        Store a PENDING reservation for `interval` on the room

        The room row is locked (SQLite: the database write lock) before the
        conflict check, so concurrent requests for the same room are checked
        and inserted one at a time.

        Raises: NotFound, RoomUnavailable, InvalidInterval, SlotConflict
        """
        now = self.clock()
        with self._unit_of_work() as uow:
            room = uow.rooms.get(room_id, lock=True)
            if room is None:
                raise NotFound(f"Room {room_id} not found.")
            if not room.available:
                raise RoomUnavailable(f"Room {room.name} is not open for reservations.")

            if not interval.starts_after(now):
                raise InvalidInterval("The start date must be in the future.")

            requester = uow.users.get(requester_id)
            if requester is None:
                raise NotFound(f"User {requester_id} not found.")

            conflicts = find_conflicts(uow.reservations, room.id, interval)
            if conflicts:
                raise SlotConflict(conflicting_ids=[r.id for r in conflicts])

            reservation = Reservation(
                id=str(uuid4()),
                room_id=room.id,
                requester_id=requester.id,
                start_date=interval.start,
                end_date=interval.end,
                status=Status.PENDING,
                total_price=price(interval, room.hourly_rate),
                message=message or None,
                created_at=now,
                updated_at=now,
            )
            uow.reservations.add(reservation)

            event = ReservationCreated(
                reservation=reservation,
                requester_email=requester.email,
                owner_email=room.organization.email if room.organization else None,
            )
            uow.collect(event)

        logger.info(
            f"Reservation {reservation.id} created on room {room_id} "
            f"by {requester_id} for {interval} ({reservation.total_price})"
        )
        return reservation, event

    def has_conflict(self, room_id: str, interval: Interval, exclude_reservation_id: str | None = None) -> bool:
        """Raises NotFound for an unknown room rather than reporting it free."""
        with self._unit_of_work() as uow:
            if uow.rooms.get(room_id) is None:
                raise NotFound(f"Room {room_id} not found.")
            return bool(find_conflicts(uow.reservations, room_id, interval, exclude_reservation_id))

    def change_status(self, reservation_id: str, target_status, actor: Actor,
                      reason: str | None = None) -> tuple[Reservation, ReservationTransitioned]:
        """
        Move a reservation to `target_status` on behalf of `actor`

        The new status is written only if the stored one is unchanged since it
        was read. After a lost race the whole check runs once more against a
        fresh read.

        Raises: NotFound, Forbidden, InvalidTransition, Conflict
        """
        target = parse_status(target_status)

        for attempt in range(1, STATUS_WRITE_ATTEMPTS + 1):
            with self._unit_of_work() as uow:
                reservation = uow.reservations.load_detached(reservation_id)
                if reservation is None:
                    raise NotFound(f"Reservation {reservation_id} not found.")

                relationship = Relationship.between(
                    actor, reservation.requester_id, reservation.room.owner_user_id,
                )
                expected = Status(reservation.status)
                event = transition(reservation, target, actor, relationship, reason=reason, now=self.clock())

                if uow.reservations.compare_and_set_status(reservation.id, expected, target, reservation.updated_at):
                    event = replace(event, requester_email=reservation.requester.email)
                    uow.collect(event)
                    logger.info(
                        f"Reservation {reservation.id}: {expected.value} -> {target.value} by {actor}"
                    )
                    return reservation, event

            logger.warning(
                f"Reservation {reservation_id} changed while moving to {target.value} "
                f"(attempt {attempt}/{STATUS_WRITE_ATTEMPTS})"
            )

        raise Conflict(f"Reservation {reservation_id} was modified concurrently.")

    def delete_reservation(self, reservation_id: str, actor: Actor) -> None:
        """
        Remove a reservation for good

        Only its requester may do so, only while PENDING or CANCELLED, and
        never once a payment for it has completed.

        Raises: NotFound, Forbidden, InvalidState
        """
        with self._unit_of_work() as uow:
            reservation = uow.reservations.get(reservation_id)
            if reservation is None:
                raise NotFound(f"Reservation {reservation_id} not found.")

            authorize_deletion(Relationship.between(actor, reservation.requester_id, None))

            if Status(reservation.status) not in DELETABLE_STATUSES:
                raise InvalidState("Only pending or cancelled reservations can be deleted.")

            payment = uow.payments.for_reservation(reservation.id)
            if payment is not None and payment.status == PaymentStatus.COMPLETED:
                raise InvalidState("A paid reservation cannot be deleted.")

            uow.reservations.delete(reservation)

        logger.info(f"Reservation {reservation_id} deleted by {actor}")

    def get_reservation(self, reservation_id: str, actor: Actor) -> Reservation:
        with self._unit_of_work() as uow:
            reservation = uow.reservations.get(reservation_id)
            if reservation is None:
                raise NotFound(f"Reservation {reservation_id} not found.")
            relationship = Relationship.between(actor, reservation.requester_id, reservation.room.owner_user_id)
            if not can_view(actor, relationship):
                raise Forbidden("You are not allowed to see this reservation.")
            # payment is shown alongside the reservation
            reservation.payment
            return reservation

    def list_reservations(self, actor: Actor, room_id: str | None = None,
                          statuses: Iterable | None = None) -> list[Reservation]:
        """Newest first. Requesters see their own, room owners those of their rooms."""
        wanted = parse_status_filter(statuses) if statuses else None
        with self._unit_of_work() as uow:
            if actor.role is Role.ADMIN:
                return uow.reservations.find(room_id=room_id, statuses=wanted)
            if actor.role is Role.ROOM_OWNER:
                return uow.reservations.find(owner_user_id=actor.id, room_id=room_id, statuses=wanted)
            return uow.reservations.find(requester_id=actor.id, room_id=room_id, statuses=wanted)
