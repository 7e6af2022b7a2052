"""
Data access for the reservation engine.

Repositories wrap one SQLAlchemy session; transaction boundaries belong to
the unit of work that created them.
"""

from datetime import datetime
from typing import Iterable

from sqlalchemy import exists, select, update
from sqlalchemy.orm import Session, joinedload

from reservation_engine.intervals import Interval
from reservation_engine.status import BLOCKING_STATUSES, Status
from reservation_engine.models import Organization, Payment, Reservation, Room, User


class UserRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: str) -> User | None:
        return self.session.get(User, user_id)


class RoomRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, room_id: str, lock: bool = False) -> Room | None:
        stmt = select(Room).where(Room.id == room_id)
        if lock:
            # row lock held until commit; serializes creates for this room
            stmt = stmt.with_for_update()
        room = self.session.execute(stmt).scalars().first()
        if room is not None:
            # load the owner while the session is open
            room.organization
        return room

    def has_active_reservations_from(self, room_id: str, moment: datetime) -> bool:
        stmt = select(
            exists().where(
                Reservation.room_id == room_id,
                Reservation.status.in_(list(BLOCKING_STATUSES)),
                Reservation.start_date >= moment,
            )
        )
        return bool(self.session.execute(stmt).scalar())

    def delete(self, room: Room):
        self.session.delete(room)


class ReservationRepository:
    def __init__(self, session: Session):
        self.session = session

    def add(self, reservation: Reservation) -> Reservation:
        self.session.add(reservation)
        self.session.flush()
        return reservation

    def _with_context(self, stmt):
        return stmt.options(
            joinedload(Reservation.room).joinedload(Room.organization),
            joinedload(Reservation.requester),
        )

    def get(self, reservation_id: str) -> Reservation | None:
        stmt = self._with_context(select(Reservation).where(Reservation.id == reservation_id))
        return self.session.execute(stmt).scalars().first()

    def load_detached(self, reservation_id: str) -> Reservation | None:
        """Read a reservation with its room and requester, detached from the session.

        In-memory changes on the returned object are never flushed; writes go
        through compare_and_set_status.
        """
        reservation = self.get(reservation_id)
        if reservation is not None:
            self.session.expunge(reservation)
        return reservation

    def blocking_for_room(self, room_id: str, within: Interval | None = None,
                          exclude_reservation_id: str | None = None) -> list[Reservation]:
        stmt = select(Reservation).where(
            Reservation.room_id == room_id,
            Reservation.status.in_(list(BLOCKING_STATUSES)),
        )
        if within is not None:
            stmt = stmt.where(Reservation.start_date < within.end, Reservation.end_date > within.start)
        if exclude_reservation_id is not None:
            stmt = stmt.where(Reservation.id != exclude_reservation_id)
        stmt = stmt.order_by(Reservation.start_date)
        return list(self.session.execute(stmt).scalars())

    def compare_and_set_status(self, reservation_id: str, expected: Status, new: Status,
                               updated_at: datetime) -> bool:
        """Write `new` only if the stored status is still `expected`."""
        stmt = (
            update(Reservation)
            .where(Reservation.id == reservation_id, Reservation.status == expected)
            .values(status=new, updated_at=updated_at)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def find(self, requester_id: str | None = None, owner_user_id: str | None = None,
             room_id: str | None = None, statuses: Iterable[Status] | None = None) -> list[Reservation]:
        stmt = select(Reservation)
        if owner_user_id is not None:
            stmt = stmt.join(Reservation.room).join(Room.organization).where(Organization.user_id == owner_user_id)
        if requester_id is not None:
            stmt = stmt.where(Reservation.requester_id == requester_id)
        if room_id is not None:
            stmt = stmt.where(Reservation.room_id == room_id)
        if statuses:
            stmt = stmt.where(Reservation.status.in_(list(statuses)))
        stmt = stmt.order_by(Reservation.created_at.desc(), Reservation.start_date.desc())
        return list(self.session.execute(stmt).scalars())

    def delete(self, reservation: Reservation):
        self.session.delete(reservation)


class PaymentRepository:
    def __init__(self, session: Session):
        self.session = session

    def for_reservation(self, reservation_id: str) -> Payment | None:
        stmt = select(Payment).where(Payment.reservation_id == reservation_id)
        return self.session.execute(stmt).scalars().first()

    def add(self, payment: Payment) -> Payment:
        self.session.add(payment)
        self.session.flush()
        return payment
