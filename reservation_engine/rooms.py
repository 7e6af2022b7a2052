import logging
from decimal import Decimal, InvalidOperation

from reservation_engine.authorization import Actor, can_manage_room
from reservation_engine.errors import Forbidden, InvalidRoom, InvalidState, NotFound
from reservation_engine.intervals import utcnow
from reservation_engine.uow import UnitOfWork

logger = logging.getLogger(__name__)


def validate_hourly_rate(value) -> Decimal:
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidRoom(f"Hourly rate {value!r} is not a number.") from None
    if not rate.is_finite() or rate < 0:
        raise InvalidRoom("Hourly rate cannot be negative.")
    return rate


class RoomService:
    """Owner-side guards on rooms that reservations point to."""

    def __init__(self, store, bus=None, clock=utcnow):
        self.store = store
        self.bus = bus
        self.clock = clock

    def _load_managed(self, uow, room_id: str, actor: Actor):
        room = uow.rooms.get(room_id, lock=True)
        if room is None:
            raise NotFound(f"Room {room_id} not found.")
        if not can_manage_room(actor, room.owner_user_id):
            raise Forbidden("You can only manage your own rooms.")
        return room

    def update_room(self, room_id: str, actor: Actor, hourly_rate=None, available: bool | None = None):
        """Change rate and/or availability. Existing reservations keep their price."""
        with UnitOfWork(self.store, self.bus) as uow:
            room = self._load_managed(uow, room_id, actor)
            if hourly_rate is not None:
                room.hourly_rate = validate_hourly_rate(hourly_rate)
            if available is not None:
                room.available = bool(available)
        logger.info(f"Room {room_id} updated by {actor} (rate={room.hourly_rate}, available={room.available})")
        return room

    def delete_room(self, room_id: str, actor: Actor) -> None:
        """Refused while a PENDING/CONFIRMED reservation is still to come."""
        with UnitOfWork(self.store, self.bus) as uow:
            room = self._load_managed(uow, room_id, actor)
            if uow.rooms.has_active_reservations_from(room.id, self.clock()):
                raise InvalidState("This room still has upcoming reservations.")
            uow.rooms.delete(room)
        logger.info(f"Room {room_id} deleted by {actor}")
