from .authorization import Actor, Role
from .db import Store
from .errors import (
    Conflict,
    Forbidden,
    InvalidFilter,
    InvalidInterval,
    InvalidRoom,
    InvalidState,
    InvalidTransition,
    NotFound,
    ReservationError,
    RoomUnavailable,
    SlotConflict,
)
from .events import PaymentCompleted, ReservationCreated, ReservationTransitioned
from .intervals import Interval
from .status import Status
from .messagebus import MessageBus
from .notifications import Notifier
from .payments import PaymentService
from .pricing import price
from .rooms import RoomService
from .service import ReservationService

__all__ = [
    "Actor",
    "Role",
    "Store",
    "Conflict",
    "Forbidden",
    "InvalidFilter",
    "InvalidInterval",
    "InvalidRoom",
    "InvalidState",
    "InvalidTransition",
    "NotFound",
    "ReservationError",
    "RoomUnavailable",
    "SlotConflict",
    "PaymentCompleted",
    "ReservationCreated",
    "ReservationTransitioned",
    "Interval",
    "Status",
    "MessageBus",
    "Notifier",
    "PaymentService",
    "price",
    "RoomService",
    "ReservationService",
]
