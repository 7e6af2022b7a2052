"""
Reservation statuses and the moves allowed between them

    PENDING   -> CONFIRMED, CANCELLED
    CONFIRMED -> CANCELLED, COMPLETED
    CANCELLED (terminal)
    COMPLETED (terminal)
"""

from enum import Enum


class Status(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]

    @property
    def blocks_slot(self) -> bool:
        return self in BLOCKING_STATUSES


TRANSITIONS: dict[Status, frozenset[Status]] = {
    Status.PENDING: frozenset({Status.CONFIRMED, Status.CANCELLED}),
    Status.CONFIRMED: frozenset({Status.CANCELLED, Status.COMPLETED}),
    Status.CANCELLED: frozenset(),
    Status.COMPLETED: frozenset(),
}

# only these keep a room's slot occupied
BLOCKING_STATUSES = frozenset({Status.PENDING, Status.CONFIRMED})

DELETABLE_STATUSES = frozenset({Status.PENDING, Status.CANCELLED})
