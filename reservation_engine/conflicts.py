"""
Conflict detection for room slots.

Only PENDING and CONFIRMED reservations occupy a room. Two slots conflict
when `new.start < existing.end and existing.start < new.end`; a slot that ends
exactly when another starts is not a conflict.
"""

import logging
from typing import Iterable

from reservation_engine.intervals import Interval

logger = logging.getLogger(__name__)


def find_overlaps(candidate: Interval, reservations: Iterable) -> list:
    """Return the reservations whose interval overlaps `candidate`."""
    return [r for r in reservations if candidate.overlaps(r.interval)]


def find_conflicts(repository, room_id: str, candidate: Interval,
                   exclude_reservation_id: str | None = None) -> list:
    # the SQL filter narrows the rows, find_overlaps is the rule
    blocking = repository.blocking_for_room(
        room_id, within=candidate, exclude_reservation_id=exclude_reservation_id,
    )
    conflicts = find_overlaps(candidate, blocking)
    if conflicts:
        logger.warning(
            "Slot %s on room %s conflicts with %s",
            candidate, room_id, ", ".join(r.id for r in conflicts),
        )
    return conflicts


def has_conflict(repository, room_id: str, candidate: Interval,
                 exclude_reservation_id: str | None = None) -> bool:
    return bool(find_conflicts(repository, room_id, candidate, exclude_reservation_id))
