"""
Unit of Work

One database transaction plus the events it produced. Events are handed to
the message bus only after the transaction has committed; a rollback
discards them.

Usage:
    with UnitOfWork(store, bus) as uow:
        room = uow.rooms.get(room_id, lock=True)
        ...
        uow.collect(event)
    # committed here, then events are published
"""

import logging
from typing import List

from reservation_engine.events import DomainEvent
from reservation_engine.repository import (
    PaymentRepository, ReservationRepository, RoomRepository, UserRepository,
)

logger = logging.getLogger(__name__)


class UnitOfWork:

    def __init__(self, store, bus=None, reservation_repository=ReservationRepository):
        self.store = store
        self.bus = bus
        self._reservation_repository = reservation_repository
        self._events: List[DomainEvent] = []
        self.session = None

    def __enter__(self):
        self.session = self.store.session()
        self.users = UserRepository(self.session)
        self.rooms = RoomRepository(self.session)
        self.reservations = self._reservation_repository(self.session)
        self.payments = PaymentRepository(self.session)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self.session.close()

    def collect(self, *events: DomainEvent):
        self._events.extend(events)

    def commit(self):
        self.session.commit()
        events = self._events.copy()
        self._events.clear()
        if events and self.bus is not None:
            logger.debug(f"Publishing {len(events)} events after commit")
            self.bus.publish_events(events)

    def rollback(self):
        if self._events:
            logger.debug(f"Rolling back, discarding {len(self._events)} events")
        self._events.clear()
        self.session.rollback()
