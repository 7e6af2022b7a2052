# tests/conftest.py
from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from reservation_engine.authorization import Actor, Role
from reservation_engine.config import Settings
from reservation_engine.db import Store
from reservation_engine.events import PaymentCompleted, ReservationCreated, ReservationTransitioned
from reservation_engine.main import create_app
from reservation_engine.messagebus import MessageBus
from reservation_engine.models import Organization, Room, User
from reservation_engine.payments import PaymentService
from reservation_engine.rooms import RoomService
from reservation_engine.service import ReservationService

NOW = datetime(2030, 1, 1, 8, 0)


def at(hour, minute=0, day=2):
    """A moment on 2030-01-<day>, after the fixed test clock."""
    return datetime(2030, 1, day, hour, minute)


@pytest.fixture(scope="function")
def store(tmp_path):
    # file-backed so several threads can share it
    s = Store(f"sqlite:///{tmp_path / 'bookings.db'}")
    s.init_db()
    try:
        yield s
    finally:
        s.dispose()


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def bus():
    return MessageBus()


@pytest.fixture
def published(bus):
    events = []
    for event_type in (ReservationCreated, ReservationTransitioned, PaymentCompleted):
        bus.subscribe(event_type, events.append)
    return events


@pytest.fixture
def service(store, bus, clock):
    return ReservationService(store, bus, clock=clock)


@pytest.fixture
def room_service(store, bus, clock):
    return RoomService(store, bus, clock=clock)


@pytest.fixture
def payment_service(store, bus, clock):
    return PaymentService(store, bus, clock=clock)


# ---- factories ----
@pytest.fixture
def make_user(store):
    def _make_user(user_id="u-1", email=None, first_name="Jeanne", last_name="Martin"):
        with store.session() as db:
            u = db.get(User, user_id)
            if u is None:
                u = User(id=user_id, email=email or f"{user_id}@example.com", first_name=first_name, last_name=last_name)
                db.add(u)
                db.commit()
        return u
    return _make_user


@pytest.fixture
def make_room(store, make_user):
    def _make_room(room_id="r-1", owner_id="owner-1", hourly_rate="20.00", available=True,
                   org_email="mairie@example.com"):
        make_user(owner_id)
        with store.session() as db:
            org = db.query(Organization).filter_by(user_id=owner_id).first()
            if org is None:
                org = Organization(id=f"org-{owner_id}", user_id=owner_id, name=f"Mairie {owner_id}", email=org_email)
                db.add(org)
            r = Room(id=room_id, organization_id=org.id, name=f"Salle {room_id}",
                     hourly_rate=Decimal(hourly_rate), available=available)
            db.add(r)
            db.commit()
        return r
    return _make_room


@pytest.fixture
def requester(make_user):
    user = make_user("u-1")
    return Actor(id=user.id, role=Role.REQUESTER)


@pytest.fixture
def owner():
    return Actor(id="owner-1", role=Role.ROOM_OWNER)


@pytest.fixture
def admin():
    return Actor(id="admin-1", role=Role.ADMIN)


@pytest.fixture
def room(make_room):
    return make_room()


@pytest.fixture(scope="function")
def client(store, bus):
    app = create_app(Settings(skip_db_init=True), store=store, bus=bus)
    with TestClient(app) as c:
        yield c


def headers(actor):
    return {"X-Actor-Id": actor.id, "X-Actor-Role": actor.role.value}
