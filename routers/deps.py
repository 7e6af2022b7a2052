from fastapi import Depends, Header, Request

from reservation_engine.authorization import Actor, Role
from reservation_engine.db import Store, get_store
from reservation_engine.payments import PaymentService
from reservation_engine.rooms import RoomService
from reservation_engine.service import ReservationService


def get_actor(x_actor_id: str = Header(), x_actor_role: Role = Header()) -> Actor:
    """The authentication layer in front of this app resolves who is calling."""
    return Actor(id=x_actor_id, role=x_actor_role)


def get_reservation_service(request: Request, store: Store = Depends(get_store)) -> ReservationService:
    return ReservationService(store, request.app.state.bus)


def get_room_service(request: Request, store: Store = Depends(get_store)) -> RoomService:
    return RoomService(store, request.app.state.bus)


def get_payment_service(request: Request, store: Store = Depends(get_store)) -> PaymentService:
    return PaymentService(store, request.app.state.bus)
