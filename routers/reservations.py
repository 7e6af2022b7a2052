from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from reservation_engine.authorization import Actor, Role
from reservation_engine.errors import Forbidden
from reservation_engine.intervals import Interval
from reservation_engine.models import Payment, Reservation
from reservation_engine.payments import PaymentService
from reservation_engine.service import ReservationService
from routers.deps import get_actor, get_payment_service, get_reservation_service

router = APIRouter()


class CreateReservationBody(BaseModel):
    room_id: str
    start_date: datetime
    end_date: datetime
    message: str | None = None


class ChangeStatusBody(BaseModel):
    status: str
    reason: str | None = None


def payment_to_dict(payment: Payment | None) -> dict | None:
    if payment is None:
        return None
    return {
        "payment_id": payment.id,
        "amount": payment.amount,
        "status": payment.status.value,
        "updated_at": payment.updated_at,
    }


def reservation_to_dict(reservation: Reservation) -> dict:
    return {
        "id": reservation.id,
        "room_id": reservation.room_id,
        "requester_id": reservation.requester_id,
        "start_date": reservation.start_date,
        "end_date": reservation.end_date,
        "status": reservation.status.value,
        "total_price": reservation.total_price,
        "message": reservation.message,
        "created_at": reservation.created_at,
        "updated_at": reservation.updated_at,
    }


@router.post("", status_code=201)
def create_reservation(
    body: CreateReservationBody,
    actor: Actor = Depends(get_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    """
    Request a room for [start_date, end_date).

    409 slot_conflict when the slot overlaps a pending or confirmed reservation;
    a slot starting exactly when another ends is accepted.
    """
    if actor.role is not Role.REQUESTER:
        raise Forbidden("Only citizens can request reservations.")
    interval = Interval(body.start_date, body.end_date)
    reservation, _ = service.create_reservation(body.room_id, actor.id, interval, body.message)
    return {"reservation": reservation_to_dict(reservation), "message": "Reservation request sent."}


@router.get("")
def list_reservations(
    room_id: str | None = Query(default=None),
    status: str | None = Query(default=None, description="Comma separated, e.g. CONFIRMED,PENDING"),
    actor: Actor = Depends(get_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    statuses = [s for s in status.split(",") if s.strip()] if status else None
    reservations = service.list_reservations(actor, room_id=room_id, statuses=statuses)
    return {"reservations": [reservation_to_dict(r) for r in reservations]}


@router.get("/{reservation_id}")
def get_reservation(
    reservation_id: str,
    actor: Actor = Depends(get_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    reservation = service.get_reservation(reservation_id, actor)
    data = reservation_to_dict(reservation)
    data["payment"] = payment_to_dict(reservation.payment)
    return {"reservation": data}


@router.patch("/{reservation_id}")
def change_status(
    reservation_id: str,
    body: ChangeStatusBody,
    actor: Actor = Depends(get_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    reservation, event = service.change_status(reservation_id, body.status, actor, reason=body.reason)
    return {
        "reservation": reservation_to_dict(reservation),
        "transition": {"from": event.from_status.value, "to": event.to_status.value},
    }


@router.delete("/{reservation_id}")
def delete_reservation(
    reservation_id: str,
    actor: Actor = Depends(get_actor),
    service: ReservationService = Depends(get_reservation_service),
):
    service.delete_reservation(reservation_id, actor)
    return {"reservation_id": reservation_id, "deleted": True}


@router.post("/{reservation_id}/payment", status_code=201)
def open_payment(
    reservation_id: str,
    actor: Actor = Depends(get_actor),
    payments: PaymentService = Depends(get_payment_service),
):
    """Register the payment the gateway is about to collect; the amount is the stored total price."""
    payment = payments.open_payment(reservation_id, actor)
    return {"reservation_id": reservation_id, "payment": payment_to_dict(payment)}
