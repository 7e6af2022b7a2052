from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from reservation_engine.authorization import Actor
from reservation_engine.intervals import Interval
from reservation_engine.rooms import RoomService
from reservation_engine.service import ReservationService
from routers.deps import get_actor, get_reservation_service, get_room_service

router = APIRouter()


class UpdateRoomBody(BaseModel):
    hourly_rate: Decimal | None = None
    available: bool | None = None


@router.get("/{room_id}/availability")
def room_availability(
    room_id: str,
    start_date: datetime = Query(),
    end_date: datetime = Query(),
    service: ReservationService = Depends(get_reservation_service),
):
    """
    Whether [start_date, end_date) is free on the room right now:
      - free: no pending or confirmed reservation overlaps the slot
      - busy: at least one does (a reservation ending at start_date does not count)
    """
    interval = Interval(start_date, end_date)
    busy = service.has_conflict(room_id, interval)
    return {"room_id": room_id, "start_date": interval.start, "end_date": interval.end, "available": not busy}


@router.patch("/{room_id}")
def update_room(
    room_id: str,
    body: UpdateRoomBody,
    actor: Actor = Depends(get_actor),
    service: RoomService = Depends(get_room_service),
):
    room = service.update_room(room_id, actor, hourly_rate=body.hourly_rate, available=body.available)
    return {"room_id": room.id, "hourly_rate": room.hourly_rate, "available": room.available}


@router.delete("/{room_id}")
def delete_room(
    room_id: str,
    actor: Actor = Depends(get_actor),
    service: RoomService = Depends(get_room_service),
):
    service.delete_room(room_id, actor)
    return {"room_id": room_id, "deleted": True}
