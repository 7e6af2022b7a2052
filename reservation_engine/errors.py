"""
Error taxonomy for the reservation engine.

Every failure the engine reports is a subclass of ReservationError carrying a
stable machine-readable `code` and the HTTP status a request layer should use.
"""


class ReservationError(Exception):
    code = "reservation_error"
    http_status = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    default_message = "Reservation request failed."

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": str(self)}


class InvalidInterval(ReservationError):
    code = "invalid_interval"
    http_status = 422
    default_message = "The requested time slot is not valid."


class InvalidRoom(ReservationError):
    code = "invalid_room"
    http_status = 422
    default_message = "The room settings are not valid."


class RoomUnavailable(ReservationError):
    code = "room_unavailable"
    http_status = 409
    default_message = "This room is not open for reservations."


class NotFound(ReservationError):
    code = "not_found"
    http_status = 404
    default_message = "Not found."


class SlotConflict(ReservationError):
    code = "slot_conflict"
    http_status = 409
    default_message = "This room is already booked for that period."

    def __init__(self, message: str | None = None, conflicting_ids: list[str] | None = None):
        super().__init__(message)
        self.conflicting_ids = conflicting_ids or []


class Forbidden(ReservationError):
    code = "forbidden"
    http_status = 403
    default_message = "You are not allowed to perform this action."


class InvalidTransition(ReservationError):
    code = "invalid_transition"
    http_status = 400
    default_message = "This status change is no longer possible."


class InvalidState(ReservationError):
    code = "invalid_state"
    http_status = 400
    default_message = "The reservation is not in a state that allows this action."


class Conflict(ReservationError):
    code = "concurrent_update"
    http_status = 409
    default_message = "The reservation was modified concurrently, please retry."


class InvalidFilter(ReservationError):
    code = "invalid_filter"
    http_status = 422
    default_message = "The search filter is not valid."
