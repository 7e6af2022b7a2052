from decimal import Decimal

from reservation_engine.intervals import Interval


def price(interval: Interval, hourly_rate) -> Decimal:
    """Total price for a slot: billable hours times the room's hourly rate.

    The rate is validated when the room is edited, not here.
    """
    return Decimal(interval.duration_hours_ceil()) * Decimal(str(hourly_rate))
