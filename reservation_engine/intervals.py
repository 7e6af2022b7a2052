"""
Time interval value object.

Reservations occupy a half-open range [start, end): a slot ending at 12:30
and another starting at 12:30 do not overlap, so back-to-back bookings are
allowed.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from reservation_engine.errors import InvalidInterval

ONE_HOUR = timedelta(hours=1)


def utcnow() -> datetime:
    """Current time as naive UTC, the form timestamps are stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime

    def __post_init__(self):
        if not isinstance(self.start, datetime) or not isinstance(self.end, datetime):
            raise InvalidInterval("Start and end must be datetimes.")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "start", to_naive_utc(self.start))
        object.__setattr__(self, "end", to_naive_utc(self.end))
        if self.end <= self.start:
            raise InvalidInterval(
                f"End ({self.end.isoformat()}) must be after start ({self.start.isoformat()})."
            )

    def overlaps(self, other: "Interval") -> bool:
        """True when both intervals share at least one instant.

        Touching boundaries (self.end == other.start) do not overlap.
        """
        return self.start < other.end and other.start < self.end

    def contains(self, moment: datetime) -> bool:
        return self.start <= to_naive_utc(moment) < self.end

    def starts_after(self, moment: datetime) -> bool:
        return self.start > to_naive_utc(moment)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def duration_hours_ceil(self) -> int:
        """Billable hours: any started hour counts as a full one."""
        hours, remainder = divmod(self.duration, ONE_HOUR)
        if remainder:
            hours += 1
        return max(1, hours)

    def __str__(self):
        return f"{self.start.isoformat()} - {self.end.isoformat()}"
