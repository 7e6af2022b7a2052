import enum
from uuid import uuid4

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Enum, ForeignKey, Index, Numeric, String, Text,
)
from sqlalchemy.orm import relationship

from reservation_engine.db import Base
from reservation_engine.intervals import Interval, utcnow
from reservation_engine.status import Status


def new_id() -> str:
    return str(uuid4())


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, unique=True, nullable=False)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Organization(Base):
    """A town hall publishing rooms. `user_id` is the account that manages it."""
    __tablename__ = "organizations"
    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    name = Column(String, nullable=False)
    email = Column(String)
    created_at = Column(DateTime, default=utcnow)

    user = relationship("User")


class Room(Base):
    __tablename__ = "rooms"
    id = Column(String, primary_key=True, default=new_id)
    organization_id = Column(String, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=False, default=0)
    available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)

    organization = relationship("Organization")

    __table_args__ = (
        CheckConstraint("hourly_rate >= 0", name="room_rate_non_negative"),
    )

    @property
    def owner_user_id(self) -> str | None:
        return self.organization.user_id if self.organization else None


class Reservation(Base):
    __tablename__ = "reservations"
    id = Column(String, primary_key=True, default=new_id)
    room_id = Column(String, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    requester_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    status = Column(Enum(Status, native_enum=False, length=16), nullable=False, default=Status.PENDING)
    total_price = Column(Numeric(10, 2), nullable=False)
    message = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    room = relationship("Room")
    requester = relationship("User")
    payment = relationship(
        "Payment", back_populates="reservation", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="reservation_dates_valid"),
        Index("ix_reservations_room_status_start", "room_id", "status", "start_date"),
        Index("ix_reservations_requester", "requester_id"),
    )

    @property
    def interval(self) -> Interval:
        return Interval(self.start_date, self.end_date)

    def __repr__(self):
        return f"Reservation(id={self.id}, room_id={self.room_id}, status={self.status}, {self.start_date} - {self.end_date})"


class Payment(Base):
    __tablename__ = "payments"
    id = Column(String, primary_key=True, default=new_id)
    reservation_id = Column(
        String, ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False, unique=True,
    )
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(Enum(PaymentStatus, native_enum=False, length=16), nullable=False, default=PaymentStatus.PENDING)
    external_reference = Column(String)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    reservation = relationship("Reservation", back_populates="payment")
