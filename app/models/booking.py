from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional
import enum

from sqlalchemy import (
    Boolean, Column, Date, DateTime, Enum, ForeignKey, Index, Integer, String, Text
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.db.base_class import Base


class BookingStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no-show"


class BookingType(str, enum.Enum):
    SINGLE = "single"
    RECURRING = "recurring"


class WaitlistStatus(str, enum.Enum):
    WAITING = "waiting"
    OFFERED = "offered"
    CONVERTED = "converted"
    EXPIRED = "expired"


class RecurrenceType(str, enum.Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class RecurringBookingStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ClassSnapshot:
    """Datos de la clase copiados en la reserva en el momento de crearla."""
    class_name: str
    trainer_id: Optional[int]
    trainer_name: Optional[str]
    duration: int
    location: str

    @classmethod
    def from_class(cls, gym_class: Any) -> "ClassSnapshot":
        return cls(
            class_name=gym_class.name,
            trainer_id=gym_class.trainer_id,
            trainer_name=gym_class.trainer_name,
            duration=gym_class.duration,
            location=gym_class.location,
        )

    @classmethod
    def from_booking(cls, booking: Any) -> "ClassSnapshot":
        return cls(
            class_name=booking.class_name,
            trainer_id=booking.trainer_id,
            trainer_name=booking.trainer_name,
            duration=booking.duration,
            location=booking.location,
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Booking(Base):
    """Reserva de un miembro para una clase en una fecha y hora concretas"""
    __tablename__ = "booking"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("member.id"), nullable=False)
    class_id = Column(Integer, ForeignKey("class.id"), nullable=False)

    # Copia de la clase al crear la reserva
    class_name = Column(String, nullable=False)
    trainer_id = Column(Integer, ForeignKey("user.id"), nullable=True)
    trainer_name = Column(String, nullable=True)
    duration = Column(Integer, nullable=False, default=60)
    location = Column(String, nullable=False, default="Main Studio")

    booking_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # "HH:mm" hora local del gimnasio
    end_time = Column(String(5), nullable=False)
    status = Column(Enum(BookingStatus), default=BookingStatus.CONFIRMED, nullable=False)
    booking_type = Column(Enum(BookingType), default=BookingType.SINGLE, nullable=False)
    recurring_booking_id = Column(Integer, ForeignKey("recurring_booking.id"), nullable=True)

    notes = Column(Text, nullable=True)
    checked_in = Column(Boolean, default=False, nullable=False)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    member = relationship("Member", back_populates="bookings")
    class_definition = relationship("Class", back_populates="bookings")
    recurring_booking = relationship("RecurringBooking", back_populates="bookings")

    __table_args__ = (
        Index("ix_booking_slot", "class_id", "booking_date", "start_time", "status"),
        Index("ix_booking_member_date", "member_id", "booking_date"),
    )

    @property
    def formatted_time(self) -> str:
        return f"{self.start_time} - {self.end_time}"

    @property
    def snapshot(self) -> ClassSnapshot:
        return ClassSnapshot.from_booking(self)


class WaitlistEntry(Base):
    """Entrada en la lista de espera de un hueco lleno"""
    __tablename__ = "waitlist"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("member.id"), nullable=False)
    class_id = Column(Integer, ForeignKey("class.id"), nullable=False)
    class_name = Column(String, nullable=False)
    booking_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)
    # Posición asignada al entrar; no se recompacta al salir otras entradas
    position = Column(Integer, nullable=False)
    status = Column(Enum(WaitlistStatus), default=WaitlistStatus.WAITING, nullable=False)
    notified_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    member = relationship("Member", back_populates="waitlist_entries")

    __table_args__ = (
        Index("ix_waitlist_slot", "class_id", "booking_date", "start_time", "status"),
    )


class RecurringBooking(Base):
    """Regla de reserva semanal o mensual; genera reservas individuales al crearse"""
    __tablename__ = "recurring_booking"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("member.id"), nullable=False)
    class_id = Column(Integer, ForeignKey("class.id"), nullable=False)
    class_name = Column(String, nullable=False)
    trainer_id = Column(Integer, ForeignKey("user.id"), nullable=True)
    trainer_name = Column(String, nullable=True)
    duration = Column(Integer, nullable=False, default=60)
    location = Column(String, nullable=False, default="Main Studio")

    recurrence_type = Column(Enum(RecurrenceType), nullable=False)
    recurrence_day = Column(String, nullable=False)  # "Monday", "Tuesday", ...
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    total_sessions = Column(Integer, nullable=False)
    status = Column(Enum(RecurringBookingStatus), default=RecurringBookingStatus.ACTIVE, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    member = relationship("Member", back_populates="recurring_bookings")
    bookings = relationship("Booking", back_populates="recurring_booking")

    @property
    def formatted_schedule(self) -> str:
        recurrence = self.recurrence_type.value if self.recurrence_type else ""
        return f"{recurrence} on {self.recurrence_day} at {self.start_time}"
