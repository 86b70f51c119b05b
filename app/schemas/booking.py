import calendar
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from app.models.booking import (
    BookingStatus, BookingType, WaitlistStatus, RecurrenceType, RecurringBookingStatus
)
from app.schemas.response import CamelModel
from app.schemas.schedule import ClassSummary

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
WEEKDAY_NAMES = list(calendar.day_name)


def _blank_to_none(v):
    # Un campo vacío cuenta como ausente para la validación de obligatorios
    if isinstance(v, str) and not v.strip():
        return None
    return v


# Entradas
class BookingCreate(CamelModel):
    # Opcionales a nivel de esquema: la ausencia se responde con 400 desde el servicio
    class_id: Optional[int] = None
    booking_date: Optional[date] = None
    start_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    end_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    notes: Optional[str] = None

    @field_validator("class_id", "booking_date", "start_time", "end_time", mode="before")
    @classmethod
    def blank_as_missing(cls, v):
        return _blank_to_none(v)


class RecurringBookingCreate(CamelModel):
    class_id: Optional[int] = None
    recurrence_type: Optional[RecurrenceType] = None
    recurrence_day: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    end_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    notes: Optional[str] = None

    @field_validator(
        "class_id", "recurrence_type", "recurrence_day", "start_date", "end_date",
        "start_time", "end_time", mode="before"
    )
    @classmethod
    def blank_as_missing(cls, v):
        return _blank_to_none(v)

    @field_validator("recurrence_day")
    @classmethod
    def validate_weekday(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        normalized = v.strip().capitalize()
        if normalized not in WEEKDAY_NAMES:
            raise ValueError(f"recurrenceDay must be one of {', '.join(WEEKDAY_NAMES)}")
        return normalized


class BookingStatusUpdate(CamelModel):
    status: Literal["completed", "no-show"]


# Salidas
class Booking(CamelModel):
    id: int
    member_id: int
    class_id: int
    class_name: str
    trainer_id: Optional[int] = None
    trainer_name: Optional[str] = None
    duration: int
    location: str
    booking_date: date
    start_time: str
    end_time: str
    formatted_time: str
    status: BookingStatus
    booking_type: BookingType
    recurring_booking_id: Optional[int] = None
    notes: Optional[str] = None
    checked_in: bool = False
    checked_in_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None


class MemberSummary(CamelModel):
    id: int
    full_name: str
    email: str


class BookingWithMember(Booking):
    """Reserva con los datos del miembro y de la clase, para la vista de entrenadores"""
    member: MemberSummary
    class_info: Optional[ClassSummary] = None


class WaitlistEntry(CamelModel):
    id: int
    member_id: int
    class_id: int
    class_name: str
    booking_date: date
    start_time: str
    position: int
    status: WaitlistStatus
    notified_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class WaitlistOutcome(CamelModel):
    """Resultado de intentar reservar un hueco lleno"""
    type: Literal["waitlist"] = "waitlist"
    waitlist_entry: WaitlistEntry
    position: int


class RecurringBooking(CamelModel):
    id: int
    member_id: int
    class_id: int
    class_name: str
    trainer_id: Optional[int] = None
    trainer_name: Optional[str] = None
    duration: int
    location: str
    recurrence_type: RecurrenceType
    recurrence_day: str
    start_date: date
    end_date: date
    start_time: str
    end_time: str
    total_sessions: int
    status: RecurringBookingStatus
    notes: Optional[str] = None
    formatted_schedule: str
    created_at: Optional[datetime] = None


class RecurringBookingResult(CamelModel):
    recurring_booking: RecurringBooking
    bookings_created: int
    total_sessions: int


class Availability(CamelModel):
    class_id: int
    date: date
    capacity: int
    booked_count: int
    available_spots: int
    waitlist_count: int
    is_full: bool
    can_book: bool
    can_join_waitlist: bool = True


class MyBookings(CamelModel):
    upcoming: List[Booking]
    past: List[Booking]
    total: int
