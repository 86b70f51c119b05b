from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.models.booking import (
    Booking, BookingStatus, WaitlistEntry, WaitlistStatus,
    RecurringBooking, RecurringBookingStatus
)
from app.models.member import Member
from app.repositories.base import BaseRepository


class BookingRepository(BaseRepository[Booking, None, None]):

    def count_active_for_slot(
        self, db: Session, *, class_id: int, booking_date: date, start_time: str
    ) -> int:
        """Reservas no canceladas para (clase, fecha, hora de inicio)."""
        return db.query(Booking).filter(
            Booking.class_id == class_id,
            Booking.booking_date == booking_date,
            Booking.start_time == start_time,
            Booking.status != BookingStatus.CANCELLED
        ).count()

    def count_active_for_date(self, db: Session, *, class_id: int, booking_date: date) -> int:
        """Reservas no canceladas para (clase, fecha) sin distinguir la hora."""
        return db.query(Booking).filter(
            Booking.class_id == class_id,
            Booking.booking_date == booking_date,
            Booking.status != BookingStatus.CANCELLED
        ).count()

    def find_active_duplicate(
        self, db: Session, *, member_id: int, class_id: int, booking_date: date, start_time: str
    ) -> Optional[Booking]:
        return db.query(Booking).filter(
            Booking.member_id == member_id,
            Booking.class_id == class_id,
            Booking.booking_date == booking_date,
            Booking.start_time == start_time,
            Booking.status != BookingStatus.CANCELLED
        ).first()

    def get_by_member(self, db: Session, *, member_id: int) -> List[Booking]:
        """Reservas del miembro ordenadas por fecha y hora ascendentes."""
        return db.query(Booking).filter(
            Booking.member_id == member_id
        ).order_by(Booking.booking_date.asc(), Booking.start_time.asc(), Booking.id.asc()).all()

    def get_all_with_details(self, db: Session) -> List[Booking]:
        """Todas las reservas con miembro y clase cargados, las más recientes primero."""
        return db.query(Booking).options(
            joinedload(Booking.member).joinedload(Member.user),
            joinedload(Booking.class_definition)
        ).order_by(Booking.booking_date.desc(), Booking.start_time.desc(), Booking.id.desc()).all()


class WaitlistRepository(BaseRepository[WaitlistEntry, None, None]):

    def count_waiting_for_slot(
        self, db: Session, *, class_id: int, booking_date: date, start_time: str
    ) -> int:
        return db.query(WaitlistEntry).filter(
            WaitlistEntry.class_id == class_id,
            WaitlistEntry.booking_date == booking_date,
            WaitlistEntry.start_time == start_time,
            WaitlistEntry.status == WaitlistStatus.WAITING
        ).count()

    def count_waiting_for_date(self, db: Session, *, class_id: int, booking_date: date) -> int:
        return db.query(WaitlistEntry).filter(
            WaitlistEntry.class_id == class_id,
            WaitlistEntry.booking_date == booking_date,
            WaitlistEntry.status == WaitlistStatus.WAITING
        ).count()

    def get_next_waiting(
        self, db: Session, *, class_id: int, booking_date: date, start_time: str
    ) -> Optional[WaitlistEntry]:
        """Entrada en espera con la posición más baja para el hueco."""
        return db.query(WaitlistEntry).filter(
            WaitlistEntry.class_id == class_id,
            WaitlistEntry.booking_date == booking_date,
            WaitlistEntry.start_time == start_time,
            WaitlistEntry.status == WaitlistStatus.WAITING
        ).order_by(WaitlistEntry.position.asc(), WaitlistEntry.id.asc()).first()

    def find_open_for_member(
        self, db: Session, *, member_id: int, class_id: int, booking_date: date, start_time: str
    ) -> Optional[WaitlistEntry]:
        """Entrada abierta (en espera u ofrecida) del miembro para el hueco."""
        return db.query(WaitlistEntry).filter(
            WaitlistEntry.member_id == member_id,
            WaitlistEntry.class_id == class_id,
            WaitlistEntry.booking_date == booking_date,
            WaitlistEntry.start_time == start_time,
            WaitlistEntry.status.in_([WaitlistStatus.WAITING, WaitlistStatus.OFFERED])
        ).first()

    def get_open_by_member(self, db: Session, *, member_id: int) -> List[WaitlistEntry]:
        return db.query(WaitlistEntry).filter(
            WaitlistEntry.member_id == member_id,
            WaitlistEntry.status.in_([WaitlistStatus.WAITING, WaitlistStatus.OFFERED])
        ).order_by(WaitlistEntry.created_at.desc(), WaitlistEntry.id.desc()).all()


class RecurringBookingRepository(BaseRepository[RecurringBooking, None, None]):

    def get_active_by_member(self, db: Session, *, member_id: int) -> List[RecurringBooking]:
        return db.query(RecurringBooking).filter(
            RecurringBooking.member_id == member_id,
            RecurringBooking.status != RecurringBookingStatus.CANCELLED
        ).order_by(RecurringBooking.created_at.desc(), RecurringBooking.id.desc()).all()


booking_repository = BookingRepository(Booking)
waitlist_repository = WaitlistRepository(WaitlistEntry)
recurring_booking_repository = RecurringBookingRepository(RecurringBooking)
