"""
Servicio de reservas de clases.

Reúne la consulta de disponibilidad, la creación de reservas (con paso
automático a lista de espera cuando el hueco está lleno), la cancelación con
promoción del siguiente en espera, la gestión de la lista de espera y el
generador de reservas recurrentes.

Las comprobaciones de capacidad son lectura-y-escritura sin bloqueo: dos
peticiones simultáneas pueden ver el mismo recuento y superar la capacidad.
"""
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import List, Optional, Union
import logging

from redis.asyncio import Redis
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import NotFoundError, PermissionError, ValidationError
from app.core.timezone_utils import hours_until, is_slot_in_future, slot_to_utc
from app.models.booking import (
    Booking, BookingStatus, BookingType, ClassSnapshot, WaitlistStatus
)
from app.models.schedule import Class
from app.models.user import User
from app.repositories.booking import (
    booking_repository, waitlist_repository, recurring_booking_repository
)
from app.repositories.schedule import class_repository
from app.schemas import booking as schemas
from app.schemas.schedule import ClassSummary
from app.services.cache_service import cache_service
from app.services.member import member_service
from app.services.recurrence import expand_occurrences, total_sessions

logger = logging.getLogger(__name__)


def availability_cache_key(class_id: int, on_date: date) -> str:
    return f"bookings:availability:class:{class_id}:date:{on_date.isoformat()}"


class BookingService:

    def _get_class_or_404(self, db: Session, class_id: int) -> Class:
        gym_class = class_repository.get_class(db, class_id)
        if not gym_class:
            raise NotFoundError("Class not found")
        return gym_class

    async def _invalidate_availability(
        self, redis_client: Optional[Redis], class_id: int, *dates: date
    ) -> None:
        keys = [availability_cache_key(class_id, d) for d in set(dates)]
        await cache_service.invalidate(redis_client, *keys)

    async def get_availability(
        self, db: Session, *, class_id: int, on_date: date,
        redis_client: Optional[Redis] = None
    ) -> schemas.Availability:
        """
        Disponibilidad de una clase en una fecha.

        Agrega todas las horas de inicio del día: la capacidad se compara con el
        total de reservas de la fecha, no con las de un hueco concreto.
        """
        gym_class = self._get_class_or_404(db, class_id)

        async def _compute() -> schemas.Availability:
            booked_count = booking_repository.count_active_for_date(
                db, class_id=class_id, booking_date=on_date
            )
            waitlist_count = waitlist_repository.count_waiting_for_date(
                db, class_id=class_id, booking_date=on_date
            )
            available_spots = max(0, gym_class.capacity - booked_count)
            return schemas.Availability(
                class_id=class_id,
                date=on_date,
                capacity=gym_class.capacity,
                booked_count=booked_count,
                available_spots=available_spots,
                waitlist_count=waitlist_count,
                is_full=available_spots <= 0,
                can_book=available_spots > 0,
                can_join_waitlist=True,
            )

        return await cache_service.get_or_set(
            redis_client,
            availability_cache_key(class_id, on_date),
            _compute,
            schemas.Availability,
            expiry_seconds=get_settings().AVAILABILITY_CACHE_TTL,
        )

    async def create_booking(
        self, db: Session, *, user: User, booking_in: schemas.BookingCreate,
        redis_client: Optional[Redis] = None
    ) -> Union[schemas.Booking, schemas.WaitlistOutcome]:
        """
        Reserva un hueco o, si está lleno, añade al miembro a la lista de espera.
        Cada llamada crea exactamente una fila (reserva o entrada en espera).
        """
        if not all([booking_in.class_id, booking_in.booking_date,
                    booking_in.start_time, booking_in.end_time]):
            raise ValidationError("All booking details are required")

        gym_class = self._get_class_or_404(db, booking_in.class_id)
        member = member_service.get_member_for_user(db, user)

        duplicate = booking_repository.find_active_duplicate(
            db,
            member_id=member.id,
            class_id=gym_class.id,
            booking_date=booking_in.booking_date,
            start_time=booking_in.start_time,
        )
        if duplicate:
            raise ValidationError("You already have a booking for this class at this time")

        booked = booking_repository.count_active_for_slot(
            db,
            class_id=gym_class.id,
            booking_date=booking_in.booking_date,
            start_time=booking_in.start_time,
        )

        if booked >= gym_class.capacity:
            already_waiting = waitlist_repository.find_open_for_member(
                db,
                member_id=member.id,
                class_id=gym_class.id,
                booking_date=booking_in.booking_date,
                start_time=booking_in.start_time,
            )
            if already_waiting:
                raise ValidationError("You are already on the waitlist for this class at this time")

            position = waitlist_repository.count_waiting_for_slot(
                db,
                class_id=gym_class.id,
                booking_date=booking_in.booking_date,
                start_time=booking_in.start_time,
            ) + 1
            entry = waitlist_repository.create(db, obj_in={
                "member_id": member.id,
                "class_id": gym_class.id,
                "class_name": gym_class.name,
                "booking_date": booking_in.booking_date,
                "start_time": booking_in.start_time,
                "position": position,
                "expires_at": slot_to_utc(
                    booking_in.booking_date, booking_in.end_time, get_settings().GYM_TIMEZONE
                ),
            })
            logger.info(
                f"Clase {gym_class.id} llena el {booking_in.booking_date} {booking_in.start_time}: "
                f"miembro {member.id} en lista de espera, posición {position}"
            )
            await self._invalidate_availability(redis_client, gym_class.id, booking_in.booking_date)
            return schemas.WaitlistOutcome(
                waitlist_entry=schemas.WaitlistEntry.model_validate(entry),
                position=position,
            )

        snapshot = ClassSnapshot.from_class(gym_class)
        booking = booking_repository.create(db, obj_in={
            "member_id": member.id,
            "class_id": gym_class.id,
            **snapshot.as_dict(),
            "booking_date": booking_in.booking_date,
            "start_time": booking_in.start_time,
            "end_time": booking_in.end_time,
            "notes": booking_in.notes,
        })
        logger.info(
            f"Reserva {booking.id} creada: miembro {member.id}, clase {gym_class.id}, "
            f"{booking.booking_date} {booking.start_time}"
        )
        await self._invalidate_availability(redis_client, gym_class.id, booking.booking_date)
        return schemas.Booking.model_validate(booking)

    async def cancel_booking(
        self, db: Session, *, user: User, booking_id: int, reason: Optional[str] = None,
        redis_client: Optional[Redis] = None
    ) -> schemas.Booking:
        """
        Cancela una reserva propia con al menos CANCELLATION_NOTICE_HOURS de antelación
        y promociona la primera entrada en espera del mismo hueco.
        """
        settings = get_settings()
        booking = booking_repository.get(db, id=booking_id)
        if not booking:
            raise NotFoundError("Booking not found")

        member = member_service.get_member_for_user(db, user)
        if booking.member_id != member.id:
            raise PermissionError("Not authorized to cancel this booking")

        # Solo una reserva confirmada libera plaza; repetir la cancelación no promociona a nadie más
        if booking.status == BookingStatus.CANCELLED:
            raise ValidationError("Booking is already cancelled")
        if booking.status != BookingStatus.CONFIRMED:
            raise ValidationError("Only confirmed bookings can be cancelled")

        remaining = hours_until(booking.booking_date, booking.start_time, settings.GYM_TIMEZONE)
        if remaining < settings.CANCELLATION_NOTICE_HOURS:
            raise ValidationError(
                f"Bookings can only be cancelled at least {settings.CANCELLATION_NOTICE_HOURS} hours in advance"
            )

        booking_repository.update(db, db_obj=booking, obj_in={
            "status": BookingStatus.CANCELLED,
            "cancelled_at": datetime.now(timezone.utc),
            "cancellation_reason": reason,
        }, commit=False)
        logger.info(f"Reserva {booking.id} cancelada por el miembro {member.id}")

        self._promote_next_waiting(db, cancelled=booking)
        db.commit()
        db.refresh(booking)

        await self._invalidate_availability(redis_client, booking.class_id, booking.booking_date)
        return schemas.Booking.model_validate(booking)

    def _promote_next_waiting(self, db: Session, *, cancelled: Booking) -> Optional[Booking]:
        entry = waitlist_repository.get_next_waiting(
            db,
            class_id=cancelled.class_id,
            booking_date=cancelled.booking_date,
            start_time=cancelled.start_time,
        )
        if not entry:
            return None

        snapshot = replace(ClassSnapshot.from_booking(cancelled), class_name=entry.class_name)
        promoted = booking_repository.create(db, obj_in={
            "member_id": entry.member_id,
            "class_id": entry.class_id,
            **snapshot.as_dict(),
            "booking_date": entry.booking_date,
            "start_time": entry.start_time,
            "end_time": cancelled.end_time,
            "status": BookingStatus.CONFIRMED,
        }, commit=False)
        waitlist_repository.update(
            db, db_obj=entry, obj_in={"status": WaitlistStatus.CONVERTED}, commit=False
        )
        logger.info(
            f"Entrada de espera {entry.id} (posición {entry.position}) convertida en la reserva {promoted.id}"
        )
        return promoted

    async def get_my_bookings(self, db: Session, *, user: User) -> schemas.MyBookings:
        member = member_service.get_member_for_user(db, user)
        bookings = booking_repository.get_by_member(db, member_id=member.id)
        tz_name = get_settings().GYM_TIMEZONE
        now = datetime.now(timezone.utc)

        upcoming, past = [], []
        for booking in bookings:
            item = schemas.Booking.model_validate(booking)
            if is_slot_in_future(booking.booking_date, booking.start_time, tz_name, now=now):
                upcoming.append(item)
            else:
                past.append(item)
        return schemas.MyBookings(upcoming=upcoming, past=past, total=len(bookings))

    async def get_my_waitlist(self, db: Session, *, user: User) -> List[schemas.WaitlistEntry]:
        member = member_service.get_member_for_user(db, user)
        entries = waitlist_repository.get_open_by_member(db, member_id=member.id)
        return [schemas.WaitlistEntry.model_validate(e) for e in entries]

    async def remove_from_waitlist(
        self, db: Session, *, user: User, entry_id: int,
        redis_client: Optional[Redis] = None
    ) -> schemas.WaitlistEntry:
        entry = waitlist_repository.get(db, id=entry_id)
        if not entry:
            raise NotFoundError("Waitlist entry not found")

        member = member_service.get_member_for_user(db, user)
        if entry.member_id != member.id:
            raise PermissionError("Not authorized to remove this waitlist entry")

        # Baja lógica; las posiciones del resto no se recalculan
        entry = waitlist_repository.update(db, db_obj=entry, obj_in={"status": WaitlistStatus.EXPIRED})
        logger.info(f"Entrada de espera {entry.id} retirada por el miembro {member.id}")
        await self._invalidate_availability(redis_client, entry.class_id, entry.booking_date)
        return schemas.WaitlistEntry.model_validate(entry)

    async def create_recurring_booking(
        self, db: Session, *, user: User, recurring_in: schemas.RecurringBookingCreate,
        redis_client: Optional[Redis] = None
    ) -> schemas.RecurringBookingResult:
        """
        Guarda la regla recurrente y genera en el acto las reservas individuales.
        Las sesiones llenas se omiten sin pasar a lista de espera.
        """
        required = [
            recurring_in.class_id, recurring_in.recurrence_type, recurring_in.recurrence_day,
            recurring_in.start_date, recurring_in.end_date,
            recurring_in.start_time, recurring_in.end_time,
        ]
        if not all(required):
            raise ValidationError("All recurring booking details are required")

        gym_class = self._get_class_or_404(db, recurring_in.class_id)
        member = member_service.get_member_for_user(db, user)

        if recurring_in.end_date < recurring_in.start_date:
            raise ValidationError("End date must be on or after start date")

        sessions = total_sessions(
            recurring_in.recurrence_type, recurring_in.start_date, recurring_in.end_date
        )
        snapshot = ClassSnapshot.from_class(gym_class)
        recurring = recurring_booking_repository.create(db, obj_in={
            "member_id": member.id,
            "class_id": gym_class.id,
            **snapshot.as_dict(),
            "recurrence_type": recurring_in.recurrence_type,
            "recurrence_day": recurring_in.recurrence_day,
            "start_date": recurring_in.start_date,
            "end_date": recurring_in.end_date,
            "start_time": recurring_in.start_time,
            "end_time": recurring_in.end_time,
            "total_sessions": sessions,
            "notes": recurring_in.notes,
        }, commit=False)

        booked_dates = []
        for occurrence in expand_occurrences(
            recurring_in.recurrence_type, recurring_in.recurrence_day,
            recurring_in.start_date, recurring_in.end_date
        ):
            booked = booking_repository.count_active_for_slot(
                db, class_id=gym_class.id, booking_date=occurrence,
                start_time=recurring_in.start_time,
            )
            if booked >= gym_class.capacity:
                logger.info(f"Sesión del {occurrence} llena para la clase {gym_class.id}, se omite")
                continue
            booking_repository.create(db, obj_in={
                "member_id": member.id,
                "class_id": gym_class.id,
                **snapshot.as_dict(),
                "booking_date": occurrence,
                "start_time": recurring_in.start_time,
                "end_time": recurring_in.end_time,
                "booking_type": BookingType.RECURRING,
                "recurring_booking_id": recurring.id,
            }, commit=False)
            booked_dates.append(occurrence)

        db.commit()
        db.refresh(recurring)
        logger.info(
            f"Reserva recurrente {recurring.id} creada: {len(booked_dates)} reservas "
            f"de {sessions} periodos"
        )

        if booked_dates:
            await self._invalidate_availability(redis_client, gym_class.id, *booked_dates)
        return schemas.RecurringBookingResult(
            recurring_booking=schemas.RecurringBooking.model_validate(recurring),
            bookings_created=len(booked_dates),
            total_sessions=sessions,
        )

    async def get_my_recurring_bookings(
        self, db: Session, *, user: User
    ) -> List[schemas.RecurringBooking]:
        member = member_service.get_member_for_user(db, user)
        rules = recurring_booking_repository.get_active_by_member(db, member_id=member.id)
        return [schemas.RecurringBooking.model_validate(r) for r in rules]

    async def get_all_bookings(self, db: Session) -> List[schemas.BookingWithMember]:
        """Listado completo para entrenadores y administradores."""
        result = []
        for booking in booking_repository.get_all_with_details(db):
            member_user = booking.member.user
            data = schemas.Booking.model_validate(booking).model_dump()
            data["member"] = schemas.MemberSummary(
                id=booking.member_id,
                full_name=member_user.full_name,
                email=member_user.email,
            )
            if booking.class_definition is not None:
                data["class_info"] = ClassSummary.model_validate(booking.class_definition)
            result.append(schemas.BookingWithMember.model_validate(data))
        return result

    async def update_booking_status(
        self, db: Session, *, booking_id: int, status_in: schemas.BookingStatusUpdate,
        redis_client: Optional[Redis] = None
    ) -> schemas.Booking:
        """Marca asistencia: una reserva confirmada pasa a completada o no presentada."""
        booking = booking_repository.get(db, id=booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        if booking.status != BookingStatus.CONFIRMED:
            raise ValidationError("Only confirmed bookings can be updated")

        new_status = BookingStatus(status_in.status)
        update_data = {"status": new_status}
        if new_status == BookingStatus.COMPLETED:
            update_data["checked_in"] = True
            update_data["checked_in_at"] = datetime.now(timezone.utc)

        booking = booking_repository.update(db, db_obj=booking, obj_in=update_data)
        logger.info(f"Reserva {booking.id} marcada como {new_status.value}")
        await self._invalidate_availability(redis_client, booking.class_id, booking.booking_date)
        return schemas.Booking.model_validate(booking)


booking_service = BookingService()
