"""
Utilidades de fecha/hora para las reservas.

Las reservas guardan una fecha de calendario (`booking_date`) y horas de pared
"HH:mm" (`start_time`, `end_time`). Estas funciones combinan ambos valores
interpretándolos en la zona horaria del gimnasio y los convierten a UTC para
compararlos con el instante actual.
"""
from datetime import date, datetime, time, timezone
from typing import Optional
import pytz


def parse_hhmm(value: str) -> time:
    """
    Convierte una cadena "HH:mm" en un objeto time.

    Raises:
        ValueError: Si la cadena no tiene el formato esperado
    """
    try:
        hours, minutes = value.split(":")
        return time(int(hours), int(minutes))
    except (AttributeError, ValueError):
        raise ValueError(f"Hora inválida, se esperaba HH:mm: {value!r}")


def convert_naive_to_gym_timezone(naive_dt: datetime, gym_timezone: str) -> datetime:
    """
    Interpreta un datetime naive como hora local del gimnasio.

    Args:
        naive_dt: Datetime naive que representa la hora local del gimnasio
        gym_timezone: Zona horaria del gimnasio (ej: 'America/Mexico_City')

    Returns:
        Datetime aware en la zona horaria del gimnasio
    """
    if naive_dt.tzinfo is not None:
        raise ValueError("El datetime debe ser naive (sin timezone)")

    tz = pytz.timezone(gym_timezone)
    return tz.localize(naive_dt)


def combine_local(booking_date: date, hhmm: str, gym_timezone: str) -> datetime:
    """Fecha de calendario + "HH:mm" como datetime aware en la zona del gimnasio."""
    naive = datetime.combine(booking_date, parse_hhmm(hhmm))
    return convert_naive_to_gym_timezone(naive, gym_timezone)


def slot_to_utc(booking_date: date, hhmm: str, gym_timezone: str) -> datetime:
    """Instante UTC en el que empieza (o termina) un hueco de reserva."""
    return combine_local(booking_date, hhmm, gym_timezone).astimezone(timezone.utc)


def hours_until(booking_date: date, hhmm: str, gym_timezone: str,
                now: Optional[datetime] = None) -> float:
    """
    Horas que faltan desde `now` hasta el inicio del hueco. Negativo si ya pasó.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    delta = slot_to_utc(booking_date, hhmm, gym_timezone) - now
    return delta.total_seconds() / 3600


def is_slot_in_future(booking_date: date, hhmm: str, gym_timezone: str,
                      now: Optional[datetime] = None) -> bool:
    return hours_until(booking_date, hhmm, gym_timezone, now=now) > 0
