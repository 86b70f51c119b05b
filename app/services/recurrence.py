"""
Expansión de reglas de reserva recurrente en fechas concretas.

El recorrido empieza en `start_date` y avanza día a día hasta encontrar el día
de la semana pedido; tras cada coincidencia salta 7 días (semanal) o un mes
natural (mensual). El salto mensual desborda los meses cortos: 31 de enero + 1
mes cae en marzo.
"""
import calendar
from datetime import date, timedelta
from typing import Iterator

from app.models.booking import RecurrenceType

WEEKDAY_NAMES = list(calendar.day_name)  # ["Monday", ..., "Sunday"]


def weekday_name(value: date) -> str:
    return WEEKDAY_NAMES[value.weekday()]


def total_sessions(recurrence_type: RecurrenceType, start_date: date, end_date: date) -> int:
    """Número de periodos entre las dos fechas, no el número de reservas creadas."""
    if recurrence_type == RecurrenceType.WEEKLY:
        return (end_date - start_date).days // 7 + 1
    year_diff = end_date.year - start_date.year
    month_diff = end_date.month - start_date.month
    return year_diff * 12 + month_diff + 1


def add_month(value: date) -> date:
    """Suma un mes conservando el día; si no existe, el exceso pasa al mes siguiente."""
    year = value.year + value.month // 12
    month = value.month % 12 + 1
    days_in_month = calendar.monthrange(year, month)[1]
    if value.day <= days_in_month:
        return value.replace(year=year, month=month)
    return date(year, month, days_in_month) + timedelta(days=value.day - days_in_month)


def expand_occurrences(
    recurrence_type: RecurrenceType, recurrence_day: str, start_date: date, end_date: date
) -> Iterator[date]:
    current = start_date
    while current <= end_date:
        if weekday_name(current) == recurrence_day:
            yield current
            if recurrence_type == RecurrenceType.WEEKLY:
                current = current + timedelta(days=7)
            else:
                current = add_month(current)
        else:
            current = current + timedelta(days=1)
