# Inicializador del paquete repositories
from app.repositories.base import BaseRepository
from app.repositories.member import member_repository
from app.repositories.schedule import class_repository
from app.repositories.booking import (
    booking_repository,
    waitlist_repository,
    recurring_booking_repository
)

__all__ = [
    "BaseRepository",
    "member_repository",
    "class_repository",
    "booking_repository",
    "waitlist_repository",
    "recurring_booking_repository",
]
