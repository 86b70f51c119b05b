"""
Services module for GymBookingAPI app

This module includes all service-related modules, which implement the business logic of the application.
Services interact with models, repositories, and Redis.
"""

# Inicializador del paquete services

# servicios disponibles
from app.services.cache_service import cache_service
from app.services.member import member_service
from app.services.booking import booking_service

# Exportar servicios para acceso fácil
__all__ = [
    "cache_service",
    "member_service",
    "booking_service",
]
