"""
Excepciones de dominio lanzadas por la capa de servicios.

Cada excepción lleva el código HTTP con el que se renderiza; los manejadores
registrados en `app.main` las convierten en el sobre `{success: false, message}`.
"""
from fastapi import status


class BookingDomainError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BookingDomainError):
    """Raised when a resource is not found."""
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(BookingDomainError):
    """Raised when validation fails."""
    status_code = status.HTTP_400_BAD_REQUEST


class PermissionError(BookingDomainError):
    """Raised when user lacks permission for an operation."""
    status_code = status.HTTP_403_FORBIDDEN
