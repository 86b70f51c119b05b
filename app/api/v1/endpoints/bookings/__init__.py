"""
Bookings Module - API Endpoints

This module organizes the class booking workflow:
- Availability of a class on a date (public)
- Single bookings, with automatic waitlisting when a slot is full
- Cancellation with promotion of the next waiting member
- Waitlist management
- Recurring (weekly/monthly) bookings

Fixed sub-paths are registered before the core router so that
`/bookings/{booking_id}` never shadows them.
"""

from fastapi import APIRouter

from app.api.v1.endpoints.bookings import (
    availability,
    waitlist,
    recurring,
    bookings
)

router = APIRouter()

router.include_router(availability.router, prefix="/bookings/availability", tags=["availability"])
router.include_router(waitlist.router, prefix="/bookings/waitlist", tags=["waitlist"])
router.include_router(recurring.router, prefix="/bookings/recurring", tags=["recurring-bookings"])
router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
