from fastapi import APIRouter

# Import modular packages directly
from app.api.v1.endpoints.bookings import router as bookings_router

api_router = APIRouter()

# Bookings module (availability, bookings, waitlist, recurring bookings)
api_router.include_router(bookings_router)
