from app.schemas.response import ApiResponse, CamelModel, ErrorResponse
from app.schemas.schedule import ClassSummary
from app.schemas.booking import (
    Availability,
    Booking,
    BookingCreate,
    BookingStatusUpdate,
    BookingWithMember,
    MemberSummary,
    MyBookings,
    RecurringBooking,
    RecurringBookingCreate,
    RecurringBookingResult,
    WaitlistEntry,
    WaitlistOutcome,
)
