from app.models.user import User, UserRole
from app.models.member import Member
from app.models.schedule import Class
from app.models.booking import (
    Booking, WaitlistEntry, RecurringBooking, ClassSnapshot,
    BookingStatus, BookingType, WaitlistStatus, RecurrenceType, RecurringBookingStatus
)
