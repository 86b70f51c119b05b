from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class Member(Base):
    """Perfil de miembro. Cada usuario tiene como máximo uno."""
    __tablename__ = "member"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user.id"), unique=True, nullable=False, index=True)
    membership_number = Column(String, unique=True, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="member_profile")
    bookings = relationship("Booking", back_populates="member")
    waitlist_entries = relationship("WaitlistEntry", back_populates="member")
    recurring_bookings = relationship("RecurringBooking", back_populates="member")
