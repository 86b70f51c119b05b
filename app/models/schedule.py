from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class Class(Base):
    """Definición de clases que se ofrecen. La capacidad es por clase y vale para cualquier fecha."""
    __tablename__ = "class"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=False)
    duration = Column(Integer, nullable=False, default=60)  # Duración en minutos
    trainer_id = Column(Integer, ForeignKey("user.id"), nullable=True)
    trainer_name = Column(String, nullable=True)  # Nombre a mostrar del entrenador
    location = Column(String, nullable=False, default="Main Studio")
    is_active = Column(Boolean, default=True)

    trainer = relationship("User", back_populates="taught_classes")
    bookings = relationship("Booking", back_populates="class_definition")

    # Campos de auditoría
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
