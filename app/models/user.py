from sqlalchemy import Boolean, Column, Integer, String, DateTime, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from app.db.base_class import Base


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"              # Administrador del gimnasio
    TRAINER = "TRAINER"          # Entrenador
    MEMBER = "MEMBER"            # Miembro regular


class User(Base):
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, index=True, nullable=True)
    last_name = Column(String, index=True, nullable=True)
    is_active = Column(Boolean(), default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Identificador del proveedor de identidad (claim `sub` del token)
    auth_id = Column(String, index=True, unique=True, nullable=True)

    role = Column(Enum(UserRole), default=UserRole.MEMBER, nullable=False)

    member_profile = relationship("Member", back_populates="user", uselist=False)
    taught_classes = relationship("Class", back_populates="trainer")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)
