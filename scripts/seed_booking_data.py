#!/usr/bin/env python
"""
Script para poblar una base de datos local con datos de reservas de ejemplo:
un entrenador, un miembro y dos clases. Imprime tokens de prueba para ambos usuarios.
"""

import sys
from pathlib import Path
from datetime import datetime, timedelta, timezone

# Agregar el directorio raíz al path
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

from jose import jwt

from app.core.config import get_settings
from app.create_tables import create_tables
from app.db.session import SessionLocal
from app.models.member import Member
from app.models.schedule import Class
from app.models.user import User, UserRole


def _get_or_create_user(db, email: str, role: UserRole, first_name: str, last_name: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user:
        return user
    user = User(email=email, first_name=first_name, last_name=last_name,
                auth_id=f"local|{email}", role=role)
    db.add(user)
    db.flush()
    return user


def _token_for(user: User) -> str:
    settings = get_settings()
    claims = {
        "sub": user.auth_id,
        "email": user.email,
        "exp": datetime.now(timezone.utc) + timedelta(days=7),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def seed():
    create_tables()
    db = SessionLocal()
    try:
        trainer = _get_or_create_user(db, "trainer@gym.local", UserRole.TRAINER, "Sara", "Coach")
        member_user = _get_or_create_user(db, "member@gym.local", UserRole.MEMBER, "Leo", "Member")

        if not db.query(Member).filter(Member.user_id == member_user.id).first():
            db.add(Member(user_id=member_user.id, membership_number="M-0001"))

        if not db.query(Class).first():
            db.add_all([
                Class(name="Spin", capacity=2, duration=45, trainer_id=trainer.id,
                      trainer_name=trainer.full_name, location="Main Studio"),
                Class(name="Yoga", capacity=12, duration=60, trainer_id=trainer.id,
                      trainer_name=trainer.full_name, location="Studio B"),
            ])

        db.commit()
        print("✅ Datos de ejemplo creados")
        for cls in db.query(Class).all():
            print(f"  - Clase {cls.id}: {cls.name} (capacidad {cls.capacity})")
        print(f"\n🔑 Token entrenador: {_token_for(trainer)}")
        print(f"🔑 Token miembro:    {_token_for(member_user)}")
        return True
    except Exception as e:
        db.rollback()
        print(f"❌ Error al poblar la base de datos: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
