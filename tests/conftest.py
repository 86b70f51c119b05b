import os

# Configuración de entorno para pruebas, antes de importar la aplicación
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["GYM_TIMEZONE"] = "UTC"
os.environ["REDIS_URL"] = ""

from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.db.base import Base
from app.db.redis_client import get_redis_client
from app.db.session import get_db
from app.main import app
from app.models.member import Member
from app.models.schedule import Class
from app.models.user import User, UserRole


# Usar una base de datos en memoria para pruebas
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session")
def db_engine():
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(db_engine):
    """
    Crea una sesión de base de datos fresca para cada test y deshace todo al finalizar.
    Los commit() de los servicios quedan dentro de la transacción externa.
    """
    connection = db_engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db):
    """
    Crea un cliente de prueba usando la sesión de prueba y sin Redis.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    async def override_get_redis_client():
        yield None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_client] = override_get_redis_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_token(user: User) -> str:
    settings = get_settings()
    claims = {
        "sub": user.auth_id,
        "email": user.email,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def auth_headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {make_token(user)}"}


def _create_user(db, *, email: str, role: UserRole, first_name: str, last_name: str) -> User:
    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        auth_id=f"auth|{email}",
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def trainer_user(db) -> User:
    return _create_user(db, email="trainer@test.com", role=UserRole.TRAINER,
                        first_name="Tina", last_name="Trainer")


@pytest.fixture
def make_member(db):
    """Fábrica de usuarios con perfil de miembro."""
    counter = {"n": 0}

    def _make(first_name: str = "Member") -> User:
        counter["n"] += 1
        n = counter["n"]
        user = _create_user(db, email=f"member{n}@test.com", role=UserRole.MEMBER,
                            first_name=first_name, last_name=str(n))
        db.add(Member(user_id=user.id, membership_number=f"M-{n:04d}"))
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def member_user(make_member) -> User:
    return make_member("Alice")


@pytest.fixture
def member_headers(member_user) -> dict:
    return auth_headers_for(member_user)


@pytest.fixture
def trainer_headers(trainer_user) -> dict:
    return auth_headers_for(trainer_user)


@pytest.fixture
def make_class(db, trainer_user):
    def _make(capacity: int = 2, name: str = "Spin") -> Class:
        gym_class = Class(
            name=name,
            capacity=capacity,
            duration=60,
            trainer_id=trainer_user.id,
            trainer_name=trainer_user.full_name,
            location="Main Studio",
        )
        db.add(gym_class)
        db.commit()
        db.refresh(gym_class)
        return gym_class

    return _make


@pytest.fixture
def gym_class(make_class) -> Class:
    return make_class(capacity=2)


@pytest.fixture
def future_date() -> date:
    """Fecha de calendario una semana después de hoy (UTC)."""
    return datetime.now(timezone.utc).date() + timedelta(days=7)


@pytest.fixture
def auth_headers():
    """Cabeceras Authorization con un token firmado para el usuario dado."""
    return auth_headers_for


@pytest.fixture
def booking_payload():
    def _payload(class_id: int, booking_date: date, start_time: str = "09:00",
                 end_time: str = "10:00", **extra) -> dict:
        payload = {
            "classId": class_id,
            "bookingDate": booking_date.isoformat(),
            "startTime": start_time,
            "endTime": end_time,
        }
        payload.update(extra)
        return payload

    return _payload
