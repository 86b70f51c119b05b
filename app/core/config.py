import os
from typing import Any, List, Optional, Union
from functools import lru_cache
import logging

import pytz

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Configurar el logger
logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Permitir campos extra en .env
    )

    # Configuración básica
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-in-production")
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None

    # Información del proyecto
    PROJECT_NAME: str = "GymBookingAPI"
    PROJECT_DESCRIPTION: str = "API con FastAPI para reservas de clases de gimnasio"
    VERSION: str = "0.1.0"

    # Debug mode
    DEBUG_MODE: bool = os.getenv("DEBUG_MODE", "False").lower() in ("true", "1", "t")
    # Nivel de log explícito (DEBUG, INFO, WARNING...); si no se define se deriva de DEBUG_MODE
    LOG_LEVEL: Optional[str] = None

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode='before')
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    DATABASE_URL: str = "sqlite:///./gym_booking.db"

    @field_validator("DATABASE_URL", mode="before")
    def ensure_proper_url_format(cls, v: Optional[str]) -> str:
        """Asegura que DATABASE_URL esté en el formato que entiende SQLAlchemy."""
        if not v:
            return "sqlite:///./gym_booking.db"
        if v.startswith('postgres://'):
            logger.info("Corrigiendo formato de postgres:// a postgresql://")
            return 'postgresql://' + v[len('postgres://'):]
        return v

    # Reglas de reservas
    GYM_TIMEZONE: str = "UTC"  # Zona horaria en la que se interpretan bookingDate + "HH:mm"
    CANCELLATION_NOTICE_HOURS: int = 2

    @field_validator("GYM_TIMEZONE")
    def validate_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"GYM_TIMEZONE desconocida: {v}")
        return v

    # Redis (opcional: sin URL no hay caché)
    REDIS_URL: Optional[str] = None
    REDIS_POOL_MAX_CONNECTIONS: int = 50
    REDIS_POOL_SOCKET_TIMEOUT: int = 5
    REDIS_POOL_HEALTH_CHECK_INTERVAL: int = 30
    AVAILABILITY_CACHE_TTL: int = 60


@lru_cache()
def get_settings() -> Settings:
    """Obtener configuración cacheada"""
    return Settings()


settings = get_settings()
