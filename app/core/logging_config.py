import logging
import sys

from app.core.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(filename)s:%(lineno)d | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers de terceros que se fijan a un nivel propio
THIRD_PARTY_LEVELS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "redis": logging.WARNING,
    "watchfiles": logging.WARNING,
}


def resolve_log_level(log_level, debug_mode: bool) -> int:
    """LOG_LEVEL manda sobre DEBUG_MODE; un nombre desconocido cae a INFO."""
    if log_level:
        level = logging.getLevelName(log_level.strip().upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if debug_mode else logging.INFO


def setup_logging():
    """Configura el logger raíz del servicio de reservas con salida a stdout."""
    settings = get_settings()
    level = resolve_log_level(settings.LOG_LEVEL, settings.DEBUG_MODE)

    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    # Uvicorn puede haber registrado sus handlers antes
    root.handlers.clear()
    root.addHandler(handler)

    for name, third_party_level in THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(third_party_level)

    logging.getLogger(__name__).info(
        "Logging de %s listo (nivel %s, zona horaria %s)",
        settings.PROJECT_NAME, logging.getLevelName(level), settings.GYM_TIMEZONE,
    )
