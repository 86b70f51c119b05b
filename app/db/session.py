from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.exc import SQLAlchemyError
import logging

from app.core.config import get_settings

logger = logging.getLogger(__name__)

settings_instance = get_settings()

db_url = str(settings_instance.DATABASE_URL)

# Ocultar credenciales en el log
display_url = db_url
if '@' in display_url:
    scheme = display_url.split('://')[0]
    host_info = display_url.split('@')[-1]
    display_url = f"{scheme}://***@{host_info}"

logger.info(f"URL utilizada para crear el engine: {display_url}")

engine_kwargs = {"echo": False}
if db_url.startswith("sqlite"):
    # SQLite se usa en desarrollo local; FastAPI puede servir desde otro hilo
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs.update(
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=180,
    )

engine = create_engine(db_url, **engine_kwargs)

# Crear clase de sesión
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependencia para obtener la sesión de DB
def get_db():
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Error de SQLAlchemy en la sesión: {e}", exc_info=True)
        db.rollback()  # Hacer rollback en caso de error
        raise  # Relanzar la excepción para que FastAPI la maneje
    finally:
        db.close()
