import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from contextlib import asynccontextmanager
import logging

# Importar la función de configuración de logging
from app.core.logging_config import setup_logging

# Llamar a la configuración de logging ANTES de importar/crear otros elementos
setup_logging()

# Ahora importar el resto
from app.api.v1.api import api_router
from app.core.config import get_settings
from app.core.exceptions import BookingDomainError
from app.middleware.timing import TimingMiddleware
from app.db.redis_client import initialize_redis_pool, close_redis_client

logger = logging.getLogger(__name__)

# Obtener la instancia de configuración al inicio del módulo
settings_instance = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Lifespan: Startup iniciado...")

    # Inicializar el pool de conexiones Redis (opcional)
    try:
        pool = await initialize_redis_pool()
        if pool is not None:
            logger.info("Lifespan: Redis connection pool inicializado correctamente.")
    except Exception as e:
        logger.error(f"Lifespan: Error al inicializar Redis connection pool: {e}", exc_info=True)

    yield  # Aplicación en ejecución

    logger.info("Lifespan: Shutdown iniciado...")
    try:
        await close_redis_client()
    except Exception as e:
        logger.error(f"Lifespan: Error cerrando Redis connection pool: {e}", exc_info=True)


app = FastAPI(
    title=settings_instance.PROJECT_NAME,
    description=settings_instance.PROJECT_DESCRIPTION,
    version=settings_instance.VERSION,
    openapi_url=f"{settings_instance.API_V1_STR}/openapi.json",
    docs_url=f"{settings_instance.API_V1_STR}/docs",
    redoc_url=f"{settings_instance.API_V1_STR}/redoc",
    lifespan=lifespan,
)


# Manejadores de errores: todas las respuestas de error usan el sobre {success, message}
async def domain_error_handler(request: Request, exc: BookingDomainError):
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "message": "Invalid request data",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Error no controlado en {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


app.add_exception_handler(BookingDomainError, domain_error_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Añadir middleware para medir el tiempo de respuesta
app.add_middleware(TimingMiddleware)

# Lista de orígenes permitidos para CORS
origins = settings_instance.BACKEND_CORS_ORIGINS or []

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,  # Lista explícita desde settings
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=86400,  # 24 horas en segundos
)

# Incluir routers
app.include_router(api_router, prefix=settings_instance.API_V1_STR)


# Ruta raíz
@app.get("/")
def root():
    return {
        "message": f"Bienvenido a {settings_instance.PROJECT_NAME}",
        "docs": f"{settings_instance.API_V1_STR}/docs",
    }


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings_instance.DEBUG_MODE)
