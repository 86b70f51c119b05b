import time
import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

logger = logging.getLogger("timing_middleware")


class TimingMiddleware(BaseHTTPMiddleware):
    """
    Middleware que mide el tiempo de respuesta de cada solicitud y lo expone
    en la cabecera X-Process-Time.
    """

    def __init__(self, app: ASGIApp, slow_threshold_ms: float = 700):
        super().__init__(app)
        self.slow_threshold_ms = slow_threshold_ms

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        method = request.method
        path = request.url.path

        response = await call_next(request)

        process_time = (time.perf_counter() - start_time) * 1000  # En milisegundos
        response.headers["X-Process-Time"] = f"{process_time:.2f}ms"

        if process_time > self.slow_threshold_ms:
            logger.warning(f"{method} {path} -> {response.status_code} LENTO ({process_time:.2f}ms)")
        else:
            logger.info(f"{method} {path} -> {response.status_code} ({process_time:.2f}ms)")
        return response
