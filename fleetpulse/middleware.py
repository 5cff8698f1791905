import logging, time
from fastapi import Request
from fastapi.responses import PlainTextResponse
from typing import Callable

logger = logging.getLogger("fleetpulse.access")

SENSITIVE_PREFIXES = ("/server/", "/config/", "/.env")
ROUTED_PATHS = ("/health", "/metrics")


def activity_middleware(app, max_body_bytes: int):
    @app.middleware("http")
    async def log_activity(request: Request, call_next: Callable):
        path = request.url.path
        if path.startswith(SENSITIVE_PREFIXES):
            return PlainTextResponse("Forbidden", status_code=403)

        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > max_body_bytes:
            return PlainTextResponse("Request body too large", status_code=413)

        # los estáticos del dashboard no se registran
        if not (path.startswith("/api") or path in ROUTED_PATHS):
            return await call_next(request)

        started = time.monotonic()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            ip = request.client.host if request.client else None
            logger.info("%s %s -> %s (%s, %.1f ms)", request.method, path, status, ip,
                        (time.monotonic() - started) * 1000)
