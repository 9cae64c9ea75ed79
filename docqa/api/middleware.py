"""
docqa/api/middleware.py

Custom ASGI middleware for docqa.

RequestLoggingMiddleware
    Logs every HTTP request with method, path, status code, and wall-clock
    duration using structlog.  Excluded from logging:
      - GET /health  (high-frequency liveness probe)
      - GET /docs, /redoc, /openapi.json  (OpenAPI UI assets)

UploadSizeLimitMiddleware
    Rejects an upload whose declared Content-Length already exceeds the
    document ceiling (plus room for the multipart envelope) before any of
    the body is read.  Responds 400 with the standard error envelope.
"""
from __future__ import annotations

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from docqa.errors import UploadError, normalize_error

logger = structlog.get_logger(__name__)

# Paths that generate too much noise to log on every call.
_SILENT_PATHS: frozenset[str] = frozenset(
    {"/health", "/docs", "/redoc", "/openapi.json"}
)

# Multipart boundaries, part headers and the text fields ride on top of the file.
MULTIPART_OVERHEAD_BYTES = 1024 * 1024


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request's method, path, status code, and latency."""

    async def dispatch(self, request: Request, call_next: object) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)  # type: ignore[arg-type]
        duration_ms = (time.perf_counter() - start) * 1000

        if request.url.path not in _SILENT_PATHS:
            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
                client=request.client.host if request.client else None,
            )

        return response


class UploadSizeLimitMiddleware(BaseHTTPMiddleware):
    """Refuse oversized uploads on the declared Content-Length alone."""

    def __init__(self, app: ASGIApp, max_bytes: int, paths: frozenset[str]) -> None:
        super().__init__(app)
        self._limit = max_bytes + MULTIPART_OVERHEAD_BYTES
        self._paths = paths

    async def dispatch(self, request: Request, call_next: object) -> Response:
        if request.method == "POST" and request.url.path in self._paths:
            declared = request.headers.get("content-length")
            if declared is not None and declared.isdigit() and int(declared) > self._limit:
                error = normalize_error(UploadError("file too large"))
                logger.info(
                    "upload_rejected_by_size",
                    path=request.url.path,
                    content_length=int(declared),
                    limit=self._limit,
                )
                return JSONResponse(status_code=error.status_code, content=error.to_body())
        return await call_next(request)  # type: ignore[operator]
