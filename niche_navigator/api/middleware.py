"""Request middleware: access logging, quota reporting and response hardening"""

import time
import uuid
import logging
from typing import Callable, Dict
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

SECURITY_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs one line per request and tags the response with a request id,
    its processing time and the YouTube quota spent so far today.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        started = time.perf_counter()
        fields = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else "unknown",
        }

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed = time.perf_counter() - started
            logger.error(
                f"{request.method} {request.url.path} raised {type(e).__name__}: {e}",
                extra={**fields, "duration_ms": round(elapsed * 1000, 1)},
                exc_info=True
            )
            response = JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "request_id": request_id}
            )
        else:
            elapsed = time.perf_counter() - started
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} in {elapsed:.3f}s",
                extra={**fields, "status": response.status_code, "duration_ms": round(elapsed * 1000, 1)}
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"

        youtube_client = getattr(request.app.state, "youtube_client", None)
        if youtube_client is not None:
            response.headers["X-YouTube-Quota-Used"] = str(youtube_client.get_quota_usage())

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds fixed hardening headers; the API is JSON-only and never framed"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
