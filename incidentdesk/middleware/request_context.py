"""
Request Context Middleware Module
=================================

Starlette middleware for request processing.

Features:
- Request ID generation (or propagation of an inbound X-Request-ID)
- Request timing
- One log line per completed request
- Security headers on every response
"""

import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from incidentdesk.core.config import settings
from incidentdesk.core.logging import get_logger, request_id_context

# Initialize logger
logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Bind a request id for the duration of the request and log the outcome.
    """

    # Probes are polled constantly; keep them out of the request log
    _QUIET_PATHS = {"/health", "/ready"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_context.set(request_id)
        request.state.request_id = request_id

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_processing_error",
                error=str(e),
                path=request.url.path,
                method=request.method,
            )
            raise
        finally:
            request_id_context.reset(token)

        process_time = time.perf_counter() - start_time
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        self._log_request(request, response, process_time, request_id)
        return response

    def _log_request(
        self,
        request: Request,
        response: Response,
        process_time: float,
        request_id: str,
    ) -> None:
        if request.url.path in self._QUIET_PATHS:
            return

        log_data = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time * 1000, 2),
            "request_id": request_id,
        }

        if response.status_code >= 500:
            logger.error("request_completed_with_error", **log_data)
        elif response.status_code >= 400:
            logger.warning("request_completed_with_client_error", **log_data)
        else:
            logger.info("request_completed", **log_data)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to all responses.

    Headers added:
    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - Referrer-Policy
    - Strict-Transport-Security (in production)
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
