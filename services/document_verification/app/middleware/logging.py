"""Request/response logging middleware for Document Verification service."""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shared.utils.logging import get_correlation_id, get_logger

logger = get_logger(__name__)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each registry request with its caller, outcome and timing."""

    def __init__(
        self,
        app,
        caller_header: str = "X-User-ID",
        enabled: bool = True,
        exclude_paths: list[str] | None = None,
    ):
        """Initialize middleware.

        Args:
            app: FastAPI application
            caller_header: Header carrying the authenticated caller identity
            enabled: Whether logging is enabled
            exclude_paths: Path suffixes to skip (e.g., health checks)
        """
        super().__init__(app)
        self.caller_header = caller_header
        self.enabled = enabled
        self.exclude_paths = exclude_paths or ["/health", "/ready", "/metrics"]

    def _is_excluded(self, path: str) -> bool:
        return any(path.endswith(excluded) for excluded in self.exclude_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        """Process request with logging."""
        path = request.url.path
        if not self.enabled or self._is_excluded(path):
            return await call_next(request)

        context = {
            "correlation_id": get_correlation_id(),
            "method": request.method,
            "path": path,
            "caller": request.headers.get(self.caller_header),
            "client_ip": get_client_ip(request),
        }
        logger.info("request_started", **context)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(e),
                error_type=type(e).__name__,
                **context,
            )
            raise

        # Rejected registry calls surface as 4xx
        log_method = logger.info if response.status_code < 400 else logger.warning
        log_method(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            **context,
        )
        return response
