"""Request Middleware for Logging and Tracing

Provides:
- Request correlation IDs, echoed back in ``X-Correlation-ID``
- Rule name bound into the log context for ``/api/validation/<rule>``
- Request/response logging with timing and slow-request warnings
"""
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from core.logging import (
    generate_correlation_id,
    bind_context,
    clear_context,
    api_logger,
)

log = api_logger()

RULE_PATH_PREFIX = "/api/validation/"


def _rule_from_path(path: str) -> str | None:
    if not path.startswith(RULE_PATH_PREFIX):
        return None
    name = path[len(RULE_PATH_PREFIX):].strip("/")
    return name if name and name != "rules" else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request once on entry and once on completion."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID") or generate_correlation_id()

        clear_context()
        bind_context(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else "unknown",
        )
        rule_name = _rule_from_path(request.url.path)
        if rule_name:
            bind_context(rule=rule_name)

        start = time.perf_counter()
        log.info("request_started", user_agent=request.headers.get("User-Agent", "")[:100])

        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            response.headers["X-Correlation-ID"] = correlation_id

            # 422 is a rejected input, not a server-side problem
            status = response.status_code
            log_method = log.info if status < 400 or status == 422 else (log.warning if status < 500 else log.error)
            log_method("request_completed", status=status, duration_ms=duration_ms)
            return response

        except Exception as exc:
            log.exception(
                "request_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise
        finally:
            clear_context()


class SlowRequestMiddleware(BaseHTTPMiddleware):
    """Warns about requests slower than ``slow_threshold_ms``."""

    def __init__(self, app, slow_threshold_ms: float = 1000):
        super().__init__(app)
        self.slow_threshold_ms = slow_threshold_ms

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        if duration_ms > self.slow_threshold_ms:
            log.warning(
                "slow_request",
                duration_ms=round(duration_ms, 2),
                threshold_ms=self.slow_threshold_ms,
                rule=_rule_from_path(request.url.path),
            )
        return response
