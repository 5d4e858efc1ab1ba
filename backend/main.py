from contextlib import asynccontextmanager

from fastapi import FastAPI

from api import validation
from core.config import settings
from core.logging import configure_logging, get_logger
from core.middleware import RequestLoggingMiddleware, SlowRequestMiddleware
from core.errors import register_error_handlers
from core.validation import FAILURE_TYPES, list_rules

# Initialize logging before anything else
configure_logging(
    level=settings.LOG_LEVEL,
    json_logs=settings.LOG_JSON,
)

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info(
        "startup",
        message="Validation Gates API starting up",
        rules=len(list_rules()),
        failure_types=len(FAILURE_TYPES.names()),
        default_locale=settings.DEFAULT_LOCALE,
        eager_failure_type_check=settings.EAGER_FAILURE_TYPE_CHECK,
    )
    yield
    log.info("shutdown", message="Validation Gates API shutting down")


app = FastAPI(
    title="Validation Gates API",
    description="Format, numeric, date/time, length and emptiness rules that pass silently or raise a chosen failure type",
    version="0.1.0",
    lifespan=lifespan,
)

# Register structured error handlers
register_error_handlers(app)

# Middleware (order matters: last added = first executed)
app.add_middleware(SlowRequestMiddleware, slow_threshold_ms=1000)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(validation.router, prefix="/api/validation", tags=["validation"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    log.info("server_config", host=settings.BACKEND_HOST, port=settings.BACKEND_PORT, debug=settings.APP_DEBUG)
    uvicorn.run(
        "main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.APP_DEBUG,
        log_config=None,  # Disable uvicorn's default logging, we handle it
    )
