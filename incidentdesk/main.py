"""
Main Application Entry Point
============================

Responsibilities:
- Initialize FastAPI application
- Configure middleware stack
- Register API routers
- Set up exception handlers
- Provide health check endpoints

IMPORTANT:
    Managed databases get their schema from Alembic migrations.
    DB_AUTO_CREATE only bootstraps local SQLite files.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from incidentdesk.api import incidents
from incidentdesk.core.config import settings
from incidentdesk.core.exceptions import IncidentDeskException, StorageError
from incidentdesk.core.logging import configure_logging, get_logger
from incidentdesk.db.session import check_database_connection, init_db
from incidentdesk.middleware.request_context import (
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
)
from incidentdesk.schemas import HealthResponse, field_errors

configure_logging()
logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


# =====================================
# Application Lifespan Handler
# =====================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
    - Log application start
    - Bootstrap the SQLite schema when enabled
    - Check database connection
    """
    logger.info(
        "application_starting",
        app_name=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    if settings.DB_AUTO_CREATE and settings.is_sqlite:
        init_db()

    if not check_database_connection():
        logger.error("database_unreachable_on_startup")
    else:
        logger.info("database_connection_established")

    yield

    logger.info("application_shutdown_complete")


# =====================================
# FastAPI App Initialization
# =====================================

app = FastAPI(
    title=settings.APP_NAME,
    description="Incident tracking API: create, list, inspect and update production incidents.",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)


# =====================================
# Middleware
# =====================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
    max_age=3600,
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestContextMiddleware)


# =====================================
# Exception Handlers
# =====================================

def error_body(message: str, details: dict | None = None) -> dict:
    body = {"error": message}
    if details:
        body["details"] = details
    return body


@app.exception_handler(IncidentDeskException)
async def incidentdesk_exception_handler(request: Request, exc: IncidentDeskException):
    """
    Handle application exceptions.

    Client errors are returned with their message and field details.
    Server errors are logged and returned without internal detail.
    """
    if exc.is_client_error:
        logger.warning(
            "client_error",
            exception_type=type(exc).__name__,
            message=exc.message,
            status_code=exc.status_code,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.details),
        )

    logger.error(
        "server_error",
        exception_type=type(exc).__name__,
        message=exc.message,
        operation=exc.operation if isinstance(exc, StorageError) else None,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(INTERNAL_ERROR_MESSAGE),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle request parsing errors such as malformed JSON.
    """
    details = field_errors(exc.errors())

    logger.warning(
        "request_validation_error",
        path=request.url.path,
        fields=sorted(details),
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation failed", details),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected exceptions.

    Logs the error and returns a generic error message.
    """
    logger.error(
        "unhandled_exception",
        exception_type=type(exc).__name__,
        message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(INTERNAL_ERROR_MESSAGE),
    )


# =====================================
# Register Routers
# =====================================

app.include_router(incidents.router, prefix=settings.API_PREFIX)


# =====================================
# Health Check Endpoints
# =====================================

@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Liveness Check",
)
def health_check():
    return {"status": "ok"}


@app.get(
    "/ready",
    tags=["Health"],
    summary="Readiness Check",
    description="Returns whether the service can reach its database.",
)
def readiness_check():
    """
    Readiness check for container orchestration.

    Returns:
        200 if ready, 503 if not ready
    """
    if not check_database_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )

    return {"status": "ready"}
