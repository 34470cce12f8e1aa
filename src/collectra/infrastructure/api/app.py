"""FastAPI application for Collectra.

create_app() wires CORS, correlation IDs, health probes, the collection
session routes and the mapping from domain errors to HTTP responses.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from collectra.core.config import get_settings
from collectra.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    new_correlation_id,
)
from collectra.domain.errors import (
    ConflictError,
    DomainError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from collectra.domain.services import SessionNumberExhaustedError
from collectra.infrastructure.api.schemas import ErrorResponse, FieldErrorResponse
from collectra.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)

logger = get_logger(__name__)

ERROR_STATUS_CODES: dict[type[DomainError], int] = {
    ValidationError: 422,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    InvalidStateError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables on startup and dispose of the engine on shutdown."""
    settings = get_settings()
    configure_logging(settings)
    logger.info(
        "Starting Collectra",
        version=settings.app_version,
        environment=settings.environment,
        api_prefix=settings.api_prefix,
    )

    try:
        await init_database()
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    await close_database()
    logger.info("Collectra stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    docs_enabled = settings.is_development

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Collection session management for recycling operations",
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=["ETag", "X-Correlation-ID"],
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)
    return app


def service_info(status_text: str) -> dict[str, str]:
    return {"status": status_text, "service": "Collectra", "version": get_settings().app_version}


def register_health_check(app: FastAPI) -> None:
    """Liveness (/health, /live) and readiness (/ready) probes."""

    @app.get("/health", tags=["health"])
    async def health_check():
        return service_info("healthy")

    @app.get("/live", tags=["health"])
    async def liveness_check():
        return service_info("alive")

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Ready only when the database answers."""
        if await get_db_manager().check_connection():
            return {**service_info("ready"), "database": "connected"}
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={**service_info("not_ready"), "database": "disconnected"},
        )


def register_routes(app: FastAPI) -> None:
    from collectra.infrastructure.api.routes import collection_sessions_router

    settings = get_settings()
    app.include_router(collection_sessions_router, prefix=f"{settings.api_prefix}/collection-sessions")

    @app.get(settings.api_prefix, tags=["root"])
    async def api_root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "resources": [f"{settings.api_prefix}/collection-sessions"],
        }


def status_code_for(exc: DomainError, request: Request) -> int:
    """HTTP status for a domain error.

    A version conflict is a failed precondition (412) when the client sent
    If-Match, and a plain conflict (409) otherwise.
    """
    if isinstance(exc, ConflictError) and request.headers.get("if-match") is not None:
        return status.HTTP_412_PRECONDITION_FAILED
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def error_body(exc: DomainError) -> dict:
    body = ErrorResponse(error=exc.code.value, message=exc.message)
    if isinstance(exc, ValidationError):
        body.errors = [FieldErrorResponse(field=e.field, message=e.message, code=e.code) for e in exc.errors]
    if isinstance(exc, ConflictError):
        body.current_version = exc.actual_version
    return body.model_dump(exclude_none=True)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        status_code = status_code_for(exc, request)
        logger.info(
            "Request rejected",
            method=request.method,
            path=request.url.path,
            error_code=exc.code.value,
            status_code=status_code,
        )
        return JSONResponse(status_code=status_code, content=error_body(exc))

    @app.exception_handler(SessionNumberExhaustedError)
    async def session_number_exhausted_handler(request: Request, exc: SessionNumberExhaustedError):
        logger.error("Session numbers exhausted", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "SESSION_NUMBERS_EXHAUSTED", "message": str(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            method=request.method,
            path=request.url.path,
            exc_type=type(exc).__name__,
            error=str(exc),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "INTERNAL_ERROR",
                "message": str(exc) if get_settings().debug else "An unexpected error occurred",
            },
        )


def register_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def correlation_middleware(request: Request, call_next):
        """Bind X-Correlation-ID (or a new one) for the request and echo it back."""
        correlation_id = request.headers.get("X-Correlation-ID") or new_correlation_id()
        bind_correlation_id(correlation_id)
        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


app = create_app()
