"""
Review Pool - FastAPI Application
=================================

Main application factory with all routers and middleware.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reviewpool.api import pull_requests, teams, users
from reviewpool.core.config import settings
from reviewpool.core.database import close_db, init_db
from reviewpool.core.errors import (
    InactiveReviewerError,
    NoCandidateError,
    NotFoundError,
    PullRequestExistsError,
    PullRequestMergedError,
    ReviewerAlreadyAssignedError,
    ReviewerNotAssignedError,
    ReviewPoolError,
    TeamExistsError,
)
from reviewpool.core.schemas import ErrorDetail, ErrorResponse, HealthResponse

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if settings.is_production else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


# Engine error -> HTTP status. First match wins.
ERROR_STATUS: list[tuple[type[ReviewPoolError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (TeamExistsError, status.HTTP_400_BAD_REQUEST),
    (PullRequestExistsError, status.HTTP_409_CONFLICT),
    (PullRequestMergedError, status.HTTP_409_CONFLICT),
    (ReviewerNotAssignedError, status.HTTP_409_CONFLICT),
    (ReviewerAlreadyAssignedError, status.HTTP_409_CONFLICT),
    (NoCandidateError, status.HTTP_409_CONFLICT),
    (InactiveReviewerError, status.HTTP_400_BAD_REQUEST),
]


# Plain bad requests carry an empty code on the wire.
UNCODED_ERRORS: tuple[type[ReviewPoolError], ...] = (InactiveReviewerError,)


def status_for(exc: ReviewPoolError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump(),
    )


# ==========================================================================
# Lifespan
# ==========================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Startup:
    - Initialize database connection

    Shutdown:
    - Close database connections
    """
    # Startup
    logger.info("Starting Review Pool", version=settings.APP_VERSION)

    await init_db()
    logger.info("Database initialized")

    yield

    # Shutdown
    logger.info("Shutting down Review Pool")
    await close_db()
    logger.info("Database connections closed")


# ==========================================================================
# App Factory
# ==========================================================================

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Pull request reviewer assignment service",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    # ==========================================================================
    # Middleware
    # ==========================================================================

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ==========================================================================
    # Exception Handlers
    # ==========================================================================

    @app.exception_handler(ReviewPoolError)
    async def engine_exception_handler(request: Request, exc: ReviewPoolError) -> JSONResponse:
        """Map typed engine errors to their status codes."""
        status_code = status_for(exc)
        code = "" if isinstance(exc, UNCODED_ERRORS) else exc.code
        logger.info(
            "Request rejected",
            code=exc.code,
            path=request.url.path,
            **exc.details,
        )
        return error_response(status_code, code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Bad bodies and missing query parameters are plain 400s."""
        message = "invalid request body"
        for error in exc.errors():
            loc = error.get("loc", ())
            if len(loc) >= 2 and loc[0] == "query":
                message = f"{loc[1]} parameter is required"
                break
        return error_response(status.HTTP_400_BAD_REQUEST, "", message)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            path=request.url.path,
            method=request.method,
        )

        if settings.is_development:
            detail = str(exc)
        else:
            detail = "An unexpected error occurred"

        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_ERROR",
            detail,
        )

    # ==========================================================================
    # Routers
    # ==========================================================================

    # Health check (no prefix)
    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Check application health."""
        return HealthResponse(
            status="healthy",
            version=settings.APP_VERSION,
            environment=settings.ENVIRONMENT,
            database="sqlite" if settings.is_sqlite else "postgresql",
        )

    app.include_router(teams.router)
    app.include_router(users.router)
    app.include_router(pull_requests.router)

    # ==========================================================================
    # Root Endpoint
    # ==========================================================================

    @app.get("/", tags=["Root"])
    async def root() -> dict:
        """Root endpoint with API info."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": "/docs" if settings.is_development else "Disabled in production",
            "health": "/health",
        }

    return app


# ==========================================================================
# Application Instance
# ==========================================================================

app = create_app()


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run(
        "reviewpool.api.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.is_development,
        log_level="info",
    )


# ==========================================================================
# Development Server
# ==========================================================================

if __name__ == "__main__":
    run()
