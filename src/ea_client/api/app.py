"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ea_client import __version__
from ea_client.api.auth import router as auth_router
from ea_client.api.users import router as users_router
from ea_client.app_logging import configure_logging
from ea_client.containers import AppContainer
from ea_client.domain.errors import (
    ConflictError,
    NotFoundError,
    ServiceError,
    StoreError,
    UnauthorizedError,
    ValidationError,
)

_STATUS_CODES: dict[type[ServiceError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    StoreError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        flusher = app.state.container.snapshot_flusher
        if flusher is not None:
            flusher.start()
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="EA Client API", version=__version__, lifespan=lifespan)
    app.state.container = container

    app.include_router(users_router)
    app.include_router(auth_router)

    @app.exception_handler(ServiceError)
    async def service_error_handler(
        request: Request, exc: ServiceError
    ) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "%s %s failed: %s",
                request.method,
                request.url.path,
                exc.details or exc.message,
            )
        return _error_response(status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request",
            _describe_validation_errors(exc),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        details = None
        if container.settings.environment == "local":
            details = f"{type(exc).__name__}: {exc}"
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", details
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok", "message": "EA Client API is running"}

    @app.get("/")
    async def index() -> dict[str, object]:
        """Describe the available endpoints."""
        return {
            "message": "EA Client API",
            "version": __version__,
            "endpoints": {
                "health": "/health",
                "users": "/api/users",
                "auth": {
                    "register": "POST /api/auth/register",
                    "login": "POST /api/auth/login",
                    "me": "GET /api/auth/me",
                },
            },
        }

    return app


def _status_for(exc: ServiceError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in _STATUS_CODES:
            return _STATUS_CODES[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(
    status_code: int, message: str, details: str | None
) -> JSONResponse:
    body: dict[str, str] = {"error": message}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)
