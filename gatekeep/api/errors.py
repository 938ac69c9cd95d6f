"""Map service-layer errors to JSON responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gatekeep.services.errors import AccountLockedError, RateLimitedError, ServiceError

logger = logging.getLogger(__name__)


def _error_response(exc: ServiceError, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.error_code,
                "message": exc.message,
                "detail": exc.detail or None,
            }
        },
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install one handler for every ServiceError subclass."""

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "service_error path=%s method=%s code=%s",
                request.url.path,
                request.method,
                exc.error_code,
            )
        headers = None
        if isinstance(exc, (RateLimitedError, AccountLockedError)):
            headers = {"Retry-After": str(exc.retry_after_seconds)}
        return _error_response(exc, headers)
