"""Error Handlers - global exception handlers mapping failures to action envelopes.

Invariants:
    - VerimailError -> its envelope, HTTP status == envelope code
    - RequestValidationError -> 400 VALIDATION_ERROR with field-level details
    - Exception (catch-all) -> bare {code: 500}, never leaks internal details
    - All three log through the same logger with error_code/category/path

Design Decisions:
    - Three-layer handler: domain (VerimailError), validation (Pydantic), catch-all (Exception)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from verimail.core.errors import ErrorCategory, ErrorSeverity, VerimailError

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_verimail_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_verimail_error_handler(app: FastAPI) -> None:

    @app.exception_handler(VerimailError)
    async def verimail_error_handler(request: Request, exc: VerimailError):
        """Handle all verimail domain/downstream/infrastructure errors."""
        logger.log(
            _LOG_LEVELS.get(exc.severity, logging.ERROR),
            f"VerimailError: {exc.message}",
            extra={
                "error_code": exc.i18n,
                "category": exc.category.value,
                "path": request.url.path,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}",
            extra={
                "error_code": "VALIDATION_ERROR",
                "category": ErrorCategory.VALIDATION.value,
                "path": request.url.path,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={
                "error_code": "INTERNAL_ERROR",
                "category": ErrorCategory.INTERNAL.value,
                "path": request.url.path,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"code": status.HTTP_500_INTERNAL_SERVER_ERROR},
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "code": status.HTTP_400_BAD_REQUEST,
        "i18n": "VALIDATION_ERROR",
        "data": {
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
