"""
Custom exception classes.

Registration-time errors (ConfigurationError, DeploymentError) abort startup.
Request-time errors (SetupError, InvocationError) are converted to responses
by the invocation pipeline and never reach the host server.
"""

import logging
from typing import Any, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Base exception class for the Lambda gateway."""

    pass


class ConfigurationError(GatewayError):
    """Raised when a route's lambda configuration is invalid or incomplete."""

    def __init__(self, route_id: str, detail: str):
        self.route_id = route_id
        self.detail = detail
        super().__init__(f"Invalid lambda configuration for {route_id}: {detail}")


class DeploymentError(GatewayError):
    """Raised when bundling or publishing fails. Carries the tool's error verbatim."""

    def __init__(self, route_id: str, cause: Exception):
        self.route_id = route_id
        self.cause = cause
        super().__init__(str(cause))


class SetupError(GatewayError):
    """Raised when the pre-invocation hook fails."""

    def __init__(self, route_id: str, cause: Exception):
        self.route_id = route_id
        self.cause = cause
        super().__init__(f"Setup failed for {route_id}: {cause}")


class InvocationError(GatewayError):
    """Raised when the remote invocation fails, times out or reports a function error."""

    def __init__(
        self,
        function_name: str,
        cause: Optional[Exception] = None,
        payload: Any = None,
    ):
        self.function_name = function_name
        self.cause = cause
        self.payload = payload

        if cause is not None:
            message = f"Lambda invocation failed for {function_name}: {cause}"
        else:
            message = f"Lambda function error from {function_name}"
        super().__init__(message)


# ===========================================
# Exception Handlers
# ===========================================


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    """
    logger.error(
        f"Global exception handler caught: {exc}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal Server Error"},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handler for HTTPException.
    """
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for validation errors.
    """
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"message": "Validation Error", "detail": str(exc.errors())},
    )
