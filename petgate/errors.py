"""Translation of gateway failures into HTTP error responses."""

from fastapi.responses import JSONResponse

from petgate.auth.exceptions import (
    AuthenticationFailedError,
    ConfigurationError,
    PetGatewayError,
)
from petgate.contract.exceptions import MethodNotAllowedError, RouteNotFoundError
from petgate.validation.exceptions import SchemaViolationError


# Most specific first
ERROR_STATUS: tuple[tuple[type[PetGatewayError], int], ...] = (
    (SchemaViolationError, 400),
    (AuthenticationFailedError, 401),
    (RouteNotFoundError, 404),
    (MethodNotAllowedError, 405),
    (ConfigurationError, 500),
)

UNHANDLED_STATUS = 500


def status_for(exc: Exception) -> int:
    """HTTP status code used to report ``exc``."""
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return UNHANDLED_STATUS


def error_body(exc: Exception) -> dict[str, str]:
    """JSON-serializable representation of ``exc``."""
    if isinstance(exc, PetGatewayError):
        return {"error": exc.code, "message": exc.message}
    return {"error": "UNHANDLED_ERROR", "message": str(exc) or exc.__class__.__name__}


def error_response(exc: Exception) -> JSONResponse:
    """Build the error response for any failure."""
    headers = None
    if isinstance(exc, MethodNotAllowedError):
        headers = {"Allow": ", ".join(exc.allowed)}
    return JSONResponse(
        status_code=status_for(exc),
        content=error_body(exc),
        headers=headers,
    )
