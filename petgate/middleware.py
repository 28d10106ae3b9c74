"""Outer middleware: access logging and the error responder."""

import time
from typing import Callable

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from petgate.auth.exceptions import PetGatewayError

from .errors import error_response

logger = structlog.get_logger("http")


class ErrorResponderMiddleware(BaseHTTPMiddleware):
    """Converts any exception raised below it into a JSON error response."""
    
    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)
        except PetGatewayError as e:
            logger.warning(
                "request_rejected",
                method=request.method,
                path=request.url.path,
                error=e.code,
                message=e.message,
            )
            return error_response(e)
        except Exception as e:
            logger.exception(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=e.__class__.__name__,
            )
            return error_response(e)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Logs one line per request with its status and duration."""
    
    async def dispatch(self, request: Request, call_next: Callable):
        start_time = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=int((time.perf_counter() - start_time) * 1000),
        )
        return response
