"""Middleware validating every request against the contract."""

from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from petgate.auth.authenticators import AuthenticatorRegistry
from petgate.contract.models import ContractModel

from .models import ValidationInput
from .validator import validate_request


async def build_validation_input(request: Request) -> ValidationInput:
    """Snapshot the parts of a Starlette request the validator needs."""
    return ValidationInput(
        method=request.method,
        path=request.url.path,
        query={key: request.query_params.getlist(key) for key in request.query_params.keys()},
        headers={key.lower(): value for key, value in request.headers.items()},
        cookies=dict(request.cookies),
        body=await request.body(),
        content_type=request.headers.get("content-type"),
    )


def get_validation_outcome(request: Request):
    """Get the validation outcome stored by RequestValidatorMiddleware."""
    return getattr(request.state, "validation", None)


class RequestValidatorMiddleware(BaseHTTPMiddleware):
    """Rejects requests that do not match the contract or its security.
    
    Failures are raised and left to the error responder. Accepted requests
    carry their ValidationOutcome in ``request.state.validation``.
    """
    
    def __init__(
        self,
        app: ASGIApp,
        contract: ContractModel,
        authenticators: AuthenticatorRegistry,
        exempt_paths: tuple[str, ...] = ("/health",),
    ):
        super().__init__(app)
        self.contract = contract
        self.authenticators = authenticators
        self.exempt_paths = exempt_paths
    
    async def dispatch(self, request: Request, call_next: Callable):
        # Skip validation for health checks
        if request.url.path in self.exempt_paths:
            return await call_next(request)
        
        validation_input = await build_validation_input(request)
        request.state.validation = validate_request(
            self.contract, validation_input, self.authenticators
        )
        return await call_next(request)
