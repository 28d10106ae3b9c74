"""Contract module - schema model of the API."""

from .exceptions import ContractError, RouteNotFoundError, MethodNotAllowedError
from .models import ContractModel, RouteSpec, ParameterSpec, RequestBodySpec, SecuritySchemeSpec
from .loader import load_contract


__all__ = [
    "ContractError",
    "RouteNotFoundError",
    "MethodNotAllowedError",
    "ContractModel",
    "RouteSpec",
    "ParameterSpec",
    "RequestBodySpec",
    "SecuritySchemeSpec",
    "load_contract",
]
