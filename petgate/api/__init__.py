"""API module - typed operations and their dispatch."""

from .types import Pet, Error, ListPetsParams
from .operations import StrictServer, OperationResponse
from .dispatcher import OperationBinding, BINDINGS, register_handlers


__all__ = [
    "Pet",
    "Error",
    "ListPetsParams",
    "StrictServer",
    "OperationResponse",
    "OperationBinding",
    "BINDINGS",
    "register_handlers",
]
