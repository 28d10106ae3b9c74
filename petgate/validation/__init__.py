"""Validation module - contract conformance and security checks."""

from .exceptions import SchemaViolationError
from .models import ValidationInput, ValidationOutcome
from .validator import validate_request, authorize, check_schema_conformance


__all__ = [
    "SchemaViolationError",
    "ValidationInput",
    "ValidationOutcome",
    "validate_request",
    "authorize",
    "check_schema_conformance",
]
