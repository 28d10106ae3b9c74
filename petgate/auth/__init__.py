"""Auth module initialization."""

from .exceptions import (
    PetGatewayError,
    AuthenticationFailedError,
    ConfigurationError,
    UnknownSecuritySchemeError,
)
from .authenticators import (
    Authenticator,
    BearerAuthenticator,
    CookieAuthenticator,
    AuthenticatorRegistry,
    build_default_registry,
)

__all__ = [
    # Exceptions
    "PetGatewayError",
    "AuthenticationFailedError",
    "ConfigurationError",
    "UnknownSecuritySchemeError",
    # Authenticators
    "Authenticator",
    "BearerAuthenticator",
    "CookieAuthenticator",
    "AuthenticatorRegistry",
    "build_default_registry",
]
