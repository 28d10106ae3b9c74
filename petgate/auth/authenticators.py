"""Per-scheme request authenticators and their registry."""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

import structlog

from petgate.config import Settings

from .exceptions import AuthenticationFailedError, UnknownSecuritySchemeError

if TYPE_CHECKING:
    from petgate.validation.models import ValidationInput

logger = structlog.get_logger("auth")


class Authenticator(Protocol):
    """Checks one security scheme against a request.

    Implementations return None on success and raise
    AuthenticationFailedError otherwise.
    """

    def __call__(self, scheme: str, request: "ValidationInput") -> None: ...


class BearerAuthenticator:
    """Accepts ``Authorization: Bearer <token>`` carrying the shared secret."""

    def __init__(self, token: str):
        self.token = token

    def __call__(self, scheme: str, request: "ValidationInput") -> None:
        authorization = request.headers.get("authorization", "")
        logger.info("authentication_attempt", scheme=scheme, authorization=authorization)

        parts = authorization.split(" ")
        if len(parts) != 2:
            raise AuthenticationFailedError(scheme, f"invalid authorization: {authorization}")

        if parts[0] != "Bearer":
            raise AuthenticationFailedError(scheme, f"invalid token: {authorization}")

        if parts[1] != self.token:
            raise AuthenticationFailedError(scheme, f"invalid token: {parts[1]}")


class CookieAuthenticator:
    """Accepts any request carrying a non-empty session cookie.

    The cookie value is not verified.
    """

    def __init__(self, cookie_name: str):
        self.cookie_name = cookie_name

    def __call__(self, scheme: str, request: "ValidationInput") -> None:
        value = request.cookies.get(self.cookie_name)
        logger.info("authentication_attempt", scheme=scheme, cookie=value)

        if not value:
            raise AuthenticationFailedError(scheme, f"cookie not found: {self.cookie_name}")


class AuthenticatorRegistry:
    """Maps security scheme names to authenticators."""

    def __init__(self) -> None:
        self._authenticators: dict[str, Authenticator] = {}

    def register(self, scheme: str, authenticator: Authenticator) -> None:
        self._authenticators[scheme] = authenticator

    @property
    def schemes(self) -> set[str]:
        return set(self._authenticators)

    def ensure_covers(self, schemes: Iterable[str]) -> None:
        """Fail if any of the given scheme names has no authenticator.

        Raises:
            UnknownSecuritySchemeError: For the first missing scheme, by name.
        """
        for scheme in sorted(schemes):
            if scheme not in self._authenticators:
                raise UnknownSecuritySchemeError(scheme)

    def authenticate(self, scheme: str, request: "ValidationInput") -> None:
        """Run the authenticator registered for ``scheme``.

        Raises:
            UnknownSecuritySchemeError: If no authenticator is registered.
            AuthenticationFailedError: If the request is rejected.
        """
        authenticator = self._authenticators.get(scheme)
        if authenticator is None:
            raise UnknownSecuritySchemeError(scheme)
        authenticator(scheme, request)


def build_default_registry(settings: Settings) -> AuthenticatorRegistry:
    """Registry with the ``bearerAuth`` and ``cookieAuth`` schemes."""
    registry = AuthenticatorRegistry()
    registry.register("bearerAuth", BearerAuthenticator(settings.BEARER_TOKEN))
    registry.register("cookieAuth", CookieAuthenticator(settings.SESSION_COOKIE_NAME))
    return registry
