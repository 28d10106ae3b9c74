"""Custom exceptions for the gateway and its authenticators."""


class PetGatewayError(Exception):
    """Base exception for all gateway errors."""
    
    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class AuthenticationFailedError(PetGatewayError):
    """Raised when a request does not satisfy a security scheme.
    
    Attributes:
        scheme: Name of the security scheme that rejected the request.
    """
    
    def __init__(self, scheme: str, detail: str):
        super().__init__(message=detail, code="AUTHENTICATION_FAILED")
        self.scheme = scheme


class ConfigurationError(PetGatewayError):
    """Raised when the gateway itself is misconfigured."""
    
    def __init__(self, message: str, code: str = "CONFIGURATION_ERROR"):
        super().__init__(message=message, code=code)


class UnknownSecuritySchemeError(ConfigurationError):
    """Raised when a route requires a scheme with no registered authenticator."""
    
    def __init__(self, scheme: str):
        super().__init__(
            message=f"unknown security scheme: {scheme}",
            code="UNKNOWN_SECURITY_SCHEME"
        )
        self.scheme = scheme
