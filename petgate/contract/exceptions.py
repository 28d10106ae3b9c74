"""Contract loading and routing exceptions."""

from petgate.auth.exceptions import ConfigurationError, PetGatewayError


class ContractError(ConfigurationError):
    """Raised when the API contract cannot be loaded or is inconsistent."""

    def __init__(self, message: str):
        super().__init__(message=message, code="CONTRACT_ERROR")


class RouteNotFoundError(PetGatewayError):
    """Raised when no route template matches the request path.

    Attributes:
        method: HTTP method of the request.
        path: Request path.
    """

    def __init__(self, method: str, path: str):
        super().__init__(
            message=f"no matching operation was found for {method} {path}",
            code="ROUTE_NOT_FOUND"
        )
        self.method = method
        self.path = path


class MethodNotAllowedError(PetGatewayError):
    """Raised when the path is known but the method is not declared for it.

    Attributes:
        method: HTTP method of the request.
        allowed: Methods the contract declares for the path.
    """

    def __init__(self, method: str, path: str, allowed: list[str]):
        super().__init__(
            message=f"method {method} is not allowed for {path}",
            code="METHOD_NOT_ALLOWED"
        )
        self.method = method
        self.allowed = allowed
