"""Request validation exceptions."""

from petgate.auth.exceptions import PetGatewayError


class SchemaViolationError(PetGatewayError):
    """Raised when a request does not conform to the contract.
    
    Attributes:
        field: Dotted name of the offending field (e.g. ``query.limit``).
        detail: What is wrong with it.
    """
    
    def __init__(self, field: str, detail: str):
        super().__init__(
            message=f"{field}: {detail}",
            code="SCHEMA_VIOLATION"
        )
        self.field = field
        self.detail = detail
