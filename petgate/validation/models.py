"""Pydantic models for validation input and outcome."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from petgate.contract.models import RouteSpec


class ValidationInput(BaseModel):
    """Everything the validator looks at for one request.
    
    Attributes:
        method: HTTP method.
        path: Percent-decoded request path.
        query: Query parameters; repeated keys keep every value.
        headers: Request headers with lower-cased names.
        cookies: Request cookies.
        body: Raw request body.
        content_type: Value of the Content-Type header, if any.
    """
    
    model_config = ConfigDict(frozen=True)
    
    method: str
    path: str
    query: dict[str, list[str]] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    cookies: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""
    content_type: str | None = None


class ValidationOutcome(BaseModel):
    """A request accepted by the validator.
    
    Attributes:
        route: The matched contract route.
        path_params: Parsed path parameters.
        query_params: Parsed query parameters.
        header_params: Parsed header parameters.
        cookie_params: Parsed cookie parameters.
        body: Parsed request body, if the route declares one.
        security: Scheme names of the requirement that was satisfied.
    """
    
    model_config = ConfigDict(frozen=True)
    
    route: RouteSpec
    path_params: dict[str, Any] = Field(default_factory=dict)
    query_params: dict[str, Any] = Field(default_factory=dict)
    header_params: dict[str, Any] = Field(default_factory=dict)
    cookie_params: dict[str, Any] = Field(default_factory=dict)
    body: Any = None
    security: tuple[str, ...] = ()
