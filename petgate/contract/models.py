"""Immutable in-memory model of the API contract."""

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .exceptions import MethodNotAllowedError, RouteNotFoundError


ParameterLocation = Literal["path", "query", "header", "cookie"]

_TEMPLATE_PARAM = re.compile(r"\{([^{}/]+)\}")


def compile_path_template(template: str) -> tuple[re.Pattern, tuple[str, ...]]:
    """Compile an OpenAPI path template into a regex and its parameter names.

    Args:
        template: Path template such as ``/pets/{petId}``.

    Returns:
        Anchored pattern with one group per template parameter, and the
        parameter names in order of appearance.
    """
    names: list[str] = []
    parts: list[str] = []
    last = 0
    for match in _TEMPLATE_PARAM.finditer(template):
        parts.append(re.escape(template[last:match.start()]))
        parts.append("([^/]+)")
        names.append(match.group(1))
        last = match.end()
    parts.append(re.escape(template[last:]))
    return re.compile("^" + "".join(parts) + "$"), tuple(names)


class ParameterSpec(BaseModel):
    """A declared operation parameter.

    Attributes:
        name: Parameter name as it appears on the wire.
        location: Where the parameter is read from.
        required: Whether the request must carry it.
        json_schema: JSON schema the (coerced) value must satisfy.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    location: ParameterLocation
    required: bool = False
    json_schema: dict[str, Any] = Field(default_factory=dict)


class RequestBodySpec(BaseModel):
    """A declared request body."""

    model_config = ConfigDict(frozen=True)

    required: bool = False
    media_types: tuple[str, ...] = ("application/json",)
    json_schema: dict[str, Any] = Field(default_factory=dict)


class SecuritySchemeSpec(BaseModel):
    """A security scheme declared under ``components.securitySchemes``."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    scheme: str | None = None
    location: str | None = None
    parameter_name: str | None = None


class RouteSpec(BaseModel):
    """One contract operation.

    Attributes:
        method: Upper-case HTTP method.
        path: Path template.
        operation_id: Contract ``operationId``, used to bind handlers.
        parameters: Declared parameters, path-level ones merged in.
        request_body: Declared body, if any.
        security: Alternative requirement objects; each is the tuple of
            scheme names that must all pass. Empty means anonymous.
    """

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    operation_id: str
    parameters: tuple[ParameterSpec, ...] = ()
    request_body: RequestBodySpec | None = None
    security: tuple[tuple[str, ...], ...] = ()

    @property
    def path_parameter_names(self) -> tuple[str, ...]:
        return compile_path_template(self.path)[1]


class ContractModel(BaseModel):
    """Parsed contract: routes and security schemes, frozen after load."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    version: str = ""
    routes: tuple[RouteSpec, ...] = ()
    security_schemes: dict[str, SecuritySchemeSpec] = Field(default_factory=dict)

    _matchers: list[tuple[RouteSpec, re.Pattern]] = PrivateAttr(default_factory=list)

    def model_post_init(self, __context: Any) -> None:
        matchers = [(route, compile_path_template(route.path)) for route in self.routes]
        # Literal segments win over templated ones
        matchers.sort(key=lambda item: len(item[1][1]))
        self._matchers = [(route, compiled[0]) for route, compiled in matchers]

    def route(self, operation_id: str) -> RouteSpec | None:
        """Find a route by its operationId."""
        for route in self.routes:
            if route.operation_id == operation_id:
                return route
        return None

    def referenced_schemes(self) -> set[str]:
        """Names of every security scheme some route requires."""
        return {
            scheme
            for route in self.routes
            for requirement in route.security
            for scheme in requirement
        }

    def match(self, method: str, path: str) -> tuple[RouteSpec, dict[str, str]]:
        """Resolve the route for a request.

        Args:
            method: HTTP method.
            path: Request path, already percent-decoded.

        Returns:
            The matched route and its extracted path parameters.

        Raises:
            RouteNotFoundError: If no template matches the path.
            MethodNotAllowedError: If templates match but none for the method.
        """
        method = method.upper()
        allowed: list[str] = []
        for route, pattern in self._matchers:
            found = pattern.match(path)
            if found is None:
                continue
            if route.method != method:
                allowed.append(route.method)
                continue
            return route, dict(zip(route.path_parameter_names, found.groups()))

        if allowed:
            raise MethodNotAllowedError(method, path, allowed)
        raise RouteNotFoundError(method, path)
