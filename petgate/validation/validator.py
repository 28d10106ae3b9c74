"""Contract-driven request validation."""

import json
import re
from typing import TYPE_CHECKING, Any

from jsonschema import Draft4Validator
from jsonschema.exceptions import ValidationError as JSONSchemaValidationError
from jsonschema.exceptions import best_match

from petgate.auth.exceptions import AuthenticationFailedError
from petgate.contract.models import ContractModel, ParameterSpec, RouteSpec

from .exceptions import SchemaViolationError
from .models import ValidationInput, ValidationOutcome

if TYPE_CHECKING:
    from petgate.auth.authenticators import AuthenticatorRegistry


_INTEGER = re.compile(r"-?[0-9]+")
_NUMBER = re.compile(r"-?[0-9]+(\.[0-9]+)?([eE][+-]?[0-9]+)?")


def _error_field(prefix: str, error: JSONSchemaValidationError) -> str:
    parts = [prefix, *(str(part) for part in error.absolute_path)]
    if error.validator == "required" and isinstance(error.instance, dict):
        missing = [name for name in error.validator_value if name not in error.instance]
        if missing:
            parts.append(missing[0])
    return ".".join(parts)


def check_schema_conformance(value: Any, schema: dict[str, Any], field: str) -> None:
    """Validate ``value`` against a JSON schema.

    Raises:
        SchemaViolationError: Naming the most relevant offending field.
    """
    error = best_match(Draft4Validator(schema).iter_errors(value))
    if error is not None:
        raise SchemaViolationError(_error_field(field, error), error.message)


def _coerce_scalar(raw: str, schema: dict[str, Any], field: str) -> Any:
    kind = schema.get("type")
    if kind == "integer":
        if not _INTEGER.fullmatch(raw):
            raise SchemaViolationError(field, f"value {raw!r} is not a valid integer")
        return int(raw)
    if kind == "number":
        if not _NUMBER.fullmatch(raw):
            raise SchemaViolationError(field, f"value {raw!r} is not a valid number")
        return float(raw)
    if kind == "boolean":
        if raw not in ("true", "false"):
            raise SchemaViolationError(field, f"value {raw!r} is not a valid boolean")
        return raw == "true"
    return raw


def _raw_parameter(
    param: ParameterSpec,
    request: ValidationInput,
    path_params: dict[str, str],
) -> str | list[str] | None:
    if param.location == "path":
        return path_params.get(param.name)
    if param.location == "query":
        values = request.query.get(param.name)
        if not values:
            return None
        return values if param.json_schema.get("type") == "array" else values[0]
    if param.location == "header":
        return request.headers.get(param.name.lower())
    return request.cookies.get(param.name)


def _parse_parameter(param: ParameterSpec, raw: str | list[str]) -> Any:
    field = f"{param.location}.{param.name}"
    schema = param.json_schema

    if schema.get("type") == "array":
        items = raw if isinstance(raw, list) else raw.split(",")
        item_schema = schema.get("items", {})
        value: Any = [_coerce_scalar(item, item_schema, field) for item in items]
    else:
        value = _coerce_scalar(raw, schema, field)

    check_schema_conformance(value, schema, field)
    return value


def _media_type_matches(declared: str, actual: str) -> bool:
    if declared in ("*/*", actual):
        return True
    if declared.endswith("/*"):
        return actual.startswith(declared[:-1])
    return False


def _is_json(media_type: str) -> bool:
    return media_type == "application/json" or media_type.endswith("+json")


def _parse_body(route: RouteSpec, request: ValidationInput) -> Any:
    body_spec = route.request_body
    if body_spec is None:
        return None

    if not request.body:
        if body_spec.required:
            raise SchemaViolationError("body", "request body has not been provided")
        return None

    media_type = (request.content_type or "").split(";")[0].strip().lower()
    if not any(_media_type_matches(declared.lower(), media_type) for declared in body_spec.media_types):
        raise SchemaViolationError("body", f"unsupported content type '{media_type}'")

    if not _is_json(media_type):
        return request.body

    try:
        body = json.loads(request.body)
    except ValueError as e:
        raise SchemaViolationError("body", f"invalid JSON: {e}") from e

    check_schema_conformance(body, body_spec.json_schema, "body")
    return body


def authorize(
    route: RouteSpec,
    request: ValidationInput,
    authenticators: "AuthenticatorRegistry",
) -> tuple[str, ...]:
    """Evaluate the route's security requirements in declared order.

    A requirement object passes when all of its schemes pass; the route
    passes when any requirement object does.

    Returns:
        Scheme names of the first satisfied requirement (empty if anonymous).

    Raises:
        AuthenticationFailedError: If no requirement is satisfied.
        UnknownSecuritySchemeError: If a scheme has no authenticator.
    """
    if not route.security:
        return ()

    failures: list[AuthenticationFailedError] = []
    for requirement in route.security:
        try:
            for scheme in requirement:
                authenticators.authenticate(scheme, request)
        except AuthenticationFailedError as e:
            failures.append(e)
            continue
        return requirement

    if len(failures) == 1:
        raise failures[0]
    raise AuthenticationFailedError(
        scheme=failures[-1].scheme,
        detail="; ".join(f"{failure.scheme}: {failure.message}" for failure in failures),
    )


def validate_request(
    contract: ContractModel,
    request: ValidationInput,
    authenticators: "AuthenticatorRegistry",
) -> ValidationOutcome:
    """Check a request against the contract and its security requirements.

    Args:
        contract: Loaded contract.
        request: The inbound request.
        authenticators: Registry resolving scheme names to authenticators.

    Returns:
        ValidationOutcome with the matched route and parsed inputs.

    Raises:
        RouteNotFoundError: If no route matches the path.
        MethodNotAllowedError: If the path is known but not for this method.
        SchemaViolationError: If parameters or body do not conform.
        AuthenticationFailedError: If no security requirement is satisfied.
        UnknownSecuritySchemeError: If a scheme has no authenticator.
    """
    route, path_params = contract.match(request.method, request.path)

    parsed: dict[str, dict[str, Any]] = {"path": {}, "query": {}, "header": {}, "cookie": {}}
    for param in route.parameters:
        raw = _raw_parameter(param, request, path_params)
        if raw is None:
            if param.required:
                raise SchemaViolationError(
                    f"{param.location}.{param.name}",
                    "parameter is required, but was not provided",
                )
            continue
        parsed[param.location][param.name] = _parse_parameter(param, raw)

    body = _parse_body(route, request)
    security = authorize(route, request, authenticators)

    return ValidationOutcome(
        route=route,
        path_params=parsed["path"],
        query_params=parsed["query"],
        header_params=parsed["header"],
        cookie_params=parsed["cookie"],
        body=body,
        security=security,
    )
