"""OpenAPI contract loader."""

from pathlib import Path
from typing import Any, Literal

import structlog
import yaml
from jsonschema import Draft4Validator
from jsonschema.exceptions import SchemaError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ContractError
from .models import (
    ContractModel,
    ParameterSpec,
    RequestBodySpec,
    RouteSpec,
    SecuritySchemeSpec,
    compile_path_template,
)

logger = structlog.get_logger("contract")

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

DEFAULT_CONTRACT_PATH = Path(__file__).parent.parent / "openapi.yaml"


class _RawParameter(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    location: Literal["path", "query", "header", "cookie"] = Field(alias="in")
    required: bool = False
    param_schema: dict[str, Any] = Field(default_factory=dict, alias="schema")


class _RawMediaType(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    media_schema: dict[str, Any] = Field(default_factory=dict, alias="schema")


class _RawRequestBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    required: bool = False
    content: dict[str, _RawMediaType] = Field(default_factory=dict)


class _RawOperation(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    operation_id: str = Field(alias="operationId")
    parameters: list[_RawParameter] = Field(default_factory=list)
    request_body: _RawRequestBody | None = Field(default=None, alias="requestBody")
    security: list[dict[str, list[str]]] | None = None
    responses: dict[Any, Any] = Field(default_factory=dict)


class _RawSecurityScheme(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    scheme: str | None = None
    location: str | None = Field(default=None, alias="in")
    name: str | None = None


class _RawComponents(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    schemas: dict[str, Any] = Field(default_factory=dict)
    security_schemes: dict[str, _RawSecurityScheme] = Field(default_factory=dict, alias="securitySchemes")


class _RawDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    openapi: str
    info: dict[str, Any] = Field(default_factory=dict)
    paths: dict[str, dict[str, Any]] = Field(default_factory=dict)
    components: _RawComponents = Field(default_factory=_RawComponents)
    security: list[dict[str, list[str]]] = Field(default_factory=list)


def _lookup_pointer(document: dict[str, Any], ref: str) -> Any:
    if not ref.startswith("#/"):
        raise ContractError(f"unsupported $ref (only local references are allowed): {ref}")

    node: Any = document
    for token in ref[2:].split("/"):
        token = token.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or token not in node:
            raise ContractError(f"unresolvable $ref: {ref}")
        node = node[token]
    return node


def _resolve_refs(node: Any, document: dict[str, Any], stack: tuple[str, ...] = ()) -> Any:
    """Inline every local ``$ref`` found below ``node``."""
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            if ref in stack:
                raise ContractError(f"cyclic $ref: {ref}")
            return _resolve_refs(_lookup_pointer(document, ref), document, stack + (ref,))
        return {key: _resolve_refs(value, document, stack) for key, value in node.items()}
    if isinstance(node, list):
        return [_resolve_refs(item, document, stack) for item in node]
    return node


def _check_schema(schema: dict[str, Any], where: str) -> None:
    try:
        Draft4Validator.check_schema(schema)
    except SchemaError as e:
        raise ContractError(f"invalid schema for {where}: {e.message}") from e


def _merge_parameters(
    shared: list[_RawParameter],
    own: list[_RawParameter],
) -> list[_RawParameter]:
    merged = {(param.name, param.location): param for param in shared}
    for param in own:
        merged[(param.name, param.location)] = param
    return list(merged.values())


def _build_route(
    path: str,
    method: str,
    operation: _RawOperation,
    shared_parameters: list[_RawParameter],
    document: _RawDocument,
) -> RouteSpec:
    where = f"{method.upper()} {path}"

    parameters = []
    for param in _merge_parameters(shared_parameters, operation.parameters):
        _check_schema(param.param_schema, f"parameter '{param.name}' of {where}")
        parameters.append(ParameterSpec(
            name=param.name,
            location=param.location,
            # Path parameters are always required
            required=param.required or param.location == "path",
            json_schema=param.param_schema,
        ))

    declared_path_params = {param.name for param in parameters if param.location == "path"}
    for name in compile_path_template(path)[1]:
        if name not in declared_path_params:
            raise ContractError(f"path parameter '{name}' of {where} is not declared")

    request_body = None
    if operation.request_body is not None:
        if not operation.request_body.content:
            raise ContractError(f"request body of {where} declares no content")
        media_types = tuple(operation.request_body.content)
        body_schema = operation.request_body.content[media_types[0]].media_schema
        _check_schema(body_schema, f"request body of {where}")
        request_body = RequestBodySpec(
            required=operation.request_body.required,
            media_types=media_types,
            json_schema=body_schema,
        )

    raw_security = operation.security if operation.security is not None else document.security
    security = []
    for requirement in raw_security:
        for scheme in requirement:
            if scheme not in document.components.security_schemes:
                raise ContractError(f"security scheme '{scheme}' used by {where} is not defined")
        security.append(tuple(requirement))

    return RouteSpec(
        method=method.upper(),
        path=path,
        operation_id=operation.operation_id,
        parameters=tuple(parameters),
        request_body=request_body,
        security=tuple(security),
    )


def load_contract(contract_path: str | None = None) -> ContractModel:
    """Load and validate the API contract.

    Args:
        contract_path: Optional path to an OpenAPI 3 YAML document. Defaults to
            the contract shipped with the package.

    Returns:
        Frozen ContractModel with servers metadata removed.

    Raises:
        ContractError: If the file is missing, malformed or inconsistent.
    """
    path = Path(contract_path) if contract_path else DEFAULT_CONTRACT_PATH

    if not path.exists():
        raise ContractError(f"contract file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as e:
        raise ContractError(f"contract is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ContractError("contract must be a mapping at the top level")

    # The process serves on its own listen address
    servers = data.pop("servers", None)
    data = _resolve_refs(data, data)

    try:
        document = _RawDocument.model_validate(data)
    except ValidationError as e:
        raise ContractError(f"malformed contract: {e}") from e

    if not document.openapi.startswith("3."):
        raise ContractError(f"unsupported OpenAPI version: {document.openapi}")

    routes: list[RouteSpec] = []
    seen_operations: set[str] = set()
    for route_path, item in document.paths.items():
        if not route_path.startswith("/"):
            raise ContractError(f"path must start with '/': {route_path}")

        try:
            shared_parameters = [_RawParameter.model_validate(p) for p in item.get("parameters", [])]
            operations = [
                (method, _RawOperation.model_validate(item[method]))
                for method in HTTP_METHODS
                if method in item
            ]
        except ValidationError as e:
            raise ContractError(f"malformed operation under {route_path}: {e}") from e

        for method, operation in operations:
            if operation.operation_id in seen_operations:
                raise ContractError(f"duplicate operationId: {operation.operation_id}")
            seen_operations.add(operation.operation_id)
            routes.append(_build_route(route_path, method, operation, shared_parameters, document))

    security_schemes = {
        name: SecuritySchemeSpec(
            name=name,
            type=scheme.type,
            scheme=scheme.scheme,
            location=scheme.location,
            parameter_name=scheme.name,
        )
        for name, scheme in document.components.security_schemes.items()
    }

    contract = ContractModel(
        title=str(document.info.get("title", "")),
        version=str(document.info.get("version", "")),
        routes=tuple(routes),
        security_schemes=security_schemes,
    )

    logger.info(
        "contract_loaded",
        path=str(path),
        routes=len(contract.routes),
        servers_ignored=len(servers or []),
    )
    return contract
