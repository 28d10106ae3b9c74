"""Binds contract operations to typed StrictServer methods."""

from dataclasses import dataclass
from typing import Any, Callable

from fastapi import FastAPI, Request, Response
from pydantic import BaseModel

from petgate.auth.exceptions import ConfigurationError
from petgate.contract.models import ContractModel
from petgate.validation.middleware import get_validation_outcome
from petgate.validation.models import ValidationOutcome

from .operations import (
    CreatePets201Response,
    CreatePetsRequest,
    DeleteSession200Response,
    DeleteSessionRequest,
    GetSession200Response,
    GetSessionRequest,
    ListPets200Response,
    ListPetsRequest,
    OperationResponse,
    Redirect302Response,
    RedirectRequest,
    ShowPetById200Response,
    ShowPetById404Response,
    ShowPetByIdRequest,
    StrictServer,
)
from .types import ListPetsParams, Pet


@dataclass(frozen=True)
class OperationBinding:
    """How one contract operation reaches the server.

    Attributes:
        operation_id: Contract ``operationId``.
        handler_name: StrictServer method to call.
        build_request: Builds the typed request from a validation outcome.
        response_types: Response variants the handler may return.
    """

    operation_id: str
    handler_name: str
    build_request: Callable[[ValidationOutcome], BaseModel]
    response_types: tuple[type[OperationResponse], ...]


def _list_pets_request(outcome: ValidationOutcome) -> ListPetsRequest:
    return ListPetsRequest(params=ListPetsParams(**outcome.query_params))


def _create_pets_request(outcome: ValidationOutcome) -> CreatePetsRequest:
    return CreatePetsRequest(body=Pet.model_validate(outcome.body))


def _show_pet_by_id_request(outcome: ValidationOutcome) -> ShowPetByIdRequest:
    return ShowPetByIdRequest(pet_id=outcome.path_params["petId"])


BINDINGS: tuple[OperationBinding, ...] = (
    OperationBinding("listPets", "list_pets", _list_pets_request, (ListPets200Response,)),
    OperationBinding("createPets", "create_pets", _create_pets_request, (CreatePets201Response,)),
    OperationBinding(
        "showPetById",
        "show_pet_by_id",
        _show_pet_by_id_request,
        (ShowPetById200Response, ShowPetById404Response),
    ),
    OperationBinding("getSession", "get_session", lambda _: GetSessionRequest(), (GetSession200Response,)),
    OperationBinding(
        "deleteSession",
        "delete_session",
        lambda _: DeleteSessionRequest(),
        (DeleteSession200Response,),
    ),
    OperationBinding("redirect", "redirect", lambda _: RedirectRequest(), (Redirect302Response,)),
)


def _make_endpoint(binding: OperationBinding, server: StrictServer) -> Callable[[Request], Any]:
    handler = getattr(server, binding.handler_name)

    async def endpoint(request: Request) -> Response:
        outcome = get_validation_outcome(request)
        if outcome is None or outcome.route.operation_id != binding.operation_id:
            raise ConfigurationError(f"operation '{binding.operation_id}' reached without validation")

        result = await handler(binding.build_request(outcome))

        if not isinstance(result, binding.response_types):
            raise ConfigurationError(
                f"{binding.handler_name} returned undeclared response {type(result).__name__}"
            )
        return result.to_response()

    endpoint.__name__ = binding.handler_name
    return endpoint


def register_handlers(
    app: FastAPI,
    contract: ContractModel,
    server: StrictServer,
    bindings: tuple[OperationBinding, ...] = BINDINGS,
) -> None:
    """Register one route per contract operation.

    Args:
        app: Application to register routes on.
        contract: Loaded contract; every operation needs a binding.
        server: Implementation of the business operations.
        bindings: Operation bindings to use.

    Raises:
        ConfigurationError: If contract operations and bindings disagree.
    """
    by_operation = {binding.operation_id: binding for binding in bindings}

    for binding in bindings:
        if contract.route(binding.operation_id) is None:
            raise ConfigurationError(f"operation '{binding.operation_id}' is not in the contract")

    for route in contract.routes:
        binding = by_operation.get(route.operation_id)
        if binding is None:
            raise ConfigurationError(f"no handler bound for operation '{route.operation_id}'")

        app.add_api_route(
            route.path,
            _make_endpoint(binding, server),
            methods=[route.method],
            name=route.operation_id,
            include_in_schema=False,
        )
