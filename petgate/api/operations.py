"""Typed request and response objects for every contract operation."""

from abc import ABC, abstractmethod

from fastapi import Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .types import ListPetsParams, Pet


class OperationResponse(BaseModel, ABC):
    """One declared status code of an operation."""
    
    @abstractmethod
    def to_response(self) -> Response:
        """Render this variant as an HTTP response."""


# listPets

class ListPetsRequest(BaseModel):
    params: ListPetsParams


class ListPets200ResponseHeaders(BaseModel):
    x_next: str


class ListPets200Response(OperationResponse):
    body: list[Pet]
    headers: ListPets200ResponseHeaders
    
    def to_response(self) -> Response:
        return JSONResponse(
            status_code=200,
            content=[pet.model_dump(exclude_none=True) for pet in self.body],
            headers={"x-next": self.headers.x_next},
        )


ListPetsResponse = ListPets200Response


# createPets

class CreatePetsRequest(BaseModel):
    body: Pet


class CreatePets201Response(OperationResponse):
    def to_response(self) -> Response:
        return Response(status_code=201)


CreatePetsResponse = CreatePets201Response


# showPetById

class ShowPetByIdRequest(BaseModel):
    pet_id: str


class ShowPetById200Response(OperationResponse, Pet):
    def to_response(self) -> Response:
        return JSONResponse(status_code=200, content=self.model_dump(exclude_none=True))


class ShowPetById404Response(OperationResponse):
    def to_response(self) -> Response:
        return Response(status_code=404)


ShowPetByIdResponse = ShowPetById200Response | ShowPetById404Response


# getSession

class GetSessionRequest(BaseModel):
    pass


class GetSession200ResponseHeaders(BaseModel):
    set_cookie: str


class GetSession200Response(OperationResponse):
    headers: GetSession200ResponseHeaders
    
    def to_response(self) -> Response:
        return Response(status_code=200, headers={"Set-Cookie": self.headers.set_cookie})


GetSessionResponse = GetSession200Response


# deleteSession

class DeleteSessionRequest(BaseModel):
    pass


class DeleteSession200ResponseHeaders(BaseModel):
    set_cookie: str


class DeleteSession200Response(OperationResponse):
    headers: DeleteSession200ResponseHeaders
    
    def to_response(self) -> Response:
        return Response(status_code=200, headers={"Set-Cookie": self.headers.set_cookie})


DeleteSessionResponse = DeleteSession200Response


# redirect

class RedirectRequest(BaseModel):
    pass


class Redirect302ResponseHeaders(BaseModel):
    location: str


class Redirect302Response(OperationResponse):
    headers: Redirect302ResponseHeaders
    
    def to_response(self) -> Response:
        return Response(status_code=302, headers={"Location": self.headers.location})


RedirectResponse = Redirect302Response


class StrictServer(ABC):
    """Business operations, one coroutine per contract operation.
    
    Each method receives its typed request and returns one of the
    operation's declared response variants. Raised exceptions are reported
    by the error responder.
    """
    
    @abstractmethod
    async def list_pets(self, request: ListPetsRequest) -> ListPetsResponse: ...
    
    @abstractmethod
    async def create_pets(self, request: CreatePetsRequest) -> CreatePetsResponse: ...
    
    @abstractmethod
    async def show_pet_by_id(self, request: ShowPetByIdRequest) -> ShowPetByIdResponse: ...
    
    @abstractmethod
    async def get_session(self, request: GetSessionRequest) -> GetSessionResponse: ...
    
    @abstractmethod
    async def delete_session(self, request: DeleteSessionRequest) -> DeleteSessionResponse: ...
    
    @abstractmethod
    async def redirect(self, request: RedirectRequest) -> RedirectResponse: ...
