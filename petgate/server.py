"""StrictServer implementation backed by the in-memory pet store."""

import uuid

from petgate.api.operations import (
    CreatePets201Response,
    CreatePetsRequest,
    CreatePetsResponse,
    DeleteSession200Response,
    DeleteSession200ResponseHeaders,
    DeleteSessionRequest,
    DeleteSessionResponse,
    GetSession200Response,
    GetSession200ResponseHeaders,
    GetSessionRequest,
    GetSessionResponse,
    ListPets200Response,
    ListPets200ResponseHeaders,
    ListPetsRequest,
    ListPetsResponse,
    Redirect302Response,
    Redirect302ResponseHeaders,
    RedirectRequest,
    RedirectResponse,
    ShowPetById200Response,
    ShowPetById404Response,
    ShowPetByIdRequest,
    ShowPetByIdResponse,
    StrictServer,
)
from petgate.config import Settings
from petgate.store import PetStore


def format_set_cookie(name: str, value: str, max_age: int | None = None) -> str:
    """Render a ``Set-Cookie`` header value.

    The value is written unquoted, so an expiring cookie keeps an empty value.
    """
    cookie = f"{name}={value}"
    if max_age is not None:
        cookie += f"; Max-Age={max_age}"
    return cookie


class PetServer(StrictServer):
    """Pets, sessions and the redirect."""
    
    def __init__(self, store: PetStore, settings: Settings):
        self.store = store
        self.settings = settings
    
    async def list_pets(self, request: ListPetsRequest) -> ListPetsResponse:
        return ListPets200Response(
            body=self.store.list_pets(limit=request.params.limit),
            headers=ListPets200ResponseHeaders(x_next=self.settings.PAGINATION_CURSOR),
        )
    
    async def create_pets(self, request: CreatePetsRequest) -> CreatePetsResponse:
        self.store.upsert(request.body)
        return CreatePets201Response()
    
    async def show_pet_by_id(self, request: ShowPetByIdRequest) -> ShowPetByIdResponse:
        # ValueError on a non-integer id is left to the error responder
        pet_id = int(request.pet_id)
        
        pet = self.store.get(pet_id)
        if pet is None:
            return ShowPetById404Response()
        
        return ShowPetById200Response(id=pet_id, name=pet.name, tag=pet.tag)
    
    async def get_session(self, request: GetSessionRequest) -> GetSessionResponse:
        cookie = format_set_cookie(self.settings.SESSION_COOKIE_NAME, str(uuid.uuid4()))
        return GetSession200Response(headers=GetSession200ResponseHeaders(set_cookie=cookie))
    
    async def delete_session(self, request: DeleteSessionRequest) -> DeleteSessionResponse:
        cookie = format_set_cookie(self.settings.SESSION_COOKIE_NAME, "", max_age=-1)
        return DeleteSession200Response(headers=DeleteSession200ResponseHeaders(set_cookie=cookie))
    
    async def redirect(self, request: RedirectRequest) -> RedirectResponse:
        return Redirect302Response(
            headers=Redirect302ResponseHeaders(location=self.settings.REDIRECT_LOCATION)
        )
