"""Unit tests for the StrictServer implementation."""

import re

import pytest

from petgate.api.operations import (
    CreatePets201Response,
    CreatePetsRequest,
    DeleteSessionRequest,
    GetSessionRequest,
    ListPetsRequest,
    Redirect302Response,
    RedirectRequest,
    ShowPetById200Response,
    ShowPetById404Response,
    ShowPetByIdRequest,
)
from petgate.api.types import ListPetsParams, Pet
from petgate.config import Settings
from petgate.server import PetServer, format_set_cookie
from petgate.store import PetStore


@pytest.fixture
def server() -> PetServer:
    return PetServer(PetStore(), Settings(SESSION_COOKIE_NAME="SESSION"))


class TestFormatSetCookie:
    
    def test_plain_cookie(self):
        assert format_set_cookie("SESSION", "abc") == "SESSION=abc"
    
    def test_expired_cookie(self):
        assert format_set_cookie("SESSION", "", max_age=-1) == "SESSION=; Max-Age=-1"


class TestPetOperations:
    """Tests for pet operations."""
    
    @pytest.mark.asyncio
    async def test_create_then_show(self, server):
        created = await server.create_pets(CreatePetsRequest(body=Pet(id=42, name="Rex", tag="dog")))
        shown = await server.show_pet_by_id(ShowPetByIdRequest(pet_id="42"))
        
        assert isinstance(created, CreatePets201Response)
        assert isinstance(shown, ShowPetById200Response)
        assert (shown.id, shown.name, shown.tag) == (42, "Rex", "dog")
    
    @pytest.mark.asyncio
    async def test_show_missing_pet(self, server):
        result = await server.show_pet_by_id(ShowPetByIdRequest(pet_id="999"))
        
        assert isinstance(result, ShowPetById404Response)
    
    @pytest.mark.asyncio
    async def test_show_non_integer_id_raises(self, server):
        """Test parse failures propagate instead of becoming a 404."""
        with pytest.raises(ValueError):
            await server.show_pet_by_id(ShowPetByIdRequest(pet_id="abc"))
    
    @pytest.mark.asyncio
    async def test_list_sets_cursor_header(self, server):
        await server.create_pets(CreatePetsRequest(body=Pet(id=1, name="Rex")))
        
        result = await server.list_pets(ListPetsRequest(params=ListPetsParams(limit=10)))
        
        assert result.body == [Pet(id=1, name="Rex")]
        assert result.headers.x_next == "next"


class TestSessionOperations:
    """Tests for session issue/delete and redirect."""
    
    @pytest.mark.asyncio
    async def test_get_session_issues_fresh_token(self, server):
        first = await server.get_session(GetSessionRequest())
        second = await server.get_session(GetSessionRequest())
        
        assert re.fullmatch(r"SESSION=[0-9a-f-]{36}", first.headers.set_cookie)
        assert first.headers.set_cookie != second.headers.set_cookie
    
    @pytest.mark.asyncio
    async def test_delete_session_uses_issuance_name(self, server):
        result = await server.delete_session(DeleteSessionRequest())
        
        assert result.headers.set_cookie == "SESSION=; Max-Age=-1"
    
    @pytest.mark.asyncio
    async def test_redirect(self, server):
        result = await server.redirect(RedirectRequest())
        
        assert isinstance(result, Redirect302Response)
        assert result.headers.location == "https://example.com"
