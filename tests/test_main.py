"""Integration tests for the main application."""

import re

import pytest
import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.testclient import TestClient

from petgate.api.types import Pet
from petgate.auth import AuthenticatorRegistry, ConfigurationError, UnknownSecuritySchemeError
from petgate.config import Settings, get_settings
from petgate.contract import ContractError
from petgate import main
from petgate.main import create_app, run


BEARER = {"Authorization": "Bearer token"}
SESSION_COOKIE = {"Cookie": "SESSION=test-session"}


def test_health_check(client):
    """Test health check endpoint bypasses validation."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "app": "Pet Gateway"}


class TestBearerAuth:
    """Requests to bearerAuth routes."""

    def test_valid_token(self, client):
        response = client.get("/pets", params={"limit": 10}, headers=BEARER)

        assert response.status_code == 200

    @pytest.mark.parametrize("authorization", ["Bearer wrong", "Basic token", "Token", "Bearer token x"])
    def test_invalid_token(self, client, authorization):
        """Test any other Authorization value is rejected."""
        response = client.get("/pets", params={"limit": 10}, headers={"Authorization": authorization})

        assert response.status_code == 401
        assert response.json()["error"] == "AUTHENTICATION_FAILED"

    def test_missing_header(self, client):
        response = client.get("/pets", params={"limit": 10})

        assert response.status_code == 401
        assert response.json()["message"] == "invalid authorization: "


class TestCookieAuth:
    """Requests to cookieAuth routes."""

    def test_any_session_cookie(self, client, store):
        store.upsert(Pet(id=1, name="Rex"))

        response = client.get("/pets/1", headers={"Cookie": "SESSION=whatever"})

        assert response.status_code == 200

    def test_missing_cookie(self, client):
        response = client.get("/pets/1")

        assert response.status_code == 401
        assert response.json() == {"error": "AUTHENTICATION_FAILED", "message": "cookie not found: SESSION"}

    def test_wrong_cookie_name(self, client):
        response = client.get("/pets/1", headers={"Cookie": "SESSSION=whatever"})

        assert response.status_code == 401


class TestPets:
    """Tests for the pet endpoints."""

    def test_create_then_fetch(self, client):
        """Test a created pet is returned exactly."""
        created = client.post("/pets", json={"id": 42, "name": "Rex", "tag": "dog"}, headers=BEARER)
        fetched = client.get("/pets/42", headers=SESSION_COOKIE)

        assert created.status_code == 201
        assert created.content == b""
        assert fetched.status_code == 200
        assert fetched.json() == {"id": 42, "name": "Rex", "tag": "dog"}

    def test_create_overwrites(self, client, store):
        """Test creating the same id twice replaces the pet."""
        client.post("/pets", json={"id": 42, "name": "Rex", "tag": "dog"}, headers=BEARER)
        client.post("/pets", json={"id": 42, "name": "Max"}, headers=BEARER)

        fetched = client.get("/pets/42", headers=SESSION_COOKIE)
        listed = client.get("/pets", params={"limit": 100}, headers=BEARER)

        assert fetched.json() == {"id": 42, "name": "Max"}
        assert listed.json() == [{"id": 42, "name": "Max"}]
        assert len(store) == 1

    def test_unknown_body_fields_dropped(self, client, store):
        """Test fields outside the schema do not reach the store."""
        client.post("/pets", json={"id": 1, "name": "Rex", "owner": "alice"}, headers=BEARER)

        assert store.get(1) == Pet(id=1, name="Rex")

    def test_fetch_missing_pet(self, client):
        response = client.get("/pets/999", headers=SESSION_COOKIE)

        assert response.status_code == 404
        assert response.content == b""

    def test_fetch_non_integer_id(self, client):
        """Test a non-integer id is a handler error, not a 404."""
        response = client.get("/pets/abc", headers=SESSION_COOKIE)

        assert response.status_code == 500
        assert response.json()["error"] == "UNHANDLED_ERROR"
        assert "abc" in response.json()["message"]

    def test_invalid_body_rejected_before_store(self, client, store):
        """Test a schema violation never reaches the store."""
        response = client.post("/pets", json={"name": "Rex"}, headers=BEARER)

        assert response.status_code == 400
        assert response.json()["error"] == "SCHEMA_VIOLATION"
        assert "body.id" in response.json()["message"]
        assert len(store) == 0

    def test_invalid_body_without_auth_rejected(self, client, store):
        response = client.post("/pets", json={"id": 1, "name": "Rex"})

        assert response.status_code == 401
        assert len(store) == 0

    @pytest.mark.parametrize("limit", ["5\n", "\u0665"])
    def test_list_limit_must_be_ascii_integer(self, client, limit):
        response = client.get("/pets", params={"limit": limit}, headers=BEARER)

        assert response.status_code == 400
        assert response.json()["error"] == "SCHEMA_VIOLATION"

    def test_list_missing_limit(self, client):
        response = client.get("/pets", headers=BEARER)

        assert response.status_code == 400
        assert response.json()["message"].startswith("query.limit")

    @pytest.mark.parametrize("count", [0, 1, 5])
    def test_list_cursor_header_is_fixed(self, client, store, count):
        """Test the cursor header does not depend on how many pets exist."""
        for pet_id in range(count):
            store.upsert(Pet(id=pet_id, name="p"))

        response = client.get("/pets", params={"limit": 2}, headers=BEARER)

        assert response.headers["x-next"] == "next"
        assert len(response.json()) == min(count, 2)


class TestSession:
    """Tests for session cookie endpoints."""

    def test_get_session_sets_fresh_cookie(self, client):
        first = client.get("/session")
        second = client.get("/session")

        assert first.status_code == 200
        assert re.fullmatch(r"SESSION=[0-9a-f-]{36}", first.headers["set-cookie"])
        assert first.headers["set-cookie"] != second.headers["set-cookie"]

    def test_issued_cookie_authenticates(self, settings):
        """Test a client holding the issued cookie passes cookieAuth."""
        client = TestClient(create_app(settings))

        client.get("/session")
        response = client.get("/pets/1")

        assert response.status_code == 404

    def test_delete_session_clears_cookie(self, client):
        response = client.delete("/session", headers=SESSION_COOKIE)

        assert response.status_code == 200
        assert response.headers["set-cookie"] == "SESSION=; Max-Age=-1"

    def test_delete_session_requires_cookie(self, client):
        response = client.delete("/session")

        assert response.status_code == 401


def test_redirect(client):
    response = client.get("/redirect", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "https://example.com"


class TestRouting:
    """Tests for requests outside the contract."""

    def test_unknown_route(self, client):
        response = client.get("/owners")

        assert response.status_code == 404
        assert response.json()["error"] == "ROUTE_NOT_FOUND"

    def test_method_not_allowed(self, client):
        response = client.put("/pets", json={})

        assert response.status_code == 405
        assert response.headers["allow"] == "GET, POST"

    def test_docs_are_not_served(self, client):
        assert client.get("/docs").status_code == 404


class TestCreateApp:
    """Tests for fail-fast application construction."""

    def test_broken_contract_stops_startup(self, tmp_path):
        path = tmp_path / "openapi.yaml"
        path.write_text("openapi: [", encoding="utf-8")

        with pytest.raises(ContractError):
            create_app(Settings(CONTRACT_PATH=str(path)))

    def test_incomplete_registry_stops_startup(self, settings):
        """Test a contract scheme without an authenticator is a startup error."""
        with pytest.raises(UnknownSecuritySchemeError) as exc_info:
            create_app(settings, authenticators=AuthenticatorRegistry())

        assert isinstance(exc_info.value, ConfigurationError)

    def test_custom_bearer_token(self):
        client = TestClient(create_app(Settings(BEARER_TOKEN="s3cret")))

        assert client.get("/pets", params={"limit": 1}, headers=BEARER).status_code == 401
        assert client.get(
            "/pets", params={"limit": 1}, headers={"Authorization": "Bearer s3cret"}
        ).status_code == 200

    def test_session_cookie_name_must_match_contract(self):
        """Test the configured cookie must be the one cookieAuth reads."""
        with pytest.raises(ConfigurationError, match="SID"):
            create_app(Settings(SESSION_COOKIE_NAME="SID"))


class TestRun:
    """Tests for process startup."""

    @pytest.fixture
    def served(self, monkeypatch):
        configs = []
        monkeypatch.setattr(uvicorn.Server, "run", lambda self, sockets=None: configs.append(self.config))
        get_settings.cache_clear()
        yield configs
        get_settings.cache_clear()
        structlog.reset_defaults()

    def test_defaults(self, monkeypatch, served):
        for name in ("HOST", "PORT", "SHUTDOWN_TIMEOUT_SECONDS"):
            monkeypatch.delenv(name, raising=False)

        run()

        config = served[0]
        assert isinstance(config.app, FastAPI)
        assert config.host == "0.0.0.0"
        assert config.port == 1323
        assert config.timeout_graceful_shutdown == 10

    def test_environment_overrides(self, monkeypatch, served):
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setenv("PORT", "8088")
        monkeypatch.setenv("SHUTDOWN_TIMEOUT_SECONDS", "3")

        run()

        assert (served[0].host, served[0].port) == ("127.0.0.1", 8088)
        assert served[0].timeout_graceful_shutdown == 3

    def test_no_application_built_at_import(self):
        """Test only run() builds the served application."""
        assert not hasattr(main, "app")
