# Test configuration
import sys
from pathlib import Path

import pytest
import yaml
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).parent.parent

# Add repo root to path so tests can import modules
sys.path.insert(0, str(REPO_ROOT))

from petgate.config import Settings  # noqa: E402
from petgate.main import create_app  # noqa: E402
from petgate.store import PetStore  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings(CONTRACT_PATH="", BEARER_TOKEN="token", SESSION_COOKIE_NAME="SESSION")


@pytest.fixture
def store() -> PetStore:
    return PetStore()


@pytest.fixture
def client(settings, store) -> TestClient:
    """Client against an app with its own isolated store."""
    return TestClient(create_app(settings, store=store))


@pytest.fixture
def contract_file(tmp_path):
    """Write an OpenAPI document to a temporary YAML file and return its path."""
    def _write(document: dict) -> str:
        path = tmp_path / "openapi.yaml"
        path.write_text(yaml.safe_dump(document), encoding="utf-8")
        return str(path)
    return _write
