import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("SIGNED_URL_SECRET", "test-signing-secret")
os.environ.setdefault("STORAGE_API_TOKEN", "test-api-token")

import pytest
from fastapi.testclient import TestClient

from signed_storage.dependencies.signature import get_signed_url_verifier
from signed_storage.dependencies.storage import get_storage
from signed_storage.main import app
from signed_storage.services.signed_url import HMACSignedURLBuilder, SignedURLVerifier
from signed_storage.storage.local import LocalStorageBackend
from tests.constants import API_TOKEN, PUBLIC_BASE_URL, SECRET, SIGNED_BASE_URL, FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def builder(clock):
    return HMACSignedURLBuilder(
        secret=SECRET,
        base_url=SIGNED_BASE_URL,
        route_prefix="/files/private",
        clock=clock,
    )


@pytest.fixture
def verifier(clock):
    return SignedURLVerifier(secret=SECRET, clock=clock)


@pytest.fixture
def storage(tmp_path, builder):
    """Local storage rooted in a per-test temporary directory."""
    return LocalStorageBackend(
        public_root=tmp_path / "public",
        private_root=tmp_path / "private",
        public_base_url=PUBLIC_BASE_URL,
        signed_url_builder=builder,
        max_size_mb=1,
    )


@pytest.fixture
def client(storage, verifier):
    """Test client sharing the storage and clock of the fixtures above."""
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_signed_url_verifier] = lambda: verifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {API_TOKEN}"}
