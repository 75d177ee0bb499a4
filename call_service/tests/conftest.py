"""
Pytest configuration for call_service. In-memory SQLite for both services (the end-to-end
tests run the identity authority in-process); tables are recreated for every test.
"""
import os

os.environ["CALLS_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AUTH_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AUTH_JWT_KEY"] = "test-signing-key"
os.environ["AUTH_BCRYPT_ROUNDS"] = "4"
os.environ.pop("AUTH_SEED_USER", None)
os.environ.pop("AUTH_SEED_PASSWORD", None)

import uuid

import pytest

from call_service.database import engine
from call_service.errors import Unauthenticated
from call_service.main import app
from call_service.models import Base


class FakeResolver:
    """Maps fixed tokens to account ids and counts resolutions."""

    def __init__(self, tokens: dict[str, uuid.UUID] | None = None):
        self.tokens = dict(tokens or {})
        self.calls = 0

    async def resolve(self, token: str, *, deadline: float | None = None) -> uuid.UUID:
        self.calls += 1
        try:
            return self.tokens[token]
        except KeyError:
            raise Unauthenticated()


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def alice_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def bob_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def resolver(alice_id, bob_id) -> FakeResolver:
    from call_service.auth import get_identity_resolver

    fake = FakeResolver({"token-alice": alice_id, "token-bob": bob_id})
    app.dependency_overrides[get_identity_resolver] = lambda: fake
    return fake

