"""
Pytest configuration for auth_service. In-memory SQLite so tests don't touch the filesystem;
tables are recreated for every test.
"""
import os

# In-memory SQLite; database.py uses StaticPool so all connections share the same DB
os.environ["AUTH_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["CALLS_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["AUTH_JWT_KEY"] = "test-signing-key"
# Lowest bcrypt cost keeps the suite fast
os.environ["AUTH_BCRYPT_ROUNDS"] = "4"
os.environ.pop("AUTH_SEED_USER", None)
os.environ.pop("AUTH_SEED_PASSWORD", None)

import pytest

from auth_service.accounts import login_limiter, register_limiter
from auth_service.database import engine
from auth_service.models import Base


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    login_limiter.reset()
    register_limiter.reset()
    yield
