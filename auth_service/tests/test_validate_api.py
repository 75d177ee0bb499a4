"""
Tests for POST /validate and in-process validate_token.
"""
import time
import uuid

import jwt
import pytest
from fastapi.testclient import TestClient

from auth_service.errors import InvalidToken
from auth_service.keys import get_signing_key
from auth_service.main import app
from auth_service.validate import validate_token


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def registered(client):
    return client.post("/register", json={"username": "alice", "password": "pw1"}).json()


def test_validate_fresh_token(client, registered):
    r = client.post("/validate", json={"token": registered["token"]})
    assert r.status_code == 200
    assert r.json() == {"valid": True, "user_id": registered["user_id"]}


def test_validate_login_token(client, registered):
    token = client.post("/login", json={"username": "alice", "password": "pw1"}).json()["token"]
    assert client.post("/validate", json={"token": token}).json()["user_id"] == registered["user_id"]


def test_invalid_tokens_all_answer_the_same(client, registered):
    key = get_signing_key()
    now = int(time.time())
    expired = jwt.encode({"sub": registered["user_id"], "exp": now - 60}, key.secret, algorithm="HS256")
    wrong_key = jwt.encode({"sub": registered["user_id"], "exp": now + 60}, "not-the-key", algorithm="HS256")
    unknown = jwt.encode({"sub": str(uuid.uuid4()), "exp": now + 60}, key.secret, algorithm="HS256")
    answers = [
        client.post("/validate", json={"token": t}).json()
        for t in ("garbage", expired, wrong_key, unknown)
    ]
    assert answers == [{"valid": False, "user_id": ""}] * 4


def test_validate_empty_token_returns_400(client):
    r = client.post("/validate", json={"token": ""})
    assert r.status_code == 400


def test_in_process_validate_token(registered):
    assert validate_token(registered["token"]) == uuid.UUID(registered["user_id"])
    with pytest.raises(InvalidToken):
        validate_token("garbage")
