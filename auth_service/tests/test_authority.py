"""
Tests for IdentityAuthority: register/login/validate against the SQL store.
"""
import time
import uuid
from datetime import timedelta

import jwt
import pytest
from sqlalchemy.exc import SQLAlchemyError

from auth_service.authority import IdentityAuthority
from auth_service.database import SessionLocal
from auth_service.errors import AlreadyExists, InvalidCredentials, InvalidToken
from auth_service.keys import SigningKey
from auth_service.models import Account
from auth_service.store import AccountConflict, AccountNotFound, SqlAccountStore

KEY = SigningKey(secret="unit-test-key")


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def authority(db):
    return IdentityAuthority(SqlAccountStore(db), KEY)


def _encode(payload: dict, secret: str = KEY.secret) -> str:
    return jwt.encode(payload, secret, algorithm="HS256")


# --- register ---


def test_register_returns_token_for_new_account(authority, db):
    token, account_id = authority.register("alice", "pw1")
    assert isinstance(account_id, uuid.UUID)
    assert authority.validate_token(token) == account_id
    account = db.get(Account, account_id)
    assert account.username == "alice"


def test_register_stores_bcrypt_hash_not_password(authority, db):
    _, account_id = authority.register("alice", "pw1")
    account = db.get(Account, account_id)
    assert account.password_hash != "pw1"
    assert account.password_hash.startswith("$2")


def test_register_duplicate_username_raises_already_exists(authority, db):
    authority.register("alice", "pw1")
    with pytest.raises(AlreadyExists):
        authority.register("alice", "other")
    assert db.query(Account).filter(Account.username == "alice").count() == 1


def test_register_store_conflict_maps_to_already_exists():
    """Concurrent duplicate: pre-check passes, insert hits the unique constraint."""

    class RacingStore:
        def get_by_username(self, username):
            raise AccountNotFound(username)

        def create(self, username, password_hash):
            raise AccountConflict(username)

        def get_by_id(self, account_id):
            raise AccountNotFound(str(account_id))

    with pytest.raises(AlreadyExists):
        IdentityAuthority(RacingStore(), KEY).register("alice", "pw1")


def test_register_store_failure_is_not_masked():
    class BrokenStore:
        def get_by_username(self, username):
            raise SQLAlchemyError("connection refused")

    with pytest.raises(SQLAlchemyError):
        IdentityAuthority(BrokenStore(), KEY).register("alice", "pw1")


def test_sql_store_raises_conflict_on_duplicate_insert(db):
    store = SqlAccountStore(db)
    store.create("alice", "hash")
    with pytest.raises(AccountConflict):
        store.create("alice", "hash")
    # Session is usable after the rollback
    assert store.get_by_username("alice").username == "alice"


# --- login ---


def test_login_with_correct_password(authority):
    _, account_id = authority.register("alice", "pw1")
    token, login_id = authority.login("alice", "pw1")
    assert login_id == account_id
    assert authority.validate_token(token) == account_id


def test_login_wrong_password_and_unknown_user_are_indistinguishable(authority):
    authority.register("alice", "pw1")
    with pytest.raises(InvalidCredentials) as wrong:
        authority.login("alice", "wrong")
    with pytest.raises(InvalidCredentials) as unknown:
        authority.login("nobody", "pw1")
    assert str(wrong.value) == str(unknown.value)
    assert wrong.value.to_detail() == unknown.value.to_detail()


# --- validate_token ---


def test_token_claims(authority):
    token, account_id = authority.register("alice", "pw1")
    payload = jwt.decode(token, KEY.secret, algorithms=["HS256"])
    assert payload["sub"] == str(account_id)
    assert payload["exp"] - payload["iat"] == 24 * 3600


def test_expired_token_rejected(db):
    authority = IdentityAuthority(SqlAccountStore(db), KEY, token_ttl=timedelta(seconds=-10))
    token, _ = authority.register("alice", "pw1")
    with pytest.raises(InvalidToken):
        authority.validate_token(token)


def test_token_signed_with_other_key_rejected(authority, db):
    _, account_id = authority.register("alice", "pw1")
    forged = IdentityAuthority(SqlAccountStore(db), SigningKey(secret="other-key")).issue_token(account_id)
    with pytest.raises(InvalidToken):
        authority.validate_token(forged)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_token_rejected(authority, token):
    with pytest.raises(InvalidToken):
        authority.validate_token(token)


def test_subject_not_an_id_rejected(authority):
    token = _encode({"sub": "alice", "exp": int(time.time()) + 60})
    with pytest.raises(InvalidToken):
        authority.validate_token(token)


def test_missing_expiry_rejected(authority):
    _, account_id = authority.register("alice", "pw1")
    token = _encode({"sub": str(account_id)})
    with pytest.raises(InvalidToken):
        authority.validate_token(token)


def test_token_for_vanished_account_rejected(authority, db):
    token, account_id = authority.register("alice", "pw1")
    db.delete(db.get(Account, account_id))
    db.commit()
    with pytest.raises(InvalidToken):
        authority.validate_token(token)


def test_token_for_unknown_account_rejected(authority):
    token = authority.issue_token(uuid.uuid4())
    with pytest.raises(InvalidToken):
        authority.validate_token(token)


def test_validate_store_failure_propagates():
    class BrokenStore:
        def get_by_id(self, account_id):
            raise SQLAlchemyError("connection refused")

    authority = IdentityAuthority(BrokenStore(), KEY)
    token = authority.issue_token(uuid.uuid4())
    with pytest.raises(SQLAlchemyError):
        authority.validate_token(token)
