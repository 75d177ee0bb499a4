"""
Password hashing and an optional seeded account from environment. No hardcoded credentials.
Optional: set AUTH_SEED_USER + AUTH_SEED_PASSWORD.
"""
import logging
import os

import bcrypt

from auth_service.config import BCRYPT_ROUNDS
from auth_service.store import AccountConflict, AccountNotFound, AccountStore

logger = logging.getLogger(__name__)


def _encode(password: str) -> bytes:
    # Bcrypt has a 72-byte limit
    return password.encode("utf-8")[:72]


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def seed_from_env(store: AccountStore) -> None:
    """Create one account from env if set and not already present."""
    seed_user = os.environ.get("AUTH_SEED_USER")
    seed_password = os.environ.get("AUTH_SEED_PASSWORD")
    if not (seed_user and seed_password):
        return
    try:
        store.get_by_username(seed_user)
        logger.debug("Account already exists: %s", seed_user)
        return
    except AccountNotFound:
        pass
    try:
        account = store.create(seed_user, hash_password(seed_password))
    except AccountConflict:
        logger.debug("Account already exists: %s", seed_user)
        return
    logger.info("Seeded account: %s (id=%s)", seed_user, account.id)
