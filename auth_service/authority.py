"""
Identity authority: registration, login and token validation.

Tokens are HS256 JWTs carrying `sub` (account id as a UUID string), `exp` and `iat`.
Validation re-reads the account on every call, so removing an account invalidates
all of its outstanding tokens without a revocation list.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import jwt

from auth_service.config import TOKEN_TTL_SECONDS
from auth_service.errors import AlreadyExists, InvalidCredentials, InvalidToken
from auth_service.keys import SigningKey
from auth_service.seed import hash_password, verify_password
from auth_service.store import AccountConflict, AccountNotFound, AccountStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Checked against when the username is unknown so both login failures cost one bcrypt check
    return hash_password("invalid-credentials-placeholder")


class IdentityAuthority:
    def __init__(
        self,
        store: AccountStore,
        signing_key: SigningKey,
        *,
        token_ttl: timedelta = timedelta(seconds=TOKEN_TTL_SECONDS),
    ):
        self.store = store
        self.signing_key = signing_key
        self.token_ttl = token_ttl

    def register(self, username: str, password: str) -> tuple[str, uuid.UUID]:
        """Create an account and return (token, account_id). Raises AlreadyExists."""
        try:
            self.store.get_by_username(username)
        except AccountNotFound:
            pass
        else:
            raise AlreadyExists()

        try:
            account = self.store.create(username, hash_password(password))
        except AccountConflict:
            # Lost a race with a concurrent registration of the same username
            raise AlreadyExists()

        logger.info("Registered account id=%s", account.id)
        return self.issue_token(account.id), account.id

    def login(self, username: str, password: str) -> tuple[str, uuid.UUID]:
        """Return (token, account_id) for valid credentials. Raises InvalidCredentials."""
        try:
            account = self.store.get_by_username(username)
        except AccountNotFound:
            verify_password(password, _dummy_hash())
            raise InvalidCredentials()

        if not verify_password(password, account.password_hash):
            raise InvalidCredentials()
        return self.issue_token(account.id), account.id

    def issue_token(self, account_id: uuid.UUID) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(account_id),
            "exp": int((now + self.token_ttl).timestamp()),
            "iat": int(now.timestamp()),
        }
        token = jwt.encode(payload, self.signing_key.secret, algorithm=self.signing_key.algorithm)
        if isinstance(token, bytes):
            token = token.decode("utf-8")
        return token

    def validate_token(self, token: str) -> uuid.UUID:
        """
        Verify signature and expiry, then resolve the subject to an existing account.
        Every failure raises the same InvalidToken; the reason is only logged at debug level.
        """
        try:
            payload = jwt.decode(
                token,
                self.signing_key.secret,
                algorithms=[self.signing_key.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.InvalidTokenError as e:
            logger.debug("Token rejected: %s", type(e).__name__)
            raise InvalidToken()

        sub = payload.get("sub")
        try:
            account_id = uuid.UUID(sub)
        except (TypeError, ValueError, AttributeError):
            logger.debug("Token rejected: subject is not an account id")
            raise InvalidToken()

        try:
            self.store.get_by_id(account_id)
        except AccountNotFound:
            logger.debug("Token rejected: account %s no longer exists", account_id)
            raise InvalidToken()
        return account_id
