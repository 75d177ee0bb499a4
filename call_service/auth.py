"""
Bearer-token gate for the call service.
Every protected request resolves its token to an account id through the identity authority;
no result is cached between requests, so a removed account loses access on its next request.
"""
import logging
import time
import uuid
from typing import Annotated, Callable, Protocol

import anyio
import anyio.to_thread
from fastapi import Depends, Header, HTTPException, Request, status

from call_service.authclient import AuthClient
from call_service.config import AUTH_TIMEOUT_SECONDS, IDENTITY_RESOLVER
from call_service.errors import AuthUnavailable, Unauthenticated

logger = logging.getLogger(__name__)


def parse_bearer(header_value: str | None) -> str:
    """Return the token from 'Bearer <token>'. Any other shape raises Unauthenticated."""
    if not header_value:
        raise Unauthenticated("Authorization header is required")
    parts = header_value.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise Unauthenticated("Invalid authorization header format")
    return parts[1]


class IdentityResolver(Protocol):
    async def resolve(self, token: str, *, deadline: float | None = None) -> uuid.UUID:
        """Return the account id behind the token, or raise Unauthenticated."""
        ...


def _parse_account_id(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except (TypeError, ValueError):
        raise Unauthenticated()


class HttpIdentityResolver:
    """Validates tokens with the authority's POST /validate."""

    def __init__(self, client: AuthClient):
        self.client = client

    async def resolve(self, token: str, *, deadline: float | None = None) -> uuid.UUID:
        timeout = self.client.timeout
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                # Caller already gave up; don't issue the request
                raise Unauthenticated()
            timeout = min(timeout, remaining)
        try:
            valid, user_id = await self.client.validate_token(token, timeout=timeout)
        except AuthUnavailable:
            raise Unauthenticated()
        if not valid:
            raise Unauthenticated()
        return _parse_account_id(user_id)


class LocalIdentityResolver:
    """Validates tokens with an in-process callable (e.g. auth_service.validate.validate_token)."""

    def __init__(self, validate: Callable[[str], uuid.UUID], timeout: float = AUTH_TIMEOUT_SECONDS):
        self.validate = validate
        self.timeout = timeout

    async def resolve(self, token: str, *, deadline: float | None = None) -> uuid.UUID:
        timeout = self.timeout
        if deadline is not None:
            timeout = min(timeout, deadline - time.monotonic())
            if timeout <= 0:
                raise Unauthenticated()
        try:
            # A validation still running at the deadline is left to finish on its worker thread
            with anyio.fail_after(timeout):
                account_id = await anyio.to_thread.run_sync(self.validate, token, abandon_on_cancel=True)
        except Exception as e:
            logger.debug("In-process validation rejected token: %s", type(e).__name__)
            raise Unauthenticated()
        return _parse_account_id(str(account_id))


def build_identity_resolver(mode: str = IDENTITY_RESOLVER) -> IdentityResolver:
    if mode == "local":
        from auth_service.validate import validate_token

        return LocalIdentityResolver(validate_token)
    if mode != "http":
        raise ValueError(f"Unknown IDENTITY_RESOLVER: {mode!r}")
    return HttpIdentityResolver(AuthClient())


_resolver: IdentityResolver | None = None


def get_identity_resolver() -> IdentityResolver:
    global _resolver
    if _resolver is None:
        _resolver = build_identity_resolver()
    return _resolver


def _unauthorized(exc: Unauthenticated, error: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "error_description": exc.description},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(
    request: Request,
    resolver: Annotated[IdentityResolver, Depends(get_identity_resolver)],
    authorization: Annotated[str | None, Header()] = None,
) -> uuid.UUID:
    """Dependency: valid 'Authorization: Bearer <token>' -> caller's account id."""
    try:
        token = parse_bearer(authorization)
    except Unauthenticated as e:
        raise _unauthorized(e, "invalid_request")

    if await request.is_disconnected():
        # Nobody is waiting for the answer; skip the round trip to the authority
        logger.debug("Client disconnected before token resolution")
        raise _unauthorized(Unauthenticated(), "invalid_token")

    deadline = time.monotonic() + AUTH_TIMEOUT_SECONDS
    try:
        user_id = await resolver.resolve(token, deadline=deadline)
    except Unauthenticated:
        # Same answer for malformed, expired, forged and unknown-account tokens
        raise _unauthorized(Unauthenticated(), "invalid_token")

    request.state.user_id = user_id
    return user_id


CurrentUserId = Annotated[uuid.UUID, Depends(get_current_user_id)]
