"""
Account endpoints: POST /register and POST /login. Both return {token, user_id}.
Rate-limited per IP and audited (outcome only, never credentials).
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from auth_service.audit import (
    EVENT_LOGIN_FAIL,
    EVENT_LOGIN_OK,
    EVENT_REGISTER_FAIL,
    EVENT_REGISTER_OK,
    get_client_ip,
    log_audit,
    OUTCOME_FAIL,
    OUTCOME_SUCCESS,
)
from auth_service.authority import IdentityAuthority
from auth_service.config import RATE_LIMIT_LOGIN_PER_MINUTE, RATE_LIMIT_REGISTER_PER_MINUTE
from auth_service.database import get_db
from auth_service.errors import AlreadyExists, InvalidCredentials
from auth_service.keys import get_signing_key
from auth_service.rate_limit import SlidingWindowLimiter
from auth_service.store import SqlAccountStore

logger = logging.getLogger(__name__)
router = APIRouter()

login_limiter = SlidingWindowLimiter(RATE_LIMIT_LOGIN_PER_MINUTE)
register_limiter = SlidingWindowLimiter(RATE_LIMIT_REGISTER_PER_MINUTE)


class Credentials(BaseModel):
    username: str
    password: str


class AuthResponse(BaseModel):
    token: str
    user_id: str


def get_authority(db: Session = Depends(get_db)) -> IdentityAuthority:
    """Dependency: authority bound to this request's DB session and the process signing key."""
    return IdentityAuthority(SqlAccountStore(db), get_signing_key())


def _require_fields(body: Credentials) -> None:
    if not body.username or not body.password:
        raise HTTPException(
            status_code=400,
            detail={"error": "invalid_request", "error_description": "username and password are required"},
        )


def _enforce_rate_limit(limiter: SlidingWindowLimiter, request: Request) -> None:
    ip = get_client_ip(request) or "unknown"
    allowed, retry_after = limiter.check_and_consume(f"{request.url.path}:{ip}")
    if not allowed:
        logger.warning("Rate limit hit on %s for ip=%s", request.url.path, ip)
        raise HTTPException(
            status_code=429,
            detail={"error": "rate_limited", "error_description": "Too many requests"},
            headers={"Retry-After": str(retry_after)},
        )


@router.post("/register", status_code=201, response_model=AuthResponse)
def register(
    body: Credentials,
    request: Request,
    authority: IdentityAuthority = Depends(get_authority),
    db: Session = Depends(get_db),
):
    """Create an account and issue a token for it. 409 when the username is taken."""
    _require_fields(body)
    _enforce_rate_limit(register_limiter, request)
    ip = get_client_ip(request)
    try:
        token, account_id = authority.register(body.username, body.password)
    except AlreadyExists:
        log_audit(db, EVENT_REGISTER_FAIL, ip=ip, outcome=OUTCOME_FAIL)
        raise
    log_audit(db, EVENT_REGISTER_OK, account_id=account_id, ip=ip, outcome=OUTCOME_SUCCESS)
    return AuthResponse(token=token, user_id=str(account_id))


@router.post("/login", response_model=AuthResponse)
def login(
    body: Credentials,
    request: Request,
    authority: IdentityAuthority = Depends(get_authority),
    db: Session = Depends(get_db),
):
    """Check credentials and issue a token. 401 for unknown user and wrong password alike."""
    _require_fields(body)
    _enforce_rate_limit(login_limiter, request)
    ip = get_client_ip(request)
    try:
        token, account_id = authority.login(body.username, body.password)
    except InvalidCredentials:
        log_audit(db, EVENT_LOGIN_FAIL, ip=ip, outcome=OUTCOME_FAIL)
        raise
    log_audit(db, EVENT_LOGIN_OK, account_id=account_id, ip=ip, outcome=OUTCOME_SUCCESS)
    return AuthResponse(token=token, user_id=str(account_id))
