"""
Token validation endpoint (POST /validate), consumed by the call service's gate.
Answers {"valid": false} for every invalid token without saying why.
"""
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from auth_service.accounts import get_authority
from auth_service.authority import IdentityAuthority
from auth_service.database import SessionLocal
from auth_service.errors import InvalidToken
from auth_service.keys import get_signing_key
from auth_service.store import SqlAccountStore

logger = logging.getLogger(__name__)
router = APIRouter()


class ValidateRequest(BaseModel):
    token: str


class ValidateResponse(BaseModel):
    valid: bool
    user_id: str


@router.post("/validate", response_model=ValidateResponse)
def validate(body: ValidateRequest, authority: IdentityAuthority = Depends(get_authority)):
    if not body.token:
        raise HTTPException(
            status_code=400,
            detail={"error": "invalid_request", "error_description": "token is required"},
        )
    try:
        account_id = authority.validate_token(body.token)
    except InvalidToken:
        return ValidateResponse(valid=False, user_id="")
    return ValidateResponse(valid=True, user_id=str(account_id))


def validate_token(token: str) -> uuid.UUID:
    """In-process validation with its own DB session. Raises InvalidToken."""
    db = SessionLocal()
    try:
        return IdentityAuthority(SqlAccountStore(db), get_signing_key()).validate_token(token)
    finally:
        db.close()
