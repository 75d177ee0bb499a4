"""
POST /register and POST /login, forwarded to the identity authority so clients only talk to this service.
The caller's address goes along in X-Forwarded-For; the authority rate-limits on it when it trusts this service.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from call_service.authclient import AuthClient

router = APIRouter()


class Credentials(BaseModel):
    username: str
    password: str


class AuthResponse(BaseModel):
    token: str
    user_id: str


_auth_client: AuthClient | None = None


def get_auth_client() -> AuthClient:
    global _auth_client
    if _auth_client is None:
        _auth_client = AuthClient()
    return _auth_client


def _require_fields(body: Credentials) -> None:
    if not body.username or not body.password:
        raise HTTPException(
            status_code=400,
            detail={"error": "invalid_request", "error_description": "username and password are required"},
        )


def _client_ip(request: Request) -> str | None:
    # Direct peer only; inbound forwarding headers are not trusted
    return request.client.host if request.client else None


@router.post("/register", status_code=201, response_model=AuthResponse)
async def register(body: Credentials, request: Request, client: Annotated[AuthClient, Depends(get_auth_client)]):
    _require_fields(body)
    token, user_id = await client.register(body.username, body.password, client_ip=_client_ip(request))
    return AuthResponse(token=token, user_id=user_id)


@router.post("/login", response_model=AuthResponse)
async def login(body: Credentials, request: Request, client: Annotated[AuthClient, Depends(get_auth_client)]):
    _require_fields(body)
    token, user_id = await client.login(body.username, body.password, client_ip=_client_ip(request))
    return AuthResponse(token=token, user_id=user_id)
