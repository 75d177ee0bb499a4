"""
Audit logging. Security-relevant events only; no usernames, tokens, passwords or request bodies.
GET /audit lists recent records to operators holding AUTH_AUDIT_TOKEN; without it configured the route is off.
"""
import secrets
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from auth_service.config import AUDIT_TOKEN, TRUSTED_PROXIES
from auth_service.database import get_db
from auth_service.models import AuditLog

EVENT_REGISTER_OK = "register_ok"
EVENT_REGISTER_FAIL = "register_fail"
EVENT_LOGIN_OK = "login_ok"
EVENT_LOGIN_FAIL = "login_fail"

OUTCOME_SUCCESS = "success"
OUTCOME_FAIL = "fail"


def get_client_ip(request: Request | None) -> str | None:
    """
    Client IP (request.client.host). X-Forwarded-For is honored only when the direct peer is
    in TRUSTED_PROXIES; its last entry is the address that peer saw.
    """
    if request is None or request.client is None:
        return None
    peer = getattr(request.client, "host", None)
    if peer in TRUSTED_PROXIES:
        forwarded = request.headers.get("x-forwarded-for", "")
        hops = [h.strip() for h in forwarded.split(",") if h.strip()]
        if hops:
            return hops[-1]
    return peer


def log_audit(
    db: Session,
    event_type: str,
    *,
    account_id: uuid.UUID | None = None,
    ip: str | None = None,
    outcome: str = OUTCOME_SUCCESS,
) -> None:
    """Append one audit record."""
    db.add(
        AuditLog(
            event_type=event_type,
            account_id=account_id,
            ip=ip,
            outcome=outcome,
        )
    )
    db.commit()


def require_operator(authorization: Annotated[str | None, Header()] = None) -> None:
    """Dependency: 'Authorization: Bearer <AUTH_AUDIT_TOKEN>'."""
    if AUDIT_TOKEN is None:
        raise HTTPException(status_code=404, detail="Not Found")
    scheme, _, token = (authorization or "").partition(" ")
    if scheme != "Bearer" or not secrets.compare_digest(token.encode("utf-8"), AUDIT_TOKEN.encode("utf-8")):
        raise HTTPException(
            status_code=401,
            detail={"error": "invalid_token", "error_description": "Operator token required"},
            headers={"WWW-Authenticate": "Bearer"},
        )


router = APIRouter(tags=["audit"])


@router.get("/audit", dependencies=[Depends(require_operator)])
def list_audit_logs(
    limit: int = 100,
    event_type: str | None = None,
    outcome: str | None = None,
    db: Session = Depends(get_db),
):
    """List recent audit events, most recent first."""
    q = db.query(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
    if event_type:
        q = q.filter(AuditLog.event_type == event_type)
    if outcome:
        q = q.filter(AuditLog.outcome == outcome)
    rows = q.limit(min(max(1, limit), 500)).all()
    return [
        {
            "created_at": r.created_at.isoformat() if r.created_at else None,
            "event_type": r.event_type,
            "account_id": str(r.account_id) if r.account_id else None,
            "ip": r.ip,
            "outcome": r.outcome,
        }
        for r in rows
    ]
