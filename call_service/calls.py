"""
Call endpoints. Every route requires a bearer token; the caller only ever sees and changes their own calls.
"""
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from call_service.auth import CurrentUserId
from call_service.database import get_db
from call_service.service import CallService
from call_service.store import SqlCallStore

router = APIRouter(prefix="/calls")


class CreateCallRequest(BaseModel):
    client_name: str
    phone_number: str
    description: str


class UpdateStatusRequest(BaseModel):
    status: str


class CallOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    client_name: str
    phone_number: str
    description: str
    status: str
    owner_id: uuid.UUID
    created_at: datetime


def get_call_service(db: Session = Depends(get_db)) -> CallService:
    return CallService(SqlCallStore(db))


@router.post("", status_code=201, response_model=CallOut)
def create_call(body: CreateCallRequest, user_id: CurrentUserId, calls: CallService = Depends(get_call_service)):
    """Create a call owned by the caller. Status starts Open."""
    return calls.create(body.client_name, body.phone_number, body.description, user_id)


@router.get("", response_model=list[CallOut])
def list_calls(user_id: CurrentUserId, calls: CallService = Depends(get_call_service)):
    """All calls owned by the caller; empty list when there are none."""
    return calls.list(user_id)


@router.get("/{call_id}", response_model=CallOut)
def get_call(call_id: uuid.UUID, user_id: CurrentUserId, calls: CallService = Depends(get_call_service)):
    return calls.get(call_id, user_id)


@router.patch("/{call_id}/status")
def update_call_status(
    call_id: uuid.UUID,
    body: UpdateStatusRequest,
    user_id: CurrentUserId,
    calls: CallService = Depends(get_call_service),
):
    calls.update_status(call_id, body.status, user_id)
    return {"message": "status updated successfully"}


@router.delete("/{call_id}")
def delete_call(call_id: uuid.UUID, user_id: CurrentUserId, calls: CallService = Depends(get_call_service)):
    calls.delete(call_id, user_id)
    return {"message": "call deleted successfully"}
