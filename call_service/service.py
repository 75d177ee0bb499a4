"""
Call operations with per-owner access control.

Every operation on an existing call resolves in the same order: existence, then ownership,
then payload checks. Callers probing ids they don't own but that don't exist get NotFound,
never Forbidden.
"""
import logging
import re
import uuid

from call_service.errors import Forbidden, InvalidFormat, InvalidStatus, NotFound
from call_service.models import Call, CallStatus
from call_service.store import CallNotFound, CallStore

logger = logging.getLogger(__name__)

# Permissive: digits, '+' and '-' only, at least one character
_PHONE_RE = re.compile(r"[0-9+\-]+")


def parse_status(value: str) -> CallStatus:
    try:
        return CallStatus(value)
    except ValueError:
        raise InvalidStatus()


class CallService:
    def __init__(self, store: CallStore):
        self.store = store

    def _load_owned(self, call_id: uuid.UUID, caller_id: uuid.UUID) -> Call:
        try:
            call = self.store.get_by_id(call_id)
        except CallNotFound:
            raise NotFound()
        if call.owner_id != caller_id:
            logger.info("Denied access to call %s for account %s", call_id, caller_id)
            raise Forbidden()
        return call

    def create(self, client_name: str, phone_number: str, description: str, caller_id: uuid.UUID) -> Call:
        if not _PHONE_RE.fullmatch(phone_number):
            raise InvalidFormat()
        call = Call(
            id=uuid.uuid4(),
            client_name=client_name,
            phone_number=phone_number,
            description=description,
            status=CallStatus.OPEN.value,
            owner_id=caller_id,
        )
        self.store.create(call)
        logger.info("Created call %s for account %s", call.id, caller_id)
        return call

    def get(self, call_id: uuid.UUID, caller_id: uuid.UUID) -> Call:
        return self._load_owned(call_id, caller_id)

    def list(self, caller_id: uuid.UUID) -> list[Call]:
        return self.store.list_by_owner(caller_id)

    def update_status(self, call_id: uuid.UUID, status: str, caller_id: uuid.UUID) -> None:
        self._load_owned(call_id, caller_id)
        target = parse_status(status)
        try:
            self.store.update_status(call_id, target.value)
        except CallNotFound:
            raise NotFound()

    def delete(self, call_id: uuid.UUID, caller_id: uuid.UUID) -> None:
        self._load_owned(call_id, caller_id)
        try:
            self.store.delete(call_id)
        except CallNotFound:
            raise NotFound()
        logger.info("Deleted call %s", call_id)
