"""
Call store: single-row create/read/update/delete keyed by call id, plus listing by owner.
Each mutation commits on its own; there are no multi-row transactions.
update_status and delete raise CallNotFound when no row matched.
"""
import uuid
from typing import Protocol

from sqlalchemy.orm import Session

from call_service.models import Call


class CallNotFound(LookupError):
    pass


class CallStore(Protocol):
    def create(self, call: Call) -> None: ...

    def get_by_id(self, call_id: uuid.UUID) -> Call: ...

    def list_by_owner(self, owner_id: uuid.UUID) -> list[Call]: ...

    def update_status(self, call_id: uuid.UUID, status: str) -> None: ...

    def delete(self, call_id: uuid.UUID) -> None: ...


class SqlCallStore:
    def __init__(self, db: Session):
        self.db = db

    def create(self, call: Call) -> None:
        self.db.add(call)
        self.db.commit()
        self.db.refresh(call)

    def get_by_id(self, call_id: uuid.UUID) -> Call:
        call = self.db.get(Call, call_id)
        if call is None:
            raise CallNotFound(str(call_id))
        return call

    def list_by_owner(self, owner_id: uuid.UUID) -> list[Call]:
        return (
            self.db.query(Call)
            .filter(Call.owner_id == owner_id)
            .order_by(Call.created_at, Call.id)
            .all()
        )

    def update_status(self, call_id: uuid.UUID, status: str) -> None:
        updated = self.db.query(Call).filter(Call.id == call_id).update({Call.status: status})
        self.db.commit()
        if updated == 0:
            raise CallNotFound(str(call_id))

    def delete(self, call_id: uuid.UUID) -> None:
        deleted = self.db.query(Call).filter(Call.id == call_id).delete()
        self.db.commit()
        if deleted == 0:
            # Removed by a concurrent request after the caller's read
            raise CallNotFound(str(call_id))
