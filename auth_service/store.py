"""
Credential store: account records keyed by username and by id.
The authority only talks to the AccountStore protocol; SqlAccountStore is the SQLAlchemy-backed one.
"""
import logging
import uuid
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth_service.models import Account

logger = logging.getLogger(__name__)


class AccountNotFound(LookupError):
    pass


class AccountConflict(Exception):
    """The username is already taken (unique constraint hit on insert)."""


class AccountStore(Protocol):
    def create(self, username: str, password_hash: str) -> Account: ...

    def get_by_username(self, username: str) -> Account: ...

    def get_by_id(self, account_id: uuid.UUID) -> Account: ...


class SqlAccountStore:
    def __init__(self, db: Session):
        self.db = db

    def create(self, username: str, password_hash: str) -> Account:
        """
        Insert a new account; the id is assigned here and never changes.
        A concurrent insert of the same username surfaces as AccountConflict; any other
        database failure propagates unchanged.
        """
        account = Account(id=uuid.uuid4(), username=username, password_hash=password_hash)
        self.db.add(account)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.debug("Account insert rejected by unique constraint: %s", type(e).__name__)
            raise AccountConflict(username) from e
        self.db.refresh(account)
        return account

    def get_by_username(self, username: str) -> Account:
        account = self.db.query(Account).filter(Account.username == username).first()
        if account is None:
            raise AccountNotFound(username)
        return account

    def get_by_id(self, account_id: uuid.UUID) -> Account:
        account = self.db.get(Account, account_id)
        if account is None:
            raise AccountNotFound(str(account_id))
        return account
