import logging
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Session, select

from glassworks.auth.errors import StaleAccountError
from glassworks.model.account import Account
from glassworks.model.base import utc_now

logger = logging.getLogger(__name__)

# Columns never rewritten by update()
_IMMUTABLE_COLUMNS = {"id", "created_at", "version"}


class IdentityStore:
    """
    Persistence of Account rows with per-record atomic read-modify-write.

    Contract:
      - get() returns a *detached* snapshot; mutating it changes nothing until
        update() is called with the version the snapshot was read at.
      - update() is a compare-and-set: it writes only if the row still carries
        `expected_version`, bumping the version by one. If another writer got
        there first nothing is written and StaleAccountError is raised; the
        caller re-reads and re-applies its decision.
    """

    def __init__(self, session: Session):
        self.session = session

    def _detach(self, account: Optional[Account]) -> Optional[Account]:
        if account is not None:
            self.session.expunge(account)
        return account

    def get(self, account_id: int) -> Optional[Account]:
        account = self.session.get(Account, account_id, populate_existing=True)
        return self._detach(account)

    def get_by_email(self, email: str) -> Optional[Account]:
        account = self.session.exec(
            select(Account).where(Account.email == email.strip().lower())
        ).first()
        return self._detach(account)

    def get_by_google_id(self, google_id: str) -> Optional[Account]:
        account = self.session.exec(select(Account).where(Account.google_id == google_id)).first()
        return self._detach(account)

    def add(self, account: Account) -> Account:
        """Insert a new account and return a detached snapshot of it."""
        account.email = account.email.strip().lower()
        account.version = 1
        self.session.add(account)
        self.session.commit()
        self.session.refresh(account)
        return self._detach(account)

    def update(self, account: Account, *, expected_version: int) -> Account:
        values = {
            name: getattr(account, name)
            for name in Account.__table__.columns.keys()
            if name not in _IMMUTABLE_COLUMNS
        }
        values["updated_at"] = utc_now()
        values["version"] = expected_version + 1

        stmt = (
            sa.update(Account.__table__)
            .where(
                Account.__table__.c.id == account.id,
                Account.__table__.c.version == expected_version,
            )
            .values(**values)
        )
        result = self.session.connection().execute(stmt)
        if result.rowcount != 1:
            self.session.rollback()
            logger.info(f"Conditional update lost for account {account.id} (expected version {expected_version})")
            raise StaleAccountError(account.id)
        self.session.commit()

        fresh = self.get(account.id)
        if fresh is None:
            raise StaleAccountError(account.id, "Account disappeared during update")
        return fresh
