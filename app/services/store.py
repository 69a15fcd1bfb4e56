import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, delete, select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, StorageUnavailable
from app.models.sql import Proposal, User, utcnow

logger = logging.getLogger("proposal_server.store")


class RecordStore:
    """Relational persistence for proposals and users, one session per request."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, action: str):
        try:
            yield
        except OperationalError as e:
            self.db.rollback()
            logger.error(f"Database unavailable during {action}: {e}")
            raise StorageUnavailable(str(e)) from e

    # Proposals

    def insert(self, row: Proposal) -> Proposal:
        with self._guard("insert"):
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        return row

    def select_all(self) -> List[Proposal]:
        with self._guard("select_all"):
            return list(self.db.scalars(select(Proposal).order_by(Proposal.id)))

    def select_by_id(self, proposal_id: int) -> Optional[Proposal]:
        with self._guard("select_by_id"):
            return self.db.get(Proposal, proposal_id)

    def update(self, proposal_id: int, fields: dict) -> Proposal:
        values = dict(fields)
        values.setdefault("updated_at", utcnow())
        with self._guard("update"):
            result = self.db.execute(
                update(Proposal)
                .where(Proposal.id == proposal_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            if result.rowcount == 0:
                raise NotFoundError("Proposal", proposal_id)
            row = self.db.get(Proposal, proposal_id, populate_existing=True)
        return row

    def delete(self, proposal_id: int) -> int:
        with self._guard("delete"):
            result = self.db.execute(
                delete(Proposal)
                .where(Proposal.id == proposal_id)
                # drop the row from the identity map so a later get() misses
                .execution_options(synchronize_session="evaluate")
            )
            self.db.commit()
        return result.rowcount

    def record_view(self, proposal_id: int, now: datetime) -> int:
        """
        Counts one view. Only a pending proposal moves to viewed.

        Single statement: the CASE expressions see the pre-update row, so two
        concurrent views both count.
        """
        was_pending = Proposal.status == "pending"
        with self._guard("record_view"):
            result = self.db.execute(
                update(Proposal)
                .where(Proposal.id == proposal_id)
                .values(
                    view_count=Proposal.view_count + 1,
                    status=case((was_pending, "viewed"), else_=Proposal.status),
                    viewed_at=case((was_pending, now), else_=Proposal.viewed_at),
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
        return result.rowcount

    # Users

    def get_user_by_open_id(self, open_id: str) -> Optional[User]:
        with self._guard("get_user_by_open_id"):
            return self.db.scalars(
                select(User).where(User.open_id == open_id).limit(1)
            ).first()

    def upsert_user(
        self,
        open_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        login_method: Optional[str] = None,
        role: Optional[str] = None,
        owner_open_id: Optional[str] = None,
    ) -> User:
        if not open_id:
            raise ValueError("User open_id is required for upsert")

        resolved_role = role or (
            "admin" if owner_open_id and open_id == owner_open_id else "user"
        )
        now = utcnow()
        user = self.get_user_by_open_id(open_id)
        with self._guard("upsert_user"):
            if user is None:
                user = User(open_id=open_id, created_at=now)
                self.db.add(user)
            user.name = name
            user.email = email
            user.login_method = login_method
            user.role = resolved_role
            user.last_signed_in = now
            user.updated_at = now
            self.db.commit()
            self.db.refresh(user)
        return user
