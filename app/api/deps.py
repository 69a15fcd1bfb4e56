from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core import config
from app.core.database import get_db
from app.core.errors import ForbiddenError
from app.models.sql import User
from app.services.auth import authenticate
from app.services.files import LocalFileStore
from app.services.lifecycle import ProposalLifecycle
from app.services.store import RecordStore


def get_store(db: Session = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


def get_lifecycle(store: RecordStore = Depends(get_store)) -> ProposalLifecycle:
    return ProposalLifecycle(store)


def get_file_store() -> LocalFileStore:
    return LocalFileStore()


def get_optional_user(
    request: Request, store: RecordStore = Depends(get_store)
) -> Optional[User]:
    try:
        return authenticate(request, store)
    except ForbiddenError:
        return None


def proposal_access(user: Optional[User] = Depends(get_optional_user)) -> Optional[User]:
    """
    The single access decision for every proposal operation.
    Public unless REQUIRE_AUTH is set.
    """
    if config.REQUIRE_AUTH and user is None:
        raise ForbiddenError("Authentication required")
    return user


def owner_id_for(user: Optional[User]) -> int:
    return user.id if user is not None else config.DEFAULT_OWNER_ID
