# routes/users.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from models.models import User
from schemas.user_schema import UserRead
from core.database import get_session
from core.security import get_current_user

import logging
logger = logging.getLogger(__name__)


router = APIRouter(tags=["Users"])


# ----------------------------------------------------------------------
# ✅ Get Current User
# ----------------------------------------------------------------------
@router.get("/users/me", response_model=UserRead)
def get_current_user_endpoint(current_user: User = Depends(get_current_user)):
    """Return current user info (decoded from JWT)."""
    return current_user


# ----------------------------------------------------------------------
# ✅ Existence check used by the project service
# ----------------------------------------------------------------------
@router.get("/users/{user_id}/exists", response_model=bool)
def user_exists(
    user_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    exists = session.get(User, user_id) is not None
    logger.info("User %s checked existence of user %s: %s", current_user.id, user_id, exists)
    return exists
