# routes/profile.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
import logging

from core.database import get_session
from core.security import get_current_user
from models.models import User
from schemas.profile_schema import ProfileRead, ProfileUpdate
from services.profile_service import get_or_create_profile, update_profile

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Profile"])


# ==================================================================
#  ✅  Get Current User Profile (created on first access)
# ==================================================================
@router.get("/users/me/profile", response_model=ProfileRead)
def get_my_profile(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return get_or_create_profile(session, current_user)


# ==================================================================
#  ✅  Update Current User Profile
# ==================================================================
@router.put("/users/me/profile", response_model=ProfileRead)
def update_my_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    try:
        return update_profile(session, current_user, data)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("❌ Failed to update profile for user %s", current_user.id)
        raise HTTPException(status_code=500, detail="Failed to update profile")
