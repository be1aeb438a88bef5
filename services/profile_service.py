# services/profile_service.py
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from models.models import User, UserProfile
from schemas.profile_schema import ProfileUpdate

logger = logging.getLogger(__name__)


def find_profile(session: Session, user_id: int) -> Optional[UserProfile]:
    return session.exec(select(UserProfile).where(UserProfile.user_id == user_id)).first()


def get_or_create_profile(session: Session, user: User) -> UserProfile:
    """Profiles are created lazily, with empty defaults, on first access."""
    profile = find_profile(session, user.id)
    if profile:
        return profile

    try:
        with session.begin_nested():
            profile = UserProfile(user_id=user.id, skills=[])
            session.add(profile)
        session.commit()
        logger.info("👤 Created profile for user %s", user.id)
    except IntegrityError:
        # user_id is unique: another request created it first
        profile = find_profile(session, user.id)
    session.refresh(profile)
    return profile


def update_profile(session: Session, user: User, data: ProfileUpdate) -> UserProfile:
    profile = get_or_create_profile(session, user)

    updates = data.model_dump(exclude_unset=True)
    for key, value in updates.items():
        if key == "skills":
            value = [skill.strip() for skill in (value or []) if skill and skill.strip()]
        setattr(profile, key, value)

    profile.last_modified_date = datetime.utcnow()
    session.add(profile)
    session.commit()
    session.refresh(profile)
    logger.info("✅ Profile updated for user %s (%s)", user.id, ", ".join(sorted(updates)) or "no fields")
    return profile
