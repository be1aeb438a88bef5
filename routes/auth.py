from datetime import datetime, timedelta
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from core.config import Settings, get_settings
from core.database import get_session
from core.dependencies import get_email_service
from core.security import (
    create_token_for_user,
    generate_activation_code,
    generate_reset_token,
    hash_password,
    verify_password,
)
from models.models import ActivationToken, DEFAULT_USER_ROLE, PasswordResetToken, Role, User
from schemas.user_schema import (
    AuthenticationRequest,
    AuthenticationResponse,
    ForgotPasswordRequest,
    MessageResponse,
    RegistrationRequest,
    ResetPasswordRequest,
)
from services.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])

MAX_CODE_ATTEMPTS = 10


# ==========================================================
# ✅ Helpers
# ==========================================================
def get_or_create_role(session: Session, name: str) -> Role:
    role = session.exec(select(Role).where(Role.name == name)).first()
    if role:
        return role
    try:
        with session.begin_nested():
            role = Role(name=name)
            session.add(role)
    except IntegrityError:
        role = session.exec(select(Role).where(Role.name == name)).first()
    return role


def activation_code_in_use(session: Session, code: str) -> bool:
    """A code is taken while an unvalidated, unexpired token holds it."""
    statement = select(ActivationToken).where(
        ActivationToken.token == code,
        ActivationToken.validated_at == None,  # noqa: E711
        ActivationToken.expires_at > datetime.utcnow(),
    )
    return session.exec(statement).first() is not None


def issue_activation_token(session: Session, user: User, settings: Settings) -> ActivationToken:
    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_activation_code(settings.ACTIVATION_CODE_LENGTH)
        if not activation_code_in_use(session, code):
            break
    else:
        logger.error("❌ Could not find a free activation code for user %s", user.id)
        raise HTTPException(status_code=503, detail="Could not issue an activation code. Please try again.")

    now = datetime.utcnow()
    token = ActivationToken(
        token=code,
        user_id=user.id,
        created_at=now,
        expires_at=now + timedelta(minutes=settings.ACTIVATION_TOKEN_EXPIRE_MINUTES),
    )
    session.add(token)
    return token


# ==========================================================
# ✅ Register: creates a disabled user and mails a code
# ==========================================================
@router.post("/register", status_code=status.HTTP_202_ACCEPTED, response_model=MessageResponse)
def register(
    data: RegistrationRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    email_service: EmailService = Depends(get_email_service),
):
    logger.info("📝 Registration attempt for %s", data.email)

    if session.exec(select(User).where(User.email == data.email)).first():
        raise HTTPException(status_code=400, detail="An account with this email already exists.")

    try:
        user = User(
            firstname=data.firstname,
            lastname=data.lastname,
            date_of_birth=data.date_of_birth,
            email=data.email,
            password_hash=hash_password(data.password),
            account_locked=False,
            enabled=False,
            created_date=datetime.utcnow(),
        )
        user.roles = [get_or_create_role(session, DEFAULT_USER_ROLE)]
        session.add(user)
        session.flush()

        activation = issue_activation_token(session, user, settings)
        session.commit()
        session.refresh(user)
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=400, detail="An account with this email already exists.")
    except SQLAlchemyError:
        session.rollback()
        logger.exception("❌ Database error during registration")
        raise HTTPException(status_code=500, detail="Something went wrong while creating your account.")

    background_tasks.add_task(
        email_service.send_activation_email,
        user.email,
        user.full_name,
        activation.token,
        settings.ACTIVATION_TOKEN_EXPIRE_MINUTES,
    )
    logger.info("✅ User %s registered, activation pending", user.id)
    return {"message": "Registration successful. Check your email for the activation code."}


# ==========================================================
# ✅ Activate account
# ==========================================================
@router.get("/activate-account", response_model=MessageResponse)
def activate_account(
    token: str = Query(..., min_length=1),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    email_service: EmailService = Depends(get_email_service),
):
    saved = session.exec(
        select(ActivationToken)
        .where(ActivationToken.token == token)
        .order_by(ActivationToken.created_at.desc())
    ).first()
    if not saved:
        raise HTTPException(status_code=400, detail="Invalid activation token")

    user = session.get(User, saved.user_id)
    if not user:
        raise HTTPException(status_code=400, detail="Invalid activation token")
    if saved.validated_at is not None:
        raise HTTPException(status_code=400, detail="Activation token has already been used")

    if saved.is_expired():
        fresh = issue_activation_token(session, user, settings)
        session.commit()
        # Raising below discards background tasks, so send inline
        email_service.send_activation_email(
            user.email, user.full_name, fresh.token, settings.ACTIVATION_TOKEN_EXPIRE_MINUTES
        )
        raise HTTPException(
            status_code=400,
            detail="Activation token has expired. A new token has been sent to the same email address",
        )

    user.enabled = True
    user.last_modified_date = datetime.utcnow()
    saved.validated_at = datetime.utcnow()
    session.add(user)
    session.add(saved)
    session.commit()

    logger.info("✅ Account %s activated", user.id)
    return {"message": "Account activated successfully."}


# ==========================================================
# ✅ Authenticate: returns a JWT
# ==========================================================
@router.post("/authenticate", response_model=AuthenticationResponse)
def authenticate(
    credentials: AuthenticationRequest,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    user = session.exec(select(User).where(User.email == credentials.email)).first()
    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password.")
    if user.account_locked:
        raise HTTPException(status_code=403, detail="Your account is locked.")
    if not user.enabled:
        raise HTTPException(status_code=403, detail="Your account is not activated yet.")

    logger.info("🔑 Login successful for user %s", user.id)
    return {"token": create_token_for_user(user, settings)}


# ==========================================================
# ✅ Forgot / reset password
# ==========================================================
@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    data: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
    email_service: EmailService = Depends(get_email_service),
):
    """Same answer whether or not the email is registered."""
    user = session.exec(select(User).where(User.email == data.email)).first()
    if user:
        now = datetime.utcnow()
        reset = PasswordResetToken(
            token=generate_reset_token(),
            user_id=user.id,
            created_at=now,
            expires_at=now + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
        )
        session.add(reset)
        session.commit()
        session.refresh(reset)
        background_tasks.add_task(
            email_service.send_password_reset_email,
            user.email,
            user.full_name,
            reset.token,
            settings.RESET_TOKEN_EXPIRE_MINUTES,
        )
        logger.info("Password reset requested for user %s", user.id)

    return {"message": "If an account exists for this email, a reset link has been sent."}


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(data: ResetPasswordRequest, session: Session = Depends(get_session)):
    if data.password != data.confirm_password:
        raise HTTPException(status_code=400, detail="Passwords do not match")

    reset = session.exec(select(PasswordResetToken).where(PasswordResetToken.token == data.token)).first()
    if not reset or reset.used:
        raise HTTPException(status_code=400, detail="Invalid or already used reset token")
    if reset.is_expired():
        raise HTTPException(status_code=400, detail="Reset token has expired")

    user = session.get(User, reset.user_id)
    if not user:
        raise HTTPException(status_code=400, detail="Invalid or already used reset token")

    user.password_hash = hash_password(data.password)
    user.last_modified_date = datetime.utcnow()
    reset.used = True
    session.add(user)
    session.add(reset)
    session.commit()

    logger.info("✅ Password reset for user %s", user.id)
    return {"message": "Password has been reset successfully."}
