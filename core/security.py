# core/security.py
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Dict, Any

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlmodel import Session, select

from core.config import Settings, get_settings
from core.database import get_session
from core.exceptions import AuthenticationError
from models.models import User

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/authenticate")


# ========================================
# 🔐 Password Hashing (Argon2)
# ========================================
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash password using Argon2."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password using Argon2."""
    return pwd_context.verify(plain_password, hashed_password)


# ========================================
# 🔑 Token Helpers
# ========================================
def strip_bearer(token: Optional[str]) -> str:
    if not token:
        return ""
    if token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):]
    return token.strip()


def create_access_token(
    data: Dict[str, Any],
    secret_key: str,
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None,
) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=60 * 24))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def create_token_for_user(user: User, settings: Settings) -> str:
    """Claims read by the project service: sub (email), user_id, full_name."""
    data = {
        "sub": user.email,
        "user_id": user.id,
        "full_name": user.full_name,
        "roles": user.role_names,
    }
    return create_access_token(
        data,
        settings.SECRET_KEY,
        settings.ALGORITHM,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def generate_reset_token() -> str:
    return secrets.token_urlsafe(32)


def generate_activation_code(length: int = 6) -> str:
    return "".join(secrets.choice("0123456789") for _ in range(length))


# ========================================
# ✅ Token Validator (stateless, never raises)
# ========================================
class TokenValidator:
    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def _decode(self, token: Optional[str]) -> Optional[dict]:
        raw = strip_bearer(token)
        if not raw:
            return None
        try:
            return jwt.decode(raw, self.secret_key, algorithms=[self.algorithm])
        except (JWTError, ValueError, TypeError, AttributeError):
            return None

    def validate(self, token: Optional[str]) -> bool:
        """True when the signature checks out and the token has not expired."""
        return self._decode(token) is not None

    def extract_subject(self, token: Optional[str]) -> Optional[str]:
        payload = self._decode(token)
        if payload is None:
            return None
        return payload.get("sub")


# ========================================
# 🪪 Bearer header (project service)
# ========================================
def get_bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError("Missing or malformed Authorization header")
    token = strip_bearer(authorization)
    if not token:
        raise AuthenticationError("Missing or malformed Authorization header")
    return token


# ========================================
# 🧭 Two-step request authentication
# ========================================
@dataclass
class AuthenticatedUser:
    id: int
    email: str
    name: str
    token: str
    locally_valid: bool


class RequestAuthenticator:
    """
    Authenticates a caller in two named steps:

    1. local_check  - signature/expiry check against the shared secret.
       A failure is logged and does not stop the request.
    2. remote_check - profile lookup on the identity service.
       Authoritative: its failure stops the request.
    """

    def __init__(self, validator: TokenValidator, identity_client):
        self.validator = validator
        self.identity_client = identity_client

    def local_check(self, token: str) -> bool:
        valid = self.validator.validate(token)
        if not valid:
            logger.warning("⚠️ Local token validation failed, deferring to identity service")
        return valid

    def remote_check(self, token: str):
        return self.identity_client.get_profile(token)

    def authenticate(self, token: str) -> AuthenticatedUser:
        token = strip_bearer(token)
        if not token:
            raise AuthenticationError("Missing bearer token")
        locally_valid = self.local_check(token)
        profile = self.remote_check(token)
        if locally_valid:
            subject = self.validator.extract_subject(token)
            if subject and subject != profile.email:
                logger.warning("⚠️ Token subject %s does not match identity profile %s", subject, profile.id)
        return AuthenticatedUser(
            id=profile.id,
            email=profile.email,
            name=profile.full_name,
            token=token,
            locally_valid=locally_valid,
        )


# ========================================
# 👤 Identity service: current user
# ========================================
def decode_token(token: str, settings: Settings) -> dict:
    """Decode JWT and return payload."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token.",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> User:
    """Extract user from token and load full record from DB."""
    payload = decode_token(token, settings)
    user_id = payload.get("user_id")
    email = payload.get("sub")

    if not (user_id or email):
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = None
    if user_id:
        user = session.exec(select(User).where(User.id == user_id)).first()
    if not user and email:
        user = session.exec(select(User).where(User.email == email)).first()

    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if user.account_locked:
        raise HTTPException(status_code=403, detail="Account is locked")
    if not user.enabled:
        raise HTTPException(status_code=403, detail="Account is not activated")

    return user
