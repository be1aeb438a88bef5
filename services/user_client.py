# services/user_client.py
import logging
from typing import Optional

import requests
from pydantic import BaseModel, ValidationError

from core.config import Settings
from core.exceptions import AuthenticationError, IdentityServiceError
from core.security import strip_bearer

logger = logging.getLogger(__name__)


class RemoteUserProfile(BaseModel):
    """The caller as reported by GET /auth/users/me/profile."""

    id: int
    email: str
    full_name: str = ""


# ========================================
# 🛟 Fallback strategies for user_exists
# ========================================
class UserExistsFallback:
    name = "base"

    def on_failure(self, user_id: int, error: Exception) -> bool:
        raise NotImplementedError


class AssumeUserExists(UserExistsFallback):
    """Favour availability: an unreachable identity service does not block the caller."""

    name = "assume_exists"

    def on_failure(self, user_id: int, error: Exception) -> bool:
        logger.warning("⚠️ Could not verify user %s (%s); assuming the user exists", user_id, error)
        return True


class StrictUserExists(UserExistsFallback):
    name = "strict"

    def on_failure(self, user_id: int, error: Exception) -> bool:
        logger.error("❌ Could not verify user %s: %s", user_id, error)
        raise IdentityServiceError(f"Could not verify that user {user_id} exists")


FALLBACKS = {
    AssumeUserExists.name: AssumeUserExists,
    StrictUserExists.name: StrictUserExists,
}


def fallback_from_name(name: str) -> UserExistsFallback:
    try:
        return FALLBACKS[name.strip().lower()]()
    except KeyError:
        raise ValueError(f"Unknown user-exists fallback: {name!r}")


# ========================================
# 🌐 Identity service client
# ========================================
class UserServiceClient:
    def __init__(
        self,
        base_url: str,
        fallback: Optional[UserExistsFallback] = None,
        timeout: float = 10.0,
        http: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.fallback = fallback or AssumeUserExists()
        self.timeout = timeout
        self.http = http or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "UserServiceClient":
        return cls(
            settings.USER_AUTH_URL,
            fallback=fallback_from_name(settings.USER_EXISTS_FALLBACK),
            timeout=settings.REMOTE_TIMEOUT_SECONDS,
        )

    def _headers(self, token: str) -> dict:
        return {
            "Authorization": f"Bearer {strip_bearer(token)}",
            "Accept": "application/json",
        }

    def get_profile(self, token: str) -> RemoteUserProfile:
        """Authoritative identity lookup; no fallback applies."""
        url = f"{self.base_url}/auth/users/me/profile"
        try:
            r = self.http.get(url, headers=self._headers(token), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("❌ Identity service unreachable: %s", e)
            raise IdentityServiceError(f"Identity service unavailable: {e}") from e

        if r.status_code in (401, 403):
            raise AuthenticationError("Invalid or expired token")
        if r.status_code != 200:
            logger.error("❌ Identity service returned %s for profile lookup", r.status_code)
            raise IdentityServiceError(f"Identity service returned status {r.status_code}")

        try:
            body = r.json()
            user = body.get("user") or body
            return RemoteUserProfile(
                id=user["id"],
                email=user["email"],
                full_name=user.get("full_name") or "",
            )
        except (ValueError, KeyError, TypeError, AttributeError, ValidationError) as e:
            raise IdentityServiceError("Unexpected response from identity service") from e

    def user_exists(self, user_id: int, token: str) -> bool:
        url = f"{self.base_url}/auth/users/{user_id}/exists"
        try:
            r = self.http.get(url, headers=self._headers(token), timeout=self.timeout)
            r.raise_for_status()
            return bool(r.json())
        except (requests.RequestException, ValueError) as e:
            return self.fallback.on_failure(user_id, e)
