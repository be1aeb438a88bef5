# core/dependencies.py
"""FastAPI providers that build configured collaborators from Settings."""
from fastapi import Depends
from sqlmodel import Session

from core.config import Settings, get_settings
from core.database import get_session
from core.security import RequestAuthenticator, TokenValidator
from services.ai_task_assistant import AiTaskAssistant
from services.calendar_service import CalendarService
from services.email_service import EmailService
from services.member_service import MemberService
from services.project_service import ProjectService
from services.task_service import TaskService
from services.time_tracking_service import TimeTrackingService
from services.user_client import UserServiceClient


# ========================================
# 🔧 Collaborators
# ========================================
def get_token_validator(settings: Settings = Depends(get_settings)) -> TokenValidator:
    return TokenValidator(settings.SECRET_KEY, settings.ALGORITHM)


def get_user_client(settings: Settings = Depends(get_settings)) -> UserServiceClient:
    return UserServiceClient.from_settings(settings)


def get_authenticator(
    validator: TokenValidator = Depends(get_token_validator),
    client: UserServiceClient = Depends(get_user_client),
) -> RequestAuthenticator:
    return RequestAuthenticator(validator, client)


def get_email_service(settings: Settings = Depends(get_settings)) -> EmailService:
    return EmailService.from_settings(settings)


def get_ai_assistant(settings: Settings = Depends(get_settings)) -> AiTaskAssistant:
    return AiTaskAssistant.from_settings(settings)


# ========================================
# 🧩 Domain services (one per request)
# ========================================
def get_project_service(
    session: Session = Depends(get_session),
    authenticator: RequestAuthenticator = Depends(get_authenticator),
    client: UserServiceClient = Depends(get_user_client),
) -> ProjectService:
    return ProjectService(session, authenticator, client)


def get_member_service(
    session: Session = Depends(get_session),
    authenticator: RequestAuthenticator = Depends(get_authenticator),
    client: UserServiceClient = Depends(get_user_client),
) -> MemberService:
    return MemberService(session, authenticator, client)


def get_task_service(
    session: Session = Depends(get_session),
    authenticator: RequestAuthenticator = Depends(get_authenticator),
    client: UserServiceClient = Depends(get_user_client),
    assistant: AiTaskAssistant = Depends(get_ai_assistant),
) -> TaskService:
    return TaskService(session, authenticator, client, assistant)


def get_calendar_service(
    session: Session = Depends(get_session),
    authenticator: RequestAuthenticator = Depends(get_authenticator),
    client: UserServiceClient = Depends(get_user_client),
) -> CalendarService:
    return CalendarService(session, authenticator, client)


def get_time_tracking_service(
    session: Session = Depends(get_session),
    authenticator: RequestAuthenticator = Depends(get_authenticator),
    client: UserServiceClient = Depends(get_user_client),
) -> TimeTrackingService:
    return TimeTrackingService(session, authenticator, client)
