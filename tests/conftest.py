from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import models.models  # noqa: F401  (registers tables)
from core.config import Settings, get_settings
from core.database import get_session
from core.dependencies import get_ai_assistant, get_email_service, get_user_client
from core.exceptions import AuthenticationError
from core.security import RequestAuthenticator, TokenValidator, create_access_token, strip_bearer
from services.calendar_service import CalendarService
from services.member_service import MemberService
from services.project_service import ProjectService
from services.task_service import TaskService
from services.time_tracking_service import TimeTrackingService
from services.user_client import AssumeUserExists, RemoteUserProfile

TEST_SECRET = "test-secret-key"


# ----------------------------------------------------------------------
# Doubles
# ----------------------------------------------------------------------
class FakeIdentityClient:
    """Stands in for the identity service: tokens map to known users."""

    def __init__(self, secret: str = TEST_SECRET):
        self.secret = secret
        self.profiles = {}
        self.known_ids = set()
        self.unreachable = False
        self.fallback = AssumeUserExists()
        self.exists_calls = []

    def login(self, user_id: int, name: str = None) -> str:
        email = f"user{user_id}@example.com"
        token = create_access_token({"sub": email, "user_id": user_id}, self.secret)
        self.profiles[token] = RemoteUserProfile(id=user_id, email=email, full_name=name or f"User {user_id}")
        self.known_ids.add(user_id)
        return token

    def get_profile(self, token: str) -> RemoteUserProfile:
        profile = self.profiles.get(strip_bearer(token))
        if profile is None:
            raise AuthenticationError("Invalid or expired token")
        return profile

    def user_exists(self, user_id: int, token: str) -> bool:
        self.exists_calls.append(user_id)
        if self.unreachable:
            return self.fallback.on_failure(user_id, ConnectionError("identity service down"))
        return user_id in self.known_ids


class FakeAssistant:
    def __init__(self):
        self.prompts = []

    def generate_task_plan(self, task) -> str:
        self.prompts.append(task.title)
        return f"Plan for {task.title}"


class RecordingEmailService:
    def __init__(self):
        self.activations = []
        self.resets = []

    def send_activation_email(self, to_email, full_name, activation_code, expires_minutes=15):
        self.activations.append((to_email, activation_code))
        return True

    def send_password_reset_email(self, to_email, full_name, reset_token, expires_minutes=60):
        self.resets.append((to_email, reset_token))
        return True


# ----------------------------------------------------------------------
# Database
# ----------------------------------------------------------------------
@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite needs explicit BEGIN for SAVEPOINT rollbacks to behave
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


# ----------------------------------------------------------------------
# Services
# ----------------------------------------------------------------------
@pytest.fixture
def test_settings():
    return Settings(
        SECRET_KEY=TEST_SECRET,
        DATABASE_URL="sqlite://",
        SENDGRID_API_KEY=None,
        MAIL_FROM=None,
        USER_EXISTS_FALLBACK="assume_exists",
    )


@pytest.fixture
def identity():
    return FakeIdentityClient()


@pytest.fixture
def assistant():
    return FakeAssistant()


@pytest.fixture
def authenticator(identity):
    return RequestAuthenticator(TokenValidator(TEST_SECRET), identity)


@pytest.fixture
def svc(session, authenticator, identity, assistant):
    return SimpleNamespace(
        projects=ProjectService(session, authenticator, identity),
        members=MemberService(session, authenticator, identity),
        tasks=TaskService(session, authenticator, identity, assistant),
        calendar=CalendarService(session, authenticator, identity),
        time=TimeTrackingService(session, authenticator, identity),
    )


@pytest.fixture
def tokens(identity):
    """Tokens for users 7 (owner), 9, 11 and 13."""
    return {user_id: identity.login(user_id) for user_id in (7, 9, 11, 13)}


# ----------------------------------------------------------------------
# HTTP clients
# ----------------------------------------------------------------------
@pytest.fixture
def project_client(session, identity, assistant, test_settings):
    from main import project_app

    project_app.dependency_overrides[get_session] = lambda: session
    project_app.dependency_overrides[get_user_client] = lambda: identity
    project_app.dependency_overrides[get_ai_assistant] = lambda: assistant
    project_app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(project_app)
    project_app.dependency_overrides.clear()


@pytest.fixture
def emails():
    return RecordingEmailService()


@pytest.fixture
def auth_client(session, emails, test_settings):
    from main import auth_app

    auth_app.dependency_overrides[get_session] = lambda: session
    auth_app.dependency_overrides[get_email_service] = lambda: emails
    auth_app.dependency_overrides[get_settings] = lambda: test_settings
    yield TestClient(auth_app)
    auth_app.dependency_overrides.clear()
