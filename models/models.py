# models/models.py
from typing import Optional, List
from datetime import date, datetime
from enum import Enum

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON, Text, UniqueConstraint


# ============================================================
# ENUMS
# ============================================================
class ProjectRole(str, Enum):
    """Roles inside a project, most privileged first."""
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    DEVELOPER = "DEVELOPER"
    QA = "QA"
    MEMBER = "MEMBER"


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    DONE = "DONE"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class CalendarEventType(str, Enum):
    TASK_DEADLINE = "TASK_DEADLINE"
    MILESTONE = "MILESTONE"
    SPRINT_START = "SPRINT_START"
    SPRINT_END = "SPRINT_END"
    MEETING = "MEETING"
    OTHER = "OTHER"


DEFAULT_USER_ROLE = "USER"


# ============================================================
# IDENTITY: LINK MODEL
# ============================================================
class UserRoleLink(SQLModel, table=True):
    __tablename__ = "user_role_link"
    user_id: int = Field(foreign_key="user.id", primary_key=True)
    role_id: int = Field(foreign_key="role.id", primary_key=True)


# ============================================================
# IDENTITY: ROLE
# ============================================================
class Role(SQLModel, table=True):
    __tablename__ = "role"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=50, unique=True, index=True)
    created_date: datetime = Field(default_factory=datetime.utcnow)

    users: List["User"] = Relationship(back_populates="roles", link_model=UserRoleLink)


# ============================================================
# IDENTITY: USER
# ============================================================
class User(SQLModel, table=True):
    __tablename__ = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    firstname: str = Field(max_length=100)
    lastname: str = Field(max_length=100)
    date_of_birth: Optional[date] = None
    email: str = Field(max_length=255, unique=True, index=True, nullable=False)
    password_hash: str = Field(nullable=False)

    account_locked: bool = Field(default=False)
    enabled: bool = Field(default=False)
    created_date: datetime = Field(default_factory=datetime.utcnow)
    last_modified_date: Optional[datetime] = None

    roles: List[Role] = Relationship(back_populates="users", link_model=UserRoleLink)
    profile: Optional["UserProfile"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"uselist": False, "cascade": "all, delete-orphan"},
    )

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()

    @property
    def role_names(self) -> List[str]:
        return [role.name for role in self.roles]


# ============================================================
# IDENTITY: PROFILE (1:1, created lazily)
# ============================================================
class UserProfile(SQLModel, table=True):
    __tablename__ = "user_profile"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", unique=True, index=True)

    position: Optional[str] = Field(default="", max_length=100)
    department: Optional[str] = Field(default="", max_length=100)
    phone_number: Optional[str] = Field(default="", max_length=50)
    timezone: Optional[str] = Field(default="UTC", max_length=50)
    skills: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    profile_image_url: Optional[str] = Field(default="", max_length=500)
    bio: Optional[str] = Field(default="", max_length=1000)

    created_date: datetime = Field(default_factory=datetime.utcnow)
    last_modified_date: Optional[datetime] = None

    user: Optional[User] = Relationship(back_populates="profile")


# ============================================================
# IDENTITY: ACTIVATION + PASSWORD RESET TOKENS
# ============================================================
class ActivationToken(SQLModel, table=True):
    __tablename__ = "activation_token"

    id: Optional[int] = Field(default=None, primary_key=True)
    token: str = Field(max_length=20, index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    expires_at: datetime
    validated_at: Optional[datetime] = None

    def is_expired(self) -> bool:
        return datetime.utcnow() > self.expires_at


class PasswordResetToken(SQLModel, table=True):
    __tablename__ = "password_reset_token"

    id: Optional[int] = Field(default=None, primary_key=True)
    token: str = Field(max_length=255, unique=True, index=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    expires_at: datetime
    used: bool = Field(default=False)

    def is_expired(self) -> bool:
        return datetime.utcnow() > self.expires_at


# ============================================================
# PROJECT
# ============================================================
class Project(SQLModel, table=True):
    __tablename__ = "project"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    owner_id: int = Field(index=True, nullable=False)

    # Legacy id sets, superseded by ProjectMember rows
    member_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))
    admin_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    tasks: List["Task"] = Relationship(
        back_populates="project",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    members: List["ProjectMember"] = Relationship(
        back_populates="project",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    calendar: Optional["ProjectCalendar"] = Relationship(
        back_populates="project",
        sa_relationship_kwargs={"uselist": False, "cascade": "all, delete-orphan"},
    )


# ============================================================
# PROJECT MEMBER (unique per project/user)
# ============================================================
class ProjectMember(SQLModel, table=True):
    __tablename__ = "project_member"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="uq_project_member"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="project.id", index=True)
    user_id: int = Field(index=True, nullable=False)
    role: str = Field(default=ProjectRole.MEMBER.value, max_length=20)
    joined_at: datetime = Field(default_factory=datetime.utcnow)
    invited_by: Optional[int] = None
    invitation_accepted: bool = Field(default=False)

    project: Optional[Project] = Relationship(back_populates="members")


# ============================================================
# TASK (self-referencing tree)
# ============================================================
class Task(SQLModel, table=True):
    __tablename__ = "task"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    project_id: int = Field(foreign_key="project.id", index=True)
    creator_id: int = Field(nullable=False)
    assignee_id: Optional[int] = Field(default=None, index=True)
    status: str = Field(default=TaskStatus.TODO.value, max_length=20)
    priority: str = Field(default=TaskPriority.MEDIUM.value, max_length=20)
    deadline: Optional[datetime] = None
    estimated_hours: Optional[int] = None
    parent_task_id: Optional[int] = Field(default=None, foreign_key="task.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    project: Optional[Project] = Relationship(back_populates="tasks")
    parent_task: Optional["Task"] = Relationship(
        back_populates="subtasks",
        sa_relationship_kwargs={"remote_side": "Task.id"},
    )
    # "all" without delete-orphan: detaching a subtask must not delete it
    subtasks: List["Task"] = Relationship(
        back_populates="parent_task",
        sa_relationship_kwargs={"cascade": "all", "order_by": "Task.id"},
    )
    time_entries: List["TimeTracking"] = Relationship(
        back_populates="task",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    # Default cascade: deleting a task nulls calendar_event.task_id
    calendar_events: List["CalendarEvent"] = Relationship(back_populates="task")


# ============================================================
# CALENDAR + EVENTS
# ============================================================
class ProjectCalendar(SQLModel, table=True):
    __tablename__ = "project_calendar"

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="project.id", unique=True, index=True)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    project: Optional[Project] = Relationship(back_populates="calendar")
    events: List["CalendarEvent"] = Relationship(
        back_populates="calendar",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class CalendarEvent(SQLModel, table=True):
    __tablename__ = "calendar_event"

    id: Optional[int] = Field(default=None, primary_key=True)
    calendar_id: int = Field(foreign_key="project_calendar.id", index=True)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    event_type: str = Field(default=CalendarEventType.OTHER.value, max_length=30)
    start_time: datetime = Field(index=True)
    end_time: Optional[datetime] = None
    all_day: bool = Field(default=False)
    location: Optional[str] = Field(default=None, max_length=255)
    task_id: Optional[int] = Field(default=None, foreign_key="task.id", index=True)
    created_by: int = Field(nullable=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    calendar: Optional[ProjectCalendar] = Relationship(back_populates="events")
    task: Optional[Task] = Relationship(back_populates="calendar_events")


# ============================================================
# TIME TRACKING (STARTED -> STOPPED)
# ============================================================
class TimeTracking(SQLModel, table=True):
    __tablename__ = "time_tracking"

    id: Optional[int] = Field(default=None, primary_key=True)
    task_id: int = Field(foreign_key="task.id", index=True)
    user_id: int = Field(index=True, nullable=False)
    start_time: datetime = Field(default_factory=datetime.utcnow)
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    description: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    task: Optional[Task] = Relationship(back_populates="time_entries")

    @property
    def is_stopped(self) -> bool:
        return self.end_time is not None

    def stop(self, end_time: datetime) -> None:
        """Close the interval; callers check is_stopped first."""
        self.end_time = end_time
        self.duration_minutes = int((end_time - self.start_time).total_seconds() // 60)
        self.updated_at = datetime.utcnow()
