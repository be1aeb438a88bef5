from .user_schema import (
    RegistrationRequest, AuthenticationRequest, AuthenticationResponse,
    ForgotPasswordRequest, ResetPasswordRequest, MessageResponse, UserRead
)
from .profile_schema import ProfileRead, ProfileUpdate
from .project_schema import ProjectCreate, ProjectRead, ProjectUpdate
from .member_schema import MemberInvite, MemberRead
from .task_schema import TaskCreate, TaskRead, TaskUpdate, AiTaskPlanRead
from .calendar_schema import CalendarRead, CalendarEventCreate, CalendarEventRead, CalendarEventUpdate
from .time_tracking_schema import TimeTrackingStart, TimeTrackingStop, TimeTrackingRead

__all__ = [
    # User / auth
    "RegistrationRequest", "AuthenticationRequest", "AuthenticationResponse",
    "ForgotPasswordRequest", "ResetPasswordRequest", "MessageResponse", "UserRead",

    # Profile
    "ProfileRead", "ProfileUpdate",

    # Project + members
    "ProjectCreate", "ProjectRead", "ProjectUpdate",
    "MemberInvite", "MemberRead",

    # Task
    "TaskCreate", "TaskRead", "TaskUpdate", "AiTaskPlanRead",

    # Calendar
    "CalendarRead", "CalendarEventCreate", "CalendarEventRead", "CalendarEventUpdate",

    # Time tracking
    "TimeTrackingStart", "TimeTrackingStop", "TimeTrackingRead",
]
