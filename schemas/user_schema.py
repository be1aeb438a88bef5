# user_schema.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import date, datetime


# ---------------------------
# Register & Auth
# ---------------------------
class RegistrationRequest(BaseModel):
    firstname: str = Field(..., min_length=1, max_length=100)
    lastname: str = Field(..., min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    email: EmailStr
    password: str = Field(..., min_length=8)


class AuthenticationRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthenticationResponse(BaseModel):
    token: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)
    confirm_password: str = Field(..., min_length=8)


class MessageResponse(BaseModel):
    message: str


# ---------------------------
# Read
# ---------------------------
class UserRead(BaseModel):
    id: int
    firstname: str
    lastname: str
    full_name: str
    email: EmailStr
    date_of_birth: Optional[date] = None
    enabled: bool
    account_locked: bool
    roles: List[str] = Field(default_factory=list)
    created_date: Optional[datetime] = None

    @field_validator("roles", mode="before")
    @classmethod
    def role_names(cls, v):
        return [getattr(role, "name", role) for role in v or []]

    model_config = ConfigDict(from_attributes=True)
