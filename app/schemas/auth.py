"""Request/response schemas for auth endpoints."""

import re
import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

Role = Literal["CUSTOMER", "ORGANISER", "ADMIN"]

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 64
FULL_NAME_MAX_LEN = 100

_PHONE_RE = re.compile(r"^\+?[0-9]{10,15}$")
_CODE_RE = re.compile(r"^\d{6}$")


def _normalize_email(v: str) -> str:
    return v.strip().lower()


def _check_password_strength(v: str) -> str:
    if not re.search(r"[A-Z]", v):
        raise ValueError("Password must include at least one uppercase letter")
    if not re.search(r"[a-z]", v):
        raise ValueError("Password must include at least one lowercase letter")
    if not re.search(r"[0-9]", v):
        raise ValueError("Password must include at least one number")
    return v


def _check_code(v: str) -> str:
    if not _CODE_RE.match(v):
        raise ValueError("Code must be a 6 digit number")
    return v


class PublicUser(BaseModel):
    """User as exposed to clients and attached to requests. Never carries secrets."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    full_name: str
    phone: str | None = None
    role: Role
    is_active: bool
    is_verified: bool
    is_email_verified: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class RegisterRequest(BaseModel):
    """Self-service registration (customer or organiser)."""

    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    full_name: str = Field(..., min_length=1, max_length=FULL_NAME_MAX_LEN)
    phone: str | None = None

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password_strength(v)

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Full name is required")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not _PHONE_RE.match(v):
            raise ValueError("Phone number must be 10-15 digits with an optional + prefix")
        return v


class RegisterResponse(BaseModel):
    """Registration accepted; the account must verify its email before login."""

    requires_email_verification: bool = True
    email: str


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr
    password: str = Field(..., min_length=1, description="Password")

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class EmailVerificationRequest(BaseModel):
    email: EmailStr
    code: str

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        return _check_code(v)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    code: str
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        return _check_code(v)

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return _check_password_strength(v)


class AuthResponse(BaseModel):
    """Authenticated user plus a bearer token for the Authorization header."""

    user: PublicUser
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class UserResponse(BaseModel):
    user: PublicUser


class SessionResponse(BaseModel):
    """Result of an optional-auth check: a guest gets authenticated=False and no user."""

    authenticated: bool
    user: PublicUser | None = None


class MessageResponse(BaseModel):
    message: str
