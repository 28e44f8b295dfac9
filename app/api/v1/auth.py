"""Registration, login, email verification, password reset and session endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import CurrentUser, OptionalUser
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.models.user import ROLE_CUSTOMER, ROLE_ORGANISER
from app.schemas.auth import (
    AuthResponse,
    EmailVerificationRequest,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    SessionResponse,
    UserResponse,
)
from app.services import accounts

router = APIRouter()

DbSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


@router.post(
    "/register/customer",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_customer(body: RegisterRequest, db: DbSession, settings: AppSettings) -> RegisterResponse:
    """Create a customer account. A verification code is sent to the email address."""
    return accounts.register(db, body, ROLE_CUSTOMER, settings)


@router.post(
    "/register/organiser",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_organiser(body: RegisterRequest, db: DbSession, settings: AppSettings) -> RegisterResponse:
    """Create an organiser account. A verification code is sent to the email address."""
    return accounts.register(db, body, ROLE_ORGANISER, settings)


@router.post("/verify-email", response_model=AuthResponse)
def verify_email(body: EmailVerificationRequest, db: DbSession, settings: AppSettings) -> AuthResponse:
    return accounts.verify_email(db, body, settings)


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, db: DbSession, settings: AppSettings) -> AuthResponse:
    """
    Authenticate with email and password; returns the user and a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    return accounts.login(db, body, settings)


@router.post("/logout", response_model=MessageResponse)
def logout(_user: CurrentUser) -> MessageResponse:
    """Tokens are stateless; the client discards its token. Nothing is revoked server-side."""
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
def get_me(user: CurrentUser, db: DbSession) -> UserResponse:
    return UserResponse(user=accounts.get_profile(db, user.id))


@router.get("/session", response_model=SessionResponse)
def get_session(user: OptionalUser) -> SessionResponse:
    """Report who is calling. Guests (no or unusable token) get authenticated=false."""
    return SessionResponse(authenticated=user is not None, user=user)


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(body: ForgotPasswordRequest, db: DbSession, settings: AppSettings) -> MessageResponse:
    return MessageResponse(message=accounts.request_password_reset(db, body.email, settings))


@router.post("/reset-password", response_model=AuthResponse)
def reset_password(body: ResetPasswordRequest, db: DbSession, settings: AppSettings) -> AuthResponse:
    return accounts.reset_password(db, body, settings)
