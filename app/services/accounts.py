"""
Account lifecycle: registration, email verification, login and password reset.

Raises AppError subclasses for every client-facing failure; callers (routes)
let them propagate to the error handlers.
"""

import hashlib
import hmac
import logging
import secrets
import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from app.core.security import create_user_token, hash_password, verify_password
from app.models.user import ROLE_CUSTOMER, ROLE_ORGANISER, User
from app.schemas.auth import (
    AuthResponse,
    EmailVerificationRequest,
    LoginRequest,
    PublicUser,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
)
from app.services import notification

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

SELF_SERVICE_ROLES = (ROLE_CUSTOMER, ROLE_ORGANISER)
PASSWORD_RESET_SENT_MESSAGE = (
    "If an account exists for this email, a password reset code has been sent."
)
INVALID_RESET_CODE_MESSAGE = "Invalid or expired reset code"


def generate_code() -> str:
    """Six-digit one-time code."""
    return f"{secrets.randbelow(900000) + 100000}"


def _hash_code(code: str) -> str:
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def _as_utc(value: datetime) -> datetime:
    # Some backends (SQLite) hand back naive datetimes for timezone-aware columns.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _auth_response(user: User, settings: "Settings") -> AuthResponse:
    return AuthResponse(
        user=PublicUser.model_validate(user),
        access_token=create_user_token(user.id, settings),
    )


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def register(
    db: Session,
    body: RegisterRequest,
    role: str,
    settings: "Settings | None" = None,
) -> RegisterResponse:
    """Create an unverified account and send its email verification code."""
    if role not in SELF_SERVICE_ROLES:
        raise ValueError(f"Role {role!r} cannot self-register")
    settings = settings or get_settings()

    if get_user_by_email(db, body.email) is not None:
        raise ConflictError("Email is already registered")

    code = generate_code()
    now = datetime.now(UTC)
    user = User(
        email=body.email,
        password_hash=hash_password(body.password),
        full_name=body.full_name,
        phone=body.phone,
        role=role,
        is_email_verified=False,
        email_verification_code=code,
        email_verification_expires=now
        + timedelta(minutes=settings.EMAIL_VERIFICATION_TTL_MINUTES),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("Email is already registered") from e

    notification.send_verification_code(
        user.email, code, settings.EMAIL_VERIFICATION_TTL_MINUTES
    )
    logger.info("User registered", extra={"user_id": str(user.id), "role": role})
    return RegisterResponse(requires_email_verification=True, email=user.email)


def verify_email(
    db: Session,
    body: EmailVerificationRequest,
    settings: "Settings | None" = None,
) -> AuthResponse:
    """Check the emailed code; on success mark the account verified and sign the user in."""
    settings = settings or get_settings()
    user = get_user_by_email(db, body.email)
    if user is None:
        raise NotFoundError("User not found")
    if user.is_email_verified:
        raise BadRequestError("Email is already verified")
    if not user.email_verification_code or not hmac.compare_digest(
        user.email_verification_code, body.code
    ):
        raise BadRequestError("Invalid verification code")
    if (
        user.email_verification_expires is None
        or _as_utc(user.email_verification_expires) < datetime.now(UTC)
    ):
        raise BadRequestError("Verification code expired")

    user.is_email_verified = True
    user.email_verification_code = None
    user.email_verification_expires = None
    db.commit()
    db.refresh(user)
    logger.info("Email verified", extra={"user_id": str(user.id)})
    return _auth_response(user, settings)


def login(
    db: Session,
    body: LoginRequest,
    settings: "Settings | None" = None,
) -> AuthResponse:
    """Authenticate with email and password; returns the user and an access token."""
    settings = settings or get_settings()
    user = get_user_by_email(db, body.email)
    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("Login failed", extra={"reason": "invalid_credentials"})
        raise UnauthorizedError("Invalid credentials")
    if not user.is_email_verified:
        raise ForbiddenError("Email not verified. Please verify your email first.")
    if not user.is_active:
        raise ForbiddenError("Your account has been deactivated")

    user.last_login_at = datetime.now(UTC)
    user.login_count = (user.login_count or 0) + 1
    db.commit()
    db.refresh(user)
    logger.info("Login succeeded", extra={"user_id": str(user.id), "role": user.role})
    return _auth_response(user, settings)


def request_password_reset(
    db: Session,
    email: str,
    settings: "Settings | None" = None,
) -> str:
    """
    Issue a reset code when the account exists and is active.
    Always returns the same message so callers cannot discover which accounts exist.
    """
    settings = settings or get_settings()
    user = get_user_by_email(db, email)
    if user is None or not user.is_active:
        return PASSWORD_RESET_SENT_MESSAGE

    code = generate_code()
    user.password_reset_code_hash = _hash_code(code)
    user.password_reset_expires = datetime.now(UTC) + timedelta(
        minutes=settings.PASSWORD_RESET_TTL_MINUTES
    )
    db.commit()
    notification.send_password_reset_code(user.email, code, settings.PASSWORD_RESET_TTL_MINUTES)
    logger.info("Password reset requested", extra={"user_id": str(user.id)})
    return PASSWORD_RESET_SENT_MESSAGE


def reset_password(
    db: Session,
    body: ResetPasswordRequest,
    settings: "Settings | None" = None,
) -> AuthResponse:
    """Replace the password using a valid reset code; the code is single-use."""
    settings = settings or get_settings()
    user = get_user_by_email(db, body.email)
    if user is None or not user.password_reset_code_hash or user.password_reset_expires is None:
        raise BadRequestError(INVALID_RESET_CODE_MESSAGE)
    if not hmac.compare_digest(user.password_reset_code_hash, _hash_code(body.code)):
        raise BadRequestError(INVALID_RESET_CODE_MESSAGE)
    if _as_utc(user.password_reset_expires) < datetime.now(UTC):
        raise BadRequestError(INVALID_RESET_CODE_MESSAGE)

    user.password_hash = hash_password(body.new_password)
    user.password_reset_code_hash = None
    user.password_reset_expires = None
    db.commit()
    db.refresh(user)
    logger.info("Password reset completed", extra={"user_id": str(user.id)})
    return _auth_response(user, settings)


def get_profile(db: Session, user_id: uuid.UUID) -> PublicUser:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return PublicUser.model_validate(user)
