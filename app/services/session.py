"""
Session resolution: bearer token -> public user.

authenticate() never raises for a bad credential. It returns an AuthResult
holding either the resolved user or one AuthFailure, and leaves the policy
(reject vs. continue as guest) to the caller. Database errors are not
credential problems and propagate.
"""

import enum
import logging
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy.orm import Session

from app.core.errors import InvalidTokenError
from app.core.security import decode_access_token
from app.models.user import User
from app.schemas.auth import PublicUser

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class AuthFailure(enum.Enum):
    """Recoverable reasons a request carries no usable identity. Value is the client message."""

    MISSING_TOKEN = "Authorization token missing"
    INVALID_TOKEN = "Invalid or expired token"
    USER_NOT_FOUND = "User not found"

    @property
    def message(self) -> str:
        return self.value


@dataclass(frozen=True)
class AuthResult:
    user: PublicUser | None = None
    error: AuthFailure | None = None

    @property
    def ok(self) -> bool:
        return self.user is not None


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from 'Bearer <token>', or None when the header is absent or malformed."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def resolve_identity(db: Session, claims: dict[str, Any]) -> PublicUser | None:
    """Look up the token subject by primary key and project it; None if no such user."""
    sub = claims.get("sub")
    if not isinstance(sub, str):
        return None
    try:
        user_id = uuid.UUID(sub)
    except ValueError:
        return None
    user = db.get(User, user_id)
    if user is None:
        return None
    return PublicUser.model_validate(user)


def authenticate(
    authorization: str | None,
    db: Session,
    settings: "Settings | None" = None,
) -> AuthResult:
    """Resolve an Authorization header value to a user or a failure reason."""
    token = extract_bearer_token(authorization)
    if token is None:
        return AuthResult(error=AuthFailure.MISSING_TOKEN)
    try:
        claims = decode_access_token(token, settings)
    except InvalidTokenError:
        return AuthResult(error=AuthFailure.INVALID_TOKEN)
    user = resolve_identity(db, claims)
    if user is None:
        logger.info("Token subject has no matching user", extra={"sub": claims.get("sub")})
        return AuthResult(error=AuthFailure.USER_NOT_FOUND)
    return AuthResult(user=user)
