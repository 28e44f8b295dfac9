"""Password hashing and JWT creation/verification for authentication."""

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from app.core.config import get_settings
from app.core.errors import InvalidTokenError

if TYPE_CHECKING:
    from app.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of the password.
BCRYPT_MAX_BYTES = 72

# Only signature and exp decide validity. Registered claims such as aud, sub
# and jti are returned as issued, whatever their type.
_DECODE_OPTIONS = {
    "require": ["exp"],
    "verify_aud": False,
    "verify_iat": False,
    "verify_sub": False,
    "verify_jti": False,
}


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(
    claims: dict[str, Any],
    settings: "Settings | None" = None,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Sign claims into a JWT with an injected exp.

    expires_delta overrides JWT_EXPIRES_IN for this token. The claims must not
    already carry 'exp'.
    """
    if "exp" in claims:
        raise ValueError("claims must not contain 'exp'; use expires_delta")
    settings = settings or get_settings()
    lifetime = expires_delta if expires_delta is not None else settings.jwt_expires_delta
    payload = dict(claims)
    payload["exp"] = datetime.now(UTC) + lifetime
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def create_user_token(user_id: Any, settings: "Settings | None" = None) -> str:
    """Access token whose subject is the user's id."""
    return create_access_token({"sub": str(user_id)}, settings=settings)


def decode_access_token(token: str, settings: "Settings | None" = None) -> dict[str, Any]:
    """
    Decode and validate JWT; return its claims.
    Raises InvalidTokenError on a bad signature, malformed token or elapsed exp.
    """
    settings = settings or get_settings()
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options=_DECODE_OPTIONS,
        )
    except jwt.PyJWTError as e:
        raise InvalidTokenError() from e
