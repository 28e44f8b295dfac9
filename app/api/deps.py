"""
Auth dependencies shared by all routers.

get_current_user   -- requires a valid Bearer JWT for an existing user (401 otherwise).
get_optional_user  -- same resolution, but a request without a usable token continues as guest.
require_role(...)  -- role allow-list; must run after get_current_user.

The resolved user is also stored on request.state.user.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.core.errors import ForbiddenError, UnauthorizedError
from app.schemas.auth import PublicUser
from app.services.session import authenticate

logger = logging.getLogger(__name__)

# Registered for the OpenAPI "Authorize" button; the header itself is parsed by authenticate().
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    _credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> PublicUser:
    """Dependency: require valid Bearer JWT and return the current user. Raises 401 if missing or invalid."""
    result = authenticate(request.headers.get("Authorization"), db, settings)
    if result.error is not None:
        raise UnauthorizedError(result.error.message)
    request.state.user = result.user
    return result.user


def get_optional_user(
    request: Request,
    _credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> PublicUser | None:
    """Dependency: return the current user when a valid token is sent, else None (guest)."""
    result = authenticate(request.headers.get("Authorization"), db, settings)
    if result.error is not None:
        logger.debug(
            "Continuing as guest",
            extra={"path": request.url.path, "reason": result.error.name},
        )
    request.state.user = result.user
    return result.user


def require_role(allowed_roles: str | Iterable[str]) -> Callable[[Request], PublicUser]:
    """
    Build a dependency that admits only users whose role is in allowed_roles.

    Reads the user set by get_current_user; list that dependency first.
    """
    roles = frozenset([allowed_roles] if isinstance(allowed_roles, str) else allowed_roles)

    def role_gate(request: Request) -> PublicUser:
        user: PublicUser | None = getattr(request.state, "user", None)
        if user is None:
            raise UnauthorizedError("Authentication required")
        if user.role not in roles:
            logger.info(
                "Role not permitted",
                extra={"path": request.url.path, "role": user.role, "allowed": sorted(roles)},
            )
            raise ForbiddenError("You do not have permission to access this resource")
        return user

    return role_gate


CurrentUser = Annotated[PublicUser, Depends(get_current_user)]
OptionalUser = Annotated[PublicUser | None, Depends(get_optional_user)]
