"""Pydantic request/response schemas."""

from app.schemas.admin import (
    ChangeRoleRequest,
    DashboardResponse,
    ToggleStatusRequest,
    UserActionResponse,
    UsersListResponse,
)
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    PublicUser,
    RegisterRequest,
    SessionResponse,
)
from app.schemas.errors import ErrorResponse, ValidationDetails
from app.schemas.health import HealthResponse

__all__ = [
    "AuthResponse",
    "ChangeRoleRequest",
    "DashboardResponse",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "PublicUser",
    "RegisterRequest",
    "SessionResponse",
    "ToggleStatusRequest",
    "UserActionResponse",
    "UsersListResponse",
    "ValidationDetails",
]
