"""Request/response schemas for admin user management."""

from pydantic import BaseModel, Field

from app.schemas.auth import PublicUser, Role


class UsersListResponse(BaseModel):
    """Response for GET /admin/users."""

    users: list[PublicUser]


class ToggleStatusRequest(BaseModel):
    is_active: bool = Field(..., description="New active flag for the account")


class ChangeRoleRequest(BaseModel):
    new_role: Role = Field(..., description="Role to assign")


class UserActionResponse(BaseModel):
    """Outcome of a status or role change."""

    message: str
    user: PublicUser


class UserCounts(BaseModel):
    total: int = 0
    customers: int = 0
    organisers: int = 0
    admins: int = 0
    active: int = 0
    new_this_month: int = 0


class DashboardResponse(BaseModel):
    users: UserCounts
