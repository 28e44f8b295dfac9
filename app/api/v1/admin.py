"""Admin-only user management. Every route requires an authenticated ADMIN."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, require_role
from app.core.database import get_db
from app.models.user import ROLE_ADMIN
from app.schemas.admin import (
    ChangeRoleRequest,
    DashboardResponse,
    ToggleStatusRequest,
    UserActionResponse,
    UsersListResponse,
)
from app.schemas.auth import PublicUser, Role, UserResponse
from app.services import admin as admin_service

require_admin = require_role([ROLE_ADMIN])

# Order matters: get_current_user sets request.state.user for the role gate.
router = APIRouter(dependencies=[Depends(get_current_user), Depends(require_admin)])

DbSession = Annotated[Session, Depends(get_db)]


@router.get("/users", response_model=UsersListResponse)
def list_users(db: DbSession, role: Role | None = None) -> UsersListResponse:
    return UsersListResponse(users=admin_service.list_users(db, role))


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: uuid.UUID, db: DbSession) -> UserResponse:
    return UserResponse(user=admin_service.get_user(db, user_id))


@router.patch("/users/{user_id}/toggle-status", response_model=UserActionResponse)
def toggle_user_status(
    user_id: uuid.UUID,
    body: ToggleStatusRequest,
    db: DbSession,
) -> UserActionResponse:
    """Activate or deactivate an account. Deactivated users cannot log in."""
    return admin_service.set_user_status(db, user_id, body.is_active)


@router.patch("/users/{user_id}/change-role", response_model=UserActionResponse)
def change_user_role(
    user_id: uuid.UUID,
    body: ChangeRoleRequest,
    db: DbSession,
    admin: Annotated[PublicUser, Depends(require_admin)],
) -> UserActionResponse:
    return admin_service.change_user_role(db, user_id, body.new_role, performed_by=admin.id)


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(db: DbSession) -> DashboardResponse:
    return admin_service.dashboard_stats(db)
