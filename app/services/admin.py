"""Admin user management: listing, activation and role changes."""

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import BadRequestError, NotFoundError
from app.models.user import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_ORGANISER, User
from app.schemas.admin import DashboardResponse, UserActionResponse, UserCounts
from app.schemas.auth import PublicUser
from app.services import notification

logger = logging.getLogger(__name__)


def _get_user_or_404(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def list_users(db: Session, role: str | None = None) -> list[PublicUser]:
    """All users, newest first; optionally restricted to one role."""
    query = db.query(User)
    if role is not None:
        query = query.filter(User.role == role)
    users = query.order_by(User.created_at.desc()).all()
    return [PublicUser.model_validate(u) for u in users]


def get_user(db: Session, user_id: uuid.UUID) -> PublicUser:
    return PublicUser.model_validate(_get_user_or_404(db, user_id))


def set_user_status(db: Session, user_id: uuid.UUID, is_active: bool) -> UserActionResponse:
    """Activate or deactivate an account and notify its owner."""
    user = _get_user_or_404(db, user_id)
    user.is_active = is_active
    db.commit()
    db.refresh(user)

    notification.send_status_changed(user.email, user.full_name, is_active)
    status_text = "activated" if is_active else "deactivated"
    logger.info("User %s", status_text, extra={"user_id": str(user.id)})
    return UserActionResponse(
        message=f"User {status_text} successfully",
        user=PublicUser.model_validate(user),
    )


def change_user_role(
    db: Session,
    user_id: uuid.UUID,
    new_role: str,
    performed_by: uuid.UUID,
) -> UserActionResponse:
    """
    Assign a new role. An admin cannot change their own role, and the new role
    must differ from the current one.
    """
    user = _get_user_or_404(db, user_id)
    if user.id == performed_by:
        raise BadRequestError("You cannot change your own role")
    if user.role == new_role:
        raise BadRequestError(f"User already has role {new_role}")

    old_role = user.role
    user.role = new_role
    db.commit()
    db.refresh(user)

    notification.send_role_changed(user.email, user.full_name, old_role, new_role)
    logger.info(
        "User role changed",
        extra={
            "user_id": str(user.id),
            "old_role": old_role,
            "new_role": new_role,
            "performed_by": str(performed_by),
        },
    )
    return UserActionResponse(
        message="User role changed successfully",
        user=PublicUser.model_validate(user),
    )


def dashboard_stats(db: Session, now: datetime | None = None) -> DashboardResponse:
    """User counts by role, active accounts, and sign-ups since the start of the month."""
    now = now or datetime.now(UTC)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    by_role = dict(
        db.query(User.role, func.count(User.id)).group_by(User.role).all()
    )
    total = sum(by_role.values())
    active = db.query(func.count(User.id)).filter(User.is_active.is_(True)).scalar() or 0
    new_this_month = (
        db.query(func.count(User.id)).filter(User.created_at >= month_start).scalar() or 0
    )
    return DashboardResponse(
        users=UserCounts(
            total=total,
            customers=by_role.get(ROLE_CUSTOMER, 0),
            organisers=by_role.get(ROLE_ORGANISER, 0),
            admins=by_role.get(ROLE_ADMIN, 0),
            active=active,
            new_this_month=new_this_month,
        )
    )
