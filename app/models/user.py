"""ORM model for application users (auth and RBAC)."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, Uuid

from app.models.base import Base

ROLE_CUSTOMER = "CUSTOMER"
ROLE_ORGANISER = "ORGANISER"
ROLE_ADMIN = "ADMIN"
ROLES = (ROLE_CUSTOMER, ROLE_ORGANISER, ROLE_ADMIN)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'CUSTOMER', 'ORGANISER' or 'ADMIN'. Rows are deactivated via
    is_active, never deleted by the API.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('CUSTOMER', 'ORGANISER', 'ADMIN')", name="role"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=True)
    role = Column(String(16), nullable=False, default=ROLE_CUSTOMER)

    is_active = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_email_verified = Column(Boolean, nullable=False, default=False)

    email_verification_code = Column(String(6), nullable=True)
    email_verification_expires = Column(DateTime(timezone=True), nullable=True)
    password_reset_code_hash = Column(String(64), nullable=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)

    last_login_at = Column(DateTime(timezone=True), nullable=True)
    login_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )
