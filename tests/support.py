"""Shared helpers: in-memory database, user factory and an API test case base class."""

import unittest
from datetime import timedelta

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import get_db
from app.core.security import create_access_token, hash_password
from app.main import app
from app.models import Base, User

DEFAULT_PASSWORD = "Secret-pass1"

# bcrypt at cost 12 is slow; hash each distinct password once per test run.
_hash_cache: dict[str, str] = {}


def password_hash(password: str) -> str:
    if password not in _hash_cache:
        _hash_cache[password] = hash_password(password)
    return _hash_cache[password]


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database shared by all threads of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_user(
    db: Session,
    email: str = "customer@example.com",
    role: str = "CUSTOMER",
    password: str = DEFAULT_PASSWORD,
    full_name: str = "Test User",
    is_active: bool = True,
    is_email_verified: bool = True,
    is_verified: bool = False,
) -> User:
    user = User(
        email=email,
        password_hash=password_hash(password),
        full_name=full_name,
        role=role,
        is_active=is_active,
        is_verified=is_verified,
        is_email_verified=is_email_verified,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def token_for(user: User, expires_delta: timedelta | None = None) -> str:
    return create_access_token({"sub": str(user.id)}, expires_delta=expires_delta)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class ApiTestCase(unittest.TestCase):
    """Runs the real app against a per-test SQLite database."""

    def setUp(self) -> None:
        self.session_factory = make_session_factory()

        def override_get_db():
            db = self.session_factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.addCleanup(app.dependency_overrides.clear)
        self.client = TestClient(app)
        self.db = self.session_factory()
        self.addCleanup(self.db.close)

    def create_user(self, **kwargs: object) -> User:
        return create_user(self.db, **kwargs)

    def fetch_user(self, email: str) -> User:
        """Reload a user as committed by the API (the test session may hold stale state)."""
        self.db.expire_all()
        return self.db.query(User).filter(User.email == email).one()
