"""
Create a user (e.g. first admin). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD FULL_NAME [role]
Example:
  python -m app.scripts.create_user admin@example.com 'S3cure-password' 'Site Admin' ADMIN

Users created here skip email verification.
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.security import hash_password
from app.models.user import ROLES, User
from app.schemas.auth import RegisterRequest

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=get_settings().LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    parser = argparse.ArgumentParser(description="Create a pre-verified Appointly user.")
    parser.add_argument("email", help="Email address (login name)")
    parser.add_argument("password", help="Password (8-64 chars, upper, lower and digit)")
    parser.add_argument("full_name", help="Display name")
    parser.add_argument("role", nargs="?", default="CUSTOMER", choices=ROLES)
    args = parser.parse_args(argv)

    try:
        body = RegisterRequest(email=args.email, password=args.password, full_name=args.full_name)
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(part) for part in err["loc"])
            print(f"{field}: {err['msg']}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.email == body.email).first()
        if existing:
            print(f"User '{body.email}' already exists.", file=sys.stderr)
            return 1
        user = User(
            email=body.email,
            password_hash=hash_password(body.password),
            full_name=body.full_name,
            role=args.role,
            is_verified=True,
            is_email_verified=True,
        )
        db.add(user)
        db.commit()
        logger.info("Created user", extra={"user_id": str(user.id), "role": args.role})
        print(f"Created user '{body.email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
