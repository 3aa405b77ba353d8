"""
Create the first superadmin from settings (SUPERADMIN_USERNAME / SUPERADMIN_EMAIL / SUPERADMIN_PASSWORD).

    python -m acrossmedia.bootstrap [--create-tables]

Does nothing when an account with that email already exists.
"""
import argparse
import logging
import sys
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from acrossmedia.auth import hash_password
from acrossmedia.config import Settings, get_settings
from acrossmedia.database import SessionLocal, init_db
from acrossmedia.models.admin import Admin, AdminRole, AdminStatus
from acrossmedia.services.password_policy import validate_password_strength, validate_username

logger = logging.getLogger("acrossmedia.bootstrap")


class BootstrapError(Exception):
    pass


def create_superadmin(db: Session, settings: Settings) -> Admin | None:
    """Returns the new account, or None if one with the configured email exists."""
    email = (settings.superadmin_email or "").strip().lower()
    if not email or not settings.superadmin_password:
        raise BootstrapError("SUPERADMIN_EMAIL and SUPERADMIN_PASSWORD must be set")
    try:
        username = validate_username(settings.superadmin_username)
    except ValueError as e:
        raise BootstrapError(str(e))
    strength = validate_password_strength(settings.superadmin_password)
    if not strength.is_valid:
        raise BootstrapError("Superadmin password is too weak: " + "; ".join(strength.suggestions))

    existing = db.query(Admin).filter(Admin.email == email).first()
    if existing:
        logger.info("Superadmin already exists with email %s", email)
        return None
    if db.query(Admin).filter(Admin.username == username).first():
        raise BootstrapError(f"Username {username!r} is already used by another account")

    now = datetime.utcnow()
    admin = Admin(
        username=username,
        email=email,
        password=hash_password(settings.superadmin_password),
        role=AdminRole.SUPERADMIN.value,
        status=AdminStatus.ACTIVE.value,
        approved_at=now,
        created_at=now,
        updated_at=now,
    )
    db.add(admin)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise BootstrapError("Superadmin username or email is already in use")
    db.refresh(admin)
    logger.info("Superadmin created: %s (%s)", admin.username, admin.id)
    return admin


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the AcrossMedia superadmin account")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="create missing tables first (development databases without migrations)",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if args.create_tables:
        init_db()

    db = SessionLocal()
    try:
        create_superadmin(db, get_settings())
    except BootstrapError as e:
        logger.error("%s", e)
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
