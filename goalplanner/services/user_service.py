"""Credential store helpers."""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from goalplanner.core.errors import StoreUnavailable, ValidationFailure
from goalplanner.db.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    try:
        return db.query(User).filter(User.email == normalize_email(email)).one_or_none()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to look up user by email")
        raise StoreUnavailable("Credential store unavailable") from exc


def create_user(db: Session, *, name: str, email: str, password_hash: str) -> User:
    """Insert a new user; a duplicate email leaves the existing row untouched."""
    normalized = normalize_email(email)
    if find_user_by_email(db, normalized):
        raise ValidationFailure("Email already exists")

    user = User(name=name, email=normalized, password_hash=password_hash)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same email.
        db.rollback()
        raise ValidationFailure("Email already exists") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to create user")
        raise StoreUnavailable("Failed to save user") from exc
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def update_password(db: Session, email: str, password_hash: str) -> bool:
    user = find_user_by_email(db, email)
    if user is None:
        return False
    user.password_hash = password_hash
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to update password for user %s", user.id)
        raise StoreUnavailable("Failed to update password") from exc
    logger.info("Password updated for user %s", user.id)
    return True
