"""Credential store: the only path through which identities are read or written."""

import logging
from functools import lru_cache

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from civictrack.core.errors import Conflict, ValidationError
from civictrack.core.security import (
    PASSWORD_MAX_BYTES,
    ROLE_USER,
    ROLES,
    hash_password,
    password_fits,
    verify_password,
)
from civictrack.models import AuditLog, User

logger = logging.getLogger(__name__)


@lru_cache
def _dummy_hash() -> str:
    """Hash checked when there is no usable account, so every login failure costs one bcrypt run."""
    return hash_password("civictrack-no-such-account")


def default_name(email: str) -> str:
    """Display name used when none is given: the local part of the email."""
    return email.split("@", 1)[0]


def find_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()


def find_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def create_user(
    db: Session,
    *,
    email: str,
    password: str,
    name: str | None = None,
    role: str = ROLE_USER,
    active: bool = True,
) -> User:
    """
    Insert a new identity and commit. Raises Conflict if the email is taken
    and ValidationError if bcrypt would truncate the password.

    The uniqueness check is repeated by the database constraint, so a
    concurrent insert of the same email also ends as Conflict.
    """
    if role not in ROLES:
        raise ValueError(f"invalid role: {role!r}")
    if not password_fits(password):
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    if find_by_email(db, email) is not None:
        raise Conflict("Email already registered")
    user = User(
        name=name or default_name(email),
        email=email,
        password_hash=hash_password(password),
        role=role,
        active=active,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("Email already registered") from e
    db.refresh(user)
    return user


def authenticate(db: Session, email: str, password: str) -> User | None:
    """
    Return the identity for valid credentials, else None.

    Unknown email, inactive account and wrong password are not distinguished,
    by result or by timing.
    """
    user = find_by_email(db, email)
    if user is None or not user.active:
        verify_password(password, _dummy_hash())
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def update_mutable_fields(
    db: Session,
    user: User,
    *,
    role: str | None = None,
    name: str | None = None,
    active: bool | None = None,
) -> User:
    """Apply role/name/active changes to the session. The caller commits."""
    if role is not None:
        if role not in ROLES:
            raise ValueError(f"invalid role: {role!r}")
        user.role = role
    if name is not None:
        user.name = name
    if active is not None:
        user.active = active
    return user


def has_audit_history(db: Session, user_id: int) -> bool:
    count = db.execute(
        select(func.count()).select_from(AuditLog).where(AuditLog.admin_user_id == user_id)
    ).scalar_one()
    return count > 0


def delete_user(db: Session, user: User) -> None:
    """
    Remove an identity from the session. The caller commits.

    Identities that have acted as admin keep their audit trail, so they cannot
    be deleted; deactivate them instead. Reported issues keep a null reporter.
    """
    if has_audit_history(db, user.id):
        raise Conflict("User has audit history and cannot be deleted; deactivate instead")
    db.delete(user)
    db.flush()


def count_users(db: Session) -> int:
    return db.execute(select(func.count()).select_from(User)).scalar_one()
