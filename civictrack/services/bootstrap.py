"""Idempotent startup routine: create tables, seed default categories and the first admin."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy import Engine, func, select
from sqlalchemy.orm import Session

from civictrack.core.security import ROLE_ADMIN
from civictrack.models import Base, Category, User
from civictrack.services.users import create_user, find_by_email

if TYPE_CHECKING:
    from civictrack.core.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("Garbage & Waste", "Garbage and waste management issues"),
    ("Road & Infrastructure", "Roads, potholes, infrastructure"),
    ("Water Supply", "Water leakage and supply"),
    ("Electricity", "Power cuts and street lights"),
    ("Safety & Security", "Public safety"),
    ("Public Transport", "Buses, trains, metro"),
    ("Parks & Recreation", "Parks and recreation"),
    ("Noise Pollution", "Noise complaints"),
    ("Air Quality", "Air pollution"),
    ("Other", "Miscellaneous"),
)


def init_db(engine: Engine) -> None:
    """Create any missing tables (create-if-not-exists)."""
    Base.metadata.create_all(bind=engine)


def seed_default_categories(db: Session) -> int:
    """Insert the default categories when the table is empty. Returns rows inserted."""
    existing = db.execute(select(func.count()).select_from(Category)).scalar_one()
    if existing:
        return 0
    for name, description in DEFAULT_CATEGORIES:
        db.add(Category(name=name, description=description))
    db.commit()
    logger.info("Seeded %s default categories", len(DEFAULT_CATEGORIES))
    return len(DEFAULT_CATEGORIES)


def seed_admin(db: Session, settings: "Settings") -> User | None:
    """
    Create the bootstrap admin if no admin identity exists yet.

    Returns the created user, or None when nothing was created.
    """
    admin = db.execute(select(User.id).where(User.role == ROLE_ADMIN).limit(1)).first()
    if admin is not None:
        return None
    if find_by_email(db, settings.ADMIN_EMAIL) is not None:
        logger.warning(
            "No admin exists but ADMIN_EMAIL %s is taken by a non-admin; not seeding",
            settings.ADMIN_EMAIL,
        )
        return None
    user = create_user(
        db,
        email=settings.ADMIN_EMAIL,
        password=settings.ADMIN_PASSWORD.get_secret_value(),
        name=settings.ADMIN_NAME,
        role=ROLE_ADMIN,
    )
    logger.info("Seeded admin user: %s", user.email)
    return user


def bootstrap(engine: Engine, db: Session, settings: "Settings") -> None:
    """Run once at process start, before any request is served."""
    init_db(engine)
    if settings.SEED_DEFAULT_CATEGORIES:
        seed_default_categories(db)
    seed_admin(db, settings)
