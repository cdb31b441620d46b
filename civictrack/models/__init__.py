"""SQLAlchemy ORM models."""

from civictrack.models.audit import AuditAction, AuditLog
from civictrack.models.base import Base
from civictrack.models.category import Category
from civictrack.models.issue import Issue
from civictrack.models.setting import Setting
from civictrack.models.user import User

__all__ = ["AuditAction", "AuditLog", "Base", "Category", "Issue", "Setting", "User"]
