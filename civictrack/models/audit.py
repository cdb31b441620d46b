"""AuditLog model: append-only record of administrative mutations.

Rows are only ever inserted. Nothing in the application updates or deletes them,
and the actor reference is RESTRICT so an identity with history cannot vanish.
"""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from civictrack.models.base import Base


class AuditAction(str, Enum):
    """Closed vocabulary of audited admin actions."""

    UPDATE_USER = "UPDATE_USER"
    DELETE_USER = "DELETE_USER"
    UPDATE_ISSUE = "UPDATE_ISSUE"
    DELETE_ISSUE = "DELETE_ISSUE"
    CREATE_CATEGORY = "CREATE_CATEGORY"
    UPDATE_CATEGORY = "UPDATE_CATEGORY"
    DELETE_CATEGORY = "DELETE_CATEGORY"
    UPDATE_SETTINGS = "UPDATE_SETTINGS"


class AuditLog(Base):
    """Immutable audit trail entry."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    admin_user_id = Column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    action = Column(String(64), nullable=False, index=True)
    entity_type = Column(String(64), nullable=True)
    entity_id = Column(Integer, nullable=True)
    # JSON snapshot of the submitted values; None when they could not be serialized
    details = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    def __repr__(self) -> str:
        return f"<AuditLog action={self.action} actor={self.admin_user_id}>"
