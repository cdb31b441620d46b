"""ORM model for identities (auth and RBAC)."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func, true

from civictrack.models.base import Base


class User(Base):
    """
    Registered identity for JWT authentication and role-based access control.

    role: 'admin' or 'user'. Inactive users are refused at login.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user", server_default="user")
    active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} role={self.role}>"
