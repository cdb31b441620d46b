"""Pydantic request/response schemas."""

from civictrack.schemas.admin import (
    AuditEntryOut,
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    IssueUpdate,
    OkResponse,
    StatsResponse,
    UserListItem,
    UserUpdate,
)
from civictrack.schemas.auth import (
    CurrentIdentity,
    LoginRequest,
    LoginResponse,
    PublicUser,
    RegisterRequest,
)
from civictrack.schemas.health import HealthResponse
from civictrack.schemas.issues import IssueCreate, IssueOut

__all__ = [
    "AuditEntryOut",
    "CategoryCreate",
    "CategoryOut",
    "CategoryUpdate",
    "CurrentIdentity",
    "HealthResponse",
    "IssueCreate",
    "IssueOut",
    "IssueUpdate",
    "LoginRequest",
    "LoginResponse",
    "OkResponse",
    "PublicUser",
    "RegisterRequest",
    "StatsResponse",
    "UserListItem",
    "UserUpdate",
]
