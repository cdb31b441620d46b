"""Request/response schemas for admin-only endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class OkResponse(BaseModel):
    ok: bool = True


class UserListItem(BaseModel):
    """User entry for admin list (no password)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None = None
    email: str
    role: str
    active: bool
    created_at: datetime | None = None


class UserUpdate(BaseModel):
    """Mutable identity fields. Email and password cannot be changed here."""

    name: str | None = Field(default=None, max_length=255)
    role: Literal["user", "admin"] | None = None
    active: bool | None = None


class IssueUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=1024)
    description: str | None = None
    status: str | None = Field(default=None, max_length=32)
    category_id: int | None = None
    priority: str | None = Field(default=None, max_length=32)


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    active: bool | None = None


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    active: bool


class CategorySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    active: bool


class AuditEntryOut(BaseModel):
    """Audit entry joined with the acting admin's email."""

    id: int
    admin_user_id: int
    admin_email: str | None = None
    action: str
    entity_type: str | None = None
    entity_id: int | None = None
    details: str | None = None
    created_at: datetime | None = None


class StatsResponse(BaseModel):
    """Dashboard counts for the admin overview."""

    total_users: int
    total_issues: int
    resolved_issues: int
    pending_issues: int
    categories: list[CategorySummary]
    recent_activity: list[AuditEntryOut]
