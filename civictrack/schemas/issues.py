"""Schemas for citizen-facing issue endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class IssueCreate(BaseModel):
    """New issue report. Only title is required."""

    reporter_user_id: int | None = None
    type: str | None = Field(default=None, max_length=255)
    priority: str | None = Field(default=None, max_length=32)
    title: str = Field(..., min_length=1, max_length=1024)
    description: str | None = None
    address: str | None = Field(default=None, max_length=1024)
    city: str | None = Field(default=None, max_length=255)
    landmark: str | None = Field(default=None, max_length=1024)
    status: str | None = Field(default=None, max_length=32)
    contact: str | None = Field(default=None, max_length=255)
    gps_location: str | None = Field(default=None, max_length=255)
    category_id: int | None = None


class IssueOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reporter_user_id: int | None = None
    type: str | None = None
    priority: str | None = None
    title: str
    description: str | None = None
    address: str | None = None
    city: str | None = None
    landmark: str | None = None
    status: str
    reported_date: datetime | None = None
    contact: str | None = None
    upvotes: int = 0
    gps_location: str | None = None
    category_id: int | None = None
