"""Pydantic schemas for the health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Service status, build version and store reachability."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    version: str = Field(description="CivicTrack package version")
    environment: Literal["dev", "prod"] = Field(description="Current app environment")
    database: Literal["connected", "disconnected"] = Field(
        description="Whether the credential and audit store answered SELECT 1",
    )
