"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from civictrack.core.security import (
    EMAIL_MAX_LEN,
    EMAIL_MIN_LEN,
    PASSWORD_MAX_BYTES,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    password_fits,
)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LEN, description="Email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class RegisterRequest(BaseModel):
    """Self-service registration; role is always 'user'."""

    name: str | None = Field(default=None, max_length=255, description="Display name")
    email: str = Field(
        ...,
        min_length=EMAIL_MIN_LEN,
        max_length=EMAIL_MAX_LEN,
        pattern=r"^[^@\s]+@[^@\s]+$",
        description="Email (login key, case-sensitive)",
    )
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
    )

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, v: str) -> str:
        if not password_fits(v):
            raise ValueError(f"password must be at most {PASSWORD_MAX_BYTES} bytes")
        return v


class PublicUser(BaseModel):
    """Identity fields safe to return to clients (never the hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None = None
    email: str
    role: str


class LoginResponse(BaseModel):
    """Bearer token plus the authenticated identity."""

    token: str = Field(..., description="JWT access token; send as Authorization: Bearer <token>")
    user: PublicUser


class MeResponse(BaseModel):
    user: PublicUser


class CurrentIdentity(BaseModel):
    """Authenticated identity (id, role) taken from the token for dependency injection."""

    id: int
    role: str
