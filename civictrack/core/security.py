"""Password hashing and JWT creation/verification for authentication."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from civictrack.core.config import settings

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)

# Min/max lengths for email and password validation.
EMAIL_MIN_LEN = 3
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 1
PASSWORD_MAX_LEN = 128
# bcrypt only reads the first 72 bytes of its input.
PASSWORD_MAX_BYTES = 72

# Claims every access token must carry.
REQUIRED_CLAIMS = ["sub", "role", "exp"]


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified access token."""

    user_id: int
    role: str


def password_fits(plain_password: str) -> bool:
    """True if bcrypt will read every byte of the password."""
    return len(plain_password.encode("utf-8")) <= PASSWORD_MAX_BYTES


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    if not password_fits(plain_password):
        raise ValueError(f"password longer than {PASSWORD_MAX_BYTES} bytes")
    pw_bytes = plain_password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash. Malformed hashes never match."""
    # No stored hash covers more than PASSWORD_MAX_BYTES, so a longer candidate
    # can only match by truncation.
    if not password_fits(plain_password):
        return False
    pw_bytes = plain_password.encode("utf-8")
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


def create_access_token(
    sub: str | int,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token with sub (user id), role, exp and iat."""
    now = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(sub),
        "role": role,
        "exp": now + expires_delta,
        "iat": now,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (sub, role, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token, or when a required claim is missing.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": REQUIRED_CLAIMS},
    )


def verify_access_token(token: str) -> TokenClaims | None:
    """
    Return the token's claims, or None when the token is unusable.

    Bad signature, expiry, malformed structure and malformed claims all give
    the same None so callers cannot tell them apart.
    """
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        return None
    sub = payload.get("sub")
    role = payload.get("role")
    if not isinstance(sub, str) or not (sub.isascii() and sub.isdigit()):
        return None
    if role not in ROLES:
        return None
    user_id = int(sub)
    if user_id < 1:
        return None
    return TokenClaims(user_id=user_id, role=role)
