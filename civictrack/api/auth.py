"""Registration, JWT login and the current-identity endpoint."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from civictrack.api.deps import get_current_identity
from civictrack.core.database import get_db
from civictrack.core.errors import NotFound, Unauthenticated
from civictrack.core.security import create_access_token
from civictrack.schemas.auth import (
    CurrentIdentity,
    LoginRequest,
    LoginResponse,
    MeResponse,
    PublicUser,
    RegisterRequest,
)
from civictrack.services import users

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid credentials"


@router.post("/register", response_model=PublicUser)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> PublicUser:
    """Create a 'user' identity. 409 if the email is already registered."""
    user = users.create_user(
        db,
        email=body.email,
        password=body.password,
        name=body.name,
    )
    return PublicUser.model_validate(user)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> LoginResponse:
    """
    Authenticate with email and password; returns a JWT and the identity.
    Include the token in the Authorization header as: Bearer <token>
    """
    user = users.authenticate(db, body.email, body.password)
    if user is None:
        logger.info("Failed login for %s", body.email)
        raise Unauthenticated(INVALID_CREDENTIALS)
    token = create_access_token(sub=user.id, role=user.role)
    return LoginResponse(token=token, user=PublicUser.model_validate(user))


@router.get("/me", response_model=MeResponse)
def me(
    identity: Annotated[CurrentIdentity, Depends(get_current_identity)],
    db: Annotated[Session, Depends(get_db)],
) -> MeResponse:
    user = users.find_by_id(db, identity.id)
    if user is None:
        raise NotFound("User not found")
    return MeResponse(user=PublicUser.model_validate(user))
