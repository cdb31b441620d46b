"""Access control dependencies: authenticate the bearer token, then check the role.

Both checks read only the request and the signing secret. The role comes from
the token, so a role change applies after the user logs in again.
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from civictrack.core.errors import Forbidden, Unauthenticated
from civictrack.core.security import ROLE_ADMIN, verify_access_token
from civictrack.schemas.auth import CurrentIdentity

security = HTTPBearer(auto_error=False)


def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentIdentity:
    """Dependency: require a valid Bearer JWT. Raises Unauthenticated (401) otherwise."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    claims = verify_access_token(credentials.credentials)
    if claims is None:
        raise Unauthenticated()
    return CurrentIdentity(id=claims.user_id, role=claims.role)


def require_role(role: str) -> Callable[[CurrentIdentity], CurrentIdentity]:
    """Build a dependency that requires an authenticated identity holding `role`."""

    def check_role(
        identity: Annotated[CurrentIdentity, Depends(get_current_identity)],
    ) -> CurrentIdentity:
        if identity.role != role:
            raise Forbidden()
        return identity

    return check_role


require_admin = require_role(ROLE_ADMIN)
