"""Session-token authentication for FastAPI.

The auth provider issues signed session tokens; this module only verifies
them. ``sub`` is the user id.
"""

from dataclasses import dataclass

import jwt as pyjwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from apoio.core.config import get_settings
from apoio.core.exceptions import UNAUTHENTICATED_MESSAGE

_bearer_scheme = HTTPBearer(auto_error=False)

# User ids already provisioned by this process
_provisioned_cache: set[str] = set()


@dataclass(frozen=True)
class SessionUser:
    """Authenticated user extracted from a session token."""

    user_id: str
    claims: dict


def decode_session_token(token: str) -> SessionUser:
    """Verify and decode a session token.

    Raises ``HTTPException(401)`` on any validation failure.
    """
    settings = get_settings()
    if not settings.auth_secret:
        raise HTTPException(status_code=500, detail="Authentication is misconfigured")

    try:
        payload = pyjwt.decode(
            token,
            settings.auth_secret,
            algorithms=[settings.auth_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except pyjwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except pyjwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail=UNAUTHENTICATED_MESSAGE)

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail=UNAUTHENTICATED_MESSAGE)

    return SessionUser(user_id=str(sub), claims=payload)


async def require_auth(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> SessionUser:
    """Dependency for creator-only routes: 401 without a valid session token.

    The creator's User row is created on their first authenticated request.
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail=UNAUTHENTICATED_MESSAGE)

    user = decode_session_token(credentials.credentials)

    if user.user_id not in _provisioned_cache:
        from apoio.core.provisioning import provision_user_on_first_login

        await provision_user_on_first_login(user.user_id, user.claims)
        _provisioned_cache.add(user.user_id)

    # Read by the exception handlers for log context
    request.state.user_id = user.user_id
    return user
