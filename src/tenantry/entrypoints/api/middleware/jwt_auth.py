"""JWT authentication middleware."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tenantry.core.auth.jwt import TokenError, decode_token

logger = structlog.get_logger()

# Use Bearer token authentication
bearer_scheme = HTTPBearer(auto_error=False)


async def verify_jwt(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),  # noqa: B008
) -> UUID:
    """Verify the bearer token and return the caller's user id.

    The token only identifies the caller; tenant and role are resolved per
    request by require_tenant_role.

    Raises:
        HTTPException: 401 if token is missing or invalid.
    """
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Missing authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_token(credentials.credentials)
        user_id = UUID(payload.sub)
    except (TokenError, ValueError) as e:
        logger.warning("jwt_validation_failed", error=str(e))
        raise HTTPException(
            status_code=401,
            detail=str(e) if isinstance(e, TokenError) else "Invalid token subject",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    # Store in request state for downstream use
    request.state.user_id = user_id

    logger.debug("jwt_verified", user_id=str(user_id))
    return user_id


CurrentUser = Annotated[UUID, Depends(verify_jwt)]
