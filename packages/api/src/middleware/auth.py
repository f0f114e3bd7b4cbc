# This project was developed with assistance from AI tools.
"""
Bearer token authentication dependency.

Validates HS256 tokens issued at login, rejects tokens issued before the
user's last logout, and provides the FastAPI dependency used by every
authenticated route.
"""

import logging
from typing import Annotated

import jwt
from db import get_db
from fastapi import Depends, HTTPException, Request, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import decode_access_token, is_revoked
from ..schemas.auth import TokenPayload, UserContext
from ..services.identity import get_user

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Token validation
# ---------------------------------------------------------------------------


def _extract_token(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth[7:].strip() or None
    return None


def _decode_token(token: str) -> TokenPayload:
    return TokenPayload(**decode_access_token(token))


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_db),
) -> UserContext:
    """FastAPI dependency: validate bearer token and return UserContext."""
    token = _extract_token(request)
    if not token:
        raise _unauthorized("Missing authentication token")

    try:
        payload = _decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise _unauthorized("Token has expired") from exc
    except (jwt.InvalidTokenError, ValidationError) as exc:
        raise _unauthorized("Invalid token") from exc

    user = await get_user(session, payload.user_id)
    if user is None:
        raise _unauthorized("Invalid token")

    if is_revoked(payload.iat, user.last_logout_at):
        logger.info("Rejected revoked token for user %s", user.id)
        raise _unauthorized("Token has been revoked")

    return UserContext(
        user_id=user.id,
        customer_number=user.customer_number,
        email=user.email,
        user_type=user.user_type,
    )


# Type alias for use in route signatures
CurrentUser = Annotated[UserContext, Depends(get_current_user)]
