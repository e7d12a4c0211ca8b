"""
JWT Authentication utilities

Access tokens are issued by the external auth provider. This service only
verifies them and turns the claims into an explicit AuthenticatedUser that
routes pass down to services.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from uuid import UUID

from jose import JWTError, jwt
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from gamearena.core.config import settings

logger = logging.getLogger(__name__)

# JWT token scheme; missing credentials are turned into 401 below
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Caller identity taken from a verified access token"""
    id: UUID
    email: Optional[str] = None


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token (used by tests and local tooling)."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    if settings.jwt_audience:
        to_encode.setdefault("aud", settings.jwt_audience)
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Dict[str, Any]:
    """Verify and decode a JWT token."""
    try:
        options = {"verify_aud": settings.jwt_audience is not None}
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials"
        )


def user_from_token(token: str) -> AuthenticatedUser:
    payload = verify_token(token)

    user_id = payload.get("sub")
    if user_id is None:
        logger.warning("JWT token missing 'sub' claim")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials"
        )

    try:
        return AuthenticatedUser(id=UUID(user_id), email=payload.get("email"))
    except ValueError:
        logger.warning(f"JWT 'sub' claim is not a UUID: {user_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials"
        )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthenticatedUser:
    """Get current authenticated user."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )
    return user_from_token(credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[AuthenticatedUser]:
    """Current user if a valid token was sent, else None."""
    if credentials is None:
        return None
    try:
        return user_from_token(credentials.credentials)
    except HTTPException:
        return None
