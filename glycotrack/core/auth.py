"""Authentication dependencies.

Supports two auth paths:
1. httpOnly session cookie (web)
2. Authorization Bearer JWT (API clients)
"""

from typing import Annotated

from fastapi import Cookie, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from glycotrack.config import settings
from glycotrack.core.security import TokenData, decode_access_token
from glycotrack.database import get_db
from glycotrack.models.user import User


async def get_current_user(
    request: Request,
    session_token: Annotated[str | None, Cookie(alias=settings.jwt_cookie_name)] = None,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Extract and validate the current user.

    Returns:
        The authenticated User object

    Raises:
        HTTPException 401: If no valid credentials are found or the
            account has been deleted
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not session_token:
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            session_token = auth_header[7:]

    if not session_token:
        raise credentials_exception

    payload = decode_access_token(session_token)
    if payload is None:
        raise credentials_exception

    try:
        token_data = TokenData(payload)
    except (KeyError, ValueError):
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == token_data.user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise credentials_exception
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is disabled",
        )
    return user


# Type alias for cleaner route signatures
CurrentUser = Annotated[User, Depends(get_current_user)]
