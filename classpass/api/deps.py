"""API Dependencies"""

from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from classpass.database import get_db
from classpass.core.security import decode_token, TOKEN_TYPE_ACCESS
from classpass.services.user_service import UserService
from classpass.models.user import User
from classpass.models.enums import UserRole

__all__ = [
    "get_db",
    "get_current_user",
    "require_admin",
    "require_staff",
    "require_superadmin",
]

# Security scheme for bearer token
security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        HTTPException: If token is invalid, user not found or disabled
    """
    payload = decode_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Could not validate credentials")

    if payload.get("type") != TOKEN_TYPE_ACCESS:
        raise _unauthorized("Invalid token type")

    user_id_str: Optional[str] = payload.get("sub")
    if not user_id_str:
        raise _unauthorized("Could not validate credentials")

    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise _unauthorized("Invalid user ID")

    user = await UserService.get_user_by_id(db, user_id)
    if not user or user.is_deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user"
        )

    return user


def _require_school_role(*roles: UserRole):
    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions"
            )
        if not current_user.school_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="User is not attached to a school"
            )
        return current_user
    return dependency


# Owners and admins manage the school; teachers also run check-ins
require_admin = _require_school_role(UserRole.OWNER, UserRole.ADMIN)
require_staff = _require_school_role(UserRole.OWNER, UserRole.ADMIN, UserRole.TEACHER)


async def require_superadmin(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Platform superadmin only.

    Raises:
        HTTPException: If user is not a superadmin
    """
    if not current_user.is_superadmin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )
    return current_user
