from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.api import deps
from classpass.config import settings
from classpass.core import security
from classpass.core.exceptions import AuthenticationError
from classpass.core.logging import get_logger
from classpass.core.rate_limit import limiter
from classpass.models.user import User
from classpass.services import email_service
from classpass.services.school_service import SchoolService
from classpass.services.user_service import UserService
from classpass.schemas.auth import (
    LoginRequest, RefreshRequest, Token, RegisterSchoolRequest,
    PasswordResetEmailRequest, PasswordResetRequest, ChangePasswordRequest
)
from classpass.schemas.user import UserResponse, ProfileUpdate
from classpass.schemas.responses import SuccessResponse

logger = get_logger(__name__)

router = APIRouter()


def _issue_tokens(user: User) -> Token:
    token_data = {"sub": str(user.id), "role": user.role.value}
    if user.school_id:
        token_data["school_id"] = str(user.school_id)
    return Token(
        access_token=security.create_access_token(data=token_data),
        refresh_token=security.create_refresh_token(data=token_data),
        token_type="bearer",
        role=user.role,
        user_id=str(user.id),
        school_id=str(user.school_id) if user.school_id else None,
    )


@router.post("/login", response_model=SuccessResponse[Token])
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    login_data: LoginRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Unified login for owners, admins, teachers and superadmins.
    Returns JWT access token, refresh token, and user role.
    """
    user = await UserService.authenticate_user(db, email=login_data.email, password=login_data.password)
    return SuccessResponse(data=_issue_tokens(user), message="Login successful")


@router.post("/refresh", response_model=SuccessResponse[Token])
async def refresh_token(
    refresh_in: RefreshRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Exchange a refresh token for a new token pair.
    """
    payload = security.decode_token(refresh_in.refresh_token)
    if not payload or payload.get("type") != security.TOKEN_TYPE_REFRESH:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    try:
        user_id = UUID(payload.get("sub", ""))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    user = await UserService.get_user_by_id(db, user_id)
    if not user or not user.is_active or user.is_deleted:
        raise AuthenticationError("This account has been disabled", code="ACCOUNT_DISABLED")

    return SuccessResponse(data=_issue_tokens(user), message="Token refreshed")


@router.post("/register/school", response_model=SuccessResponse)
async def register_school(
    school_in: RegisterSchoolRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Register a new school tenant on the free plan together with its owner.
    """
    school, owner = await SchoolService.create_school_with_owner(
        db=db,
        school_name=school_in.school_name,
        owner_data={
            "email": school_in.email,
            "password": school_in.password,
            "first_name": school_in.first_name,
            "last_name": school_in.last_name,
            "phone": school_in.phone,
        },
        school_phone=school_in.phone,
    )
    return SuccessResponse(
        data={"school_id": str(school.id), "user_id": str(owner.id)},
        message="School registered successfully"
    )


@router.post("/password/forgot", response_model=SuccessResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def forgot_password(
    request: Request,
    forgot_in: PasswordResetEmailRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Email a password reset link valid for one hour.
    """
    user = await UserService.get_user_by_email(db, forgot_in.email)
    if not user or user.is_deleted:
        raise AuthenticationError("No account found for this email", code="USER_NOT_FOUND")

    token = security.generate_password_reset_token(str(user.id))
    sent = email_service.send_password_reset(user.email, user.display_name, token)
    if not sent:
        logger.warning("Password reset email not delivered", extra={"user_id": str(user.id)})

    return SuccessResponse(message="If the email is registered, a reset link has been sent")


@router.post("/password/reset", response_model=SuccessResponse)
async def reset_password(
    reset_in: PasswordResetRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Complete password reset flow.
    """
    user_id_str = security.verify_password_reset_token(reset_in.token)
    if not user_id_str:
        raise HTTPException(status_code=400, detail="Invalid or expired token")

    success = await UserService.update_password(db, UUID(user_id_str), reset_in.new_password)
    if not success:
        raise HTTPException(status_code=404, detail="User not found")

    return SuccessResponse(message="Password updated successfully")


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def read_me(
    current_user: User = Depends(deps.get_current_user)
) -> Any:
    return SuccessResponse(data=current_user)


@router.put("/me", response_model=SuccessResponse[UserResponse])
async def update_me(
    profile_in: ProfileUpdate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    user = await UserService.update_profile(db, current_user, profile_in)
    return SuccessResponse(data=user, message="Profile updated")


@router.post("/password/change", response_model=SuccessResponse)
async def change_password(
    change_in: ChangePasswordRequest,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    await UserService.change_password(
        db, current_user, change_in.current_password, change_in.new_password
    )
    return SuccessResponse(message="Password changed successfully")
