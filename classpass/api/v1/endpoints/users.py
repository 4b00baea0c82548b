from typing import Any
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.api import deps
from classpass.models.user import User
from classpass.services.school_service import SchoolService
from classpass.services.user_service import UserService
from classpass.schemas.user import UserResponse, UserCreate, UserUpdate, UserStats
from classpass.schemas.responses import SuccessResponse, PaginatedResponse, PaginationMeta

router = APIRouter()


@router.get("", response_model=PaginatedResponse[UserResponse])
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    List the school's staff, newest first.
    """
    users = await UserService.list_school_users(db, current_user.school_id)
    start = (page - 1) * page_size
    return PaginatedResponse(
        data=[UserResponse.model_validate(u) for u in users[start:start + page_size]],
        meta=PaginationMeta.build(page, page_size, len(users)),
    )


@router.get("/stats", response_model=SuccessResponse[UserStats])
async def get_user_stats(
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    return SuccessResponse(data=await UserService.get_user_stats(db, current_user.school_id))


@router.get("/check-email", response_model=SuccessResponse)
async def check_email(
    email: str = Query(..., min_length=3),
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    exists = await UserService.check_email_exists(db, email)
    return SuccessResponse(data={"email": email, "exists": exists})


@router.post("", response_model=SuccessResponse[UserResponse])
async def create_user(
    user_in: UserCreate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Add an admin or teacher to the school. Both count against the plan's staff quota.
    """
    await SchoolService.ensure_quota(db, current_user.school_id, "teachers")

    user = await UserService.create_user(
        db,
        email=user_in.email,
        password=user_in.password,
        first_name=user_in.first_name,
        last_name=user_in.last_name,
        role=user_in.role,
        school_id=current_user.school_id,
        phone=user_in.phone,
        created_by=current_user.id,
    )
    await db.commit()
    await db.refresh(user)
    return SuccessResponse(data=user, message="User created")


@router.get("/{user_id}", response_model=SuccessResponse[UserResponse])
async def get_user(
    user_id: UUID,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    user = await UserService.get_school_user(db, current_user.school_id, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return SuccessResponse(data=user)


@router.put("/{user_id}", response_model=SuccessResponse[UserResponse])
async def update_user(
    user_id: UUID,
    user_in: UserUpdate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    user = await UserService.update_user(db, current_user.school_id, user_id, user_in)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return SuccessResponse(data=user, message="User updated")


@router.post("/{user_id}/toggle-status", response_model=SuccessResponse[UserResponse])
async def toggle_user_status(
    user_id: UUID,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    user = await UserService.toggle_user_status(db, current_user.school_id, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return SuccessResponse(data=user, message="User status updated")


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    deleted = await UserService.delete_user(db, current_user.school_id, user_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="User not found")
    return SuccessResponse(message="User deleted")
