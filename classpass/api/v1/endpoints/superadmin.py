from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.api import deps
from classpass.models.user import User
from classpass.services.demo_service import DemoService
from classpass.services.superadmin_service import SuperAdminService
from classpass.schemas.superadmin import (
    SystemStats, SchoolSummary, SchoolCreateRequest, SchoolCreateResult,
    DeleteSchoolResult, SystemLogResponse, DemoSeedRequest, DemoSeedResult
)
from classpass.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("/stats", response_model=SuccessResponse[SystemStats])
async def system_stats(
    current_user: User = Depends(deps.require_superadmin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    return SuccessResponse(data=await SuperAdminService.get_system_stats(db))


@router.get("/schools", response_model=SuccessResponse[List[SchoolSummary]])
async def list_schools(
    current_user: User = Depends(deps.require_superadmin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    return SuccessResponse(data=await SuperAdminService.list_schools(db))


@router.post("/schools", response_model=SuccessResponse[SchoolCreateResult])
async def create_school(
    school_in: SchoolCreateRequest,
    current_user: User = Depends(deps.require_superadmin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Provision a school on any plan together with its owner account.
    """
    school, owner = await SuperAdminService.create_school(db, school_in, current_user)
    return SuccessResponse(
        data=SchoolCreateResult(school_id=school.id, owner_id=owner.id),
        message="School created"
    )


@router.delete("/schools/{school_id}", response_model=SuccessResponse[DeleteSchoolResult])
async def delete_school(
    school_id: UUID,
    current_user: User = Depends(deps.require_superadmin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Permanently delete a school and all of its data. Not reversible.
    """
    deleted = await SuperAdminService.delete_school(db, school_id, current_user)
    return SuccessResponse(
        data=DeleteSchoolResult(school_id=school_id, deleted=deleted),
        message="School deleted"
    )


@router.post("/seed-demo", response_model=SuccessResponse[DemoSeedResult])
async def seed_demo(
    seed_in: Optional[DemoSeedRequest] = None,
    current_user: User = Depends(deps.require_superadmin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Create a populated pro-plan demo school with owner, admin and teacher logins.
    """
    result = await DemoService.seed_demo(db, seed_in or DemoSeedRequest(), current_user)
    return SuccessResponse(data=result, message="Demo school created")


@router.get("/logs", response_model=SuccessResponse[List[SystemLogResponse]])
async def system_logs(
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(deps.require_superadmin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    return SuccessResponse(data=await SuperAdminService.list_logs(db, limit))
