from typing import Any, List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.api import deps
from classpass.models.user import User
from classpass.services.dashboard_service import DashboardService
from classpass.schemas.dashboard import (
    DashboardStats, RecentActivity, TodayClass, DashboardOverview, OnboardingStatus
)
from classpass.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("/stats", response_model=SuccessResponse[DashboardStats])
async def dashboard_stats(
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    return SuccessResponse(data=await DashboardService.get_stats(db, current_user.school_id))


@router.get("/activities", response_model=SuccessResponse[List[RecentActivity]])
async def recent_activities(
    limit: int = Query(10, ge=1, le=50),
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    activities = await DashboardService.get_recent_activities(db, current_user.school_id, limit)
    return SuccessResponse(data=activities)


@router.get("/today-classes", response_model=SuccessResponse[List[TodayClass]])
async def today_classes(
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    return SuccessResponse(data=await DashboardService.get_today_classes(db, current_user.school_id))


@router.get("/overview", response_model=SuccessResponse[DashboardOverview])
async def dashboard_overview(
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Everything the home page shows in one call.
    """
    school_id = current_user.school_id
    return SuccessResponse(data={
        "stats": await DashboardService.get_stats(db, school_id),
        "recent_activities": await DashboardService.get_recent_activities(db, school_id),
        "today_classes": await DashboardService.get_today_classes(db, school_id),
    })


@router.get("/onboarding", response_model=SuccessResponse[OnboardingStatus])
async def onboarding_status(
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Setup checklist: school info, first course, first package, first student.
    """
    return SuccessResponse(data=await DashboardService.get_onboarding(db, current_user.school_id))
