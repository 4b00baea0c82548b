from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.api import deps
from classpass.models.user import User
from classpass.models.enums import TimeRange
from classpass.services.report_service import ReportService
from classpass.schemas.report import (
    RevenueStats, StudentStats, AttendanceStats, CreditStats, TopCourse, ReportExport
)
from classpass.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("/revenue", response_model=SuccessResponse[RevenueStats])
async def revenue_stats(
    time_range: TimeRange = TimeRange.MONTH,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Paid revenue for the period, growth vs the previous period and a daily chart.
    """
    return SuccessResponse(data=await ReportService.get_revenue_stats(db, current_user.school_id, time_range))


@router.get("/students", response_model=SuccessResponse[StudentStats])
async def student_stats(
    time_range: TimeRange = TimeRange.MONTH,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    return SuccessResponse(data=await ReportService.get_student_stats(db, current_user.school_id, time_range))


@router.get("/attendance", response_model=SuccessResponse[AttendanceStats])
async def attendance_stats(
    time_range: TimeRange = TimeRange.MONTH,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    return SuccessResponse(data=await ReportService.get_attendance_stats(db, current_user.school_id, time_range))


@router.get("/credits", response_model=SuccessResponse[CreditStats])
async def credit_stats(
    time_range: TimeRange = TimeRange.MONTH,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    return SuccessResponse(data=await ReportService.get_credit_stats(db, current_user.school_id, time_range))


@router.get("/top-courses", response_model=SuccessResponse[List[TopCourse]])
async def top_courses(
    time_range: TimeRange = TimeRange.MONTH,
    limit: Optional[int] = Query(None, ge=1, le=50),
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    courses = await ReportService.get_top_courses(db, current_user.school_id, time_range, limit)
    return SuccessResponse(data=courses)


@router.get("/export", response_model=SuccessResponse[ReportExport])
async def export_report(
    report_type: str = "summary",
    time_range: TimeRange = TimeRange.MONTH,
    format: str = Query("json", pattern="^(json|csv)$"),
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    All report sections in one bundle, as JSON or as a CSV download.
    """
    report = await ReportService.export_report(db, current_user.school_id, report_type, time_range)
    if format == "csv":
        filename = f"report-{time_range.value}-{report['end_date'].isoformat()}.csv"
        return Response(
            content=ReportService.to_csv(report),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    return SuccessResponse(data=report)
