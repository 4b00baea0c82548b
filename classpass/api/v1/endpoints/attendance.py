from datetime import date
from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.api import deps
from classpass.models.user import User
from classpass.services.attendance_service import AttendanceService
from classpass.schemas.attendance import CheckInRequest, CancelRequest, AttendanceResponse
from classpass.schemas.responses import SuccessResponse

router = APIRouter()


@router.post("/check-in", response_model=SuccessResponse[AttendanceResponse])
async def check_in(
    check_in_in: CheckInRequest,
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Check a student into a class. One credit is deducted.
    """
    attendance = await AttendanceService.check_in(db, current_user.school_id, check_in_in, current_user)
    return SuccessResponse(data=attendance, message="Checked in")


@router.get("/today", response_model=SuccessResponse[List[AttendanceResponse]])
async def today_attendance(
    course_id: Optional[UUID] = None,
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    records = await AttendanceService.get_today_attendance(db, current_user.school_id, course_id)
    return SuccessResponse(data=records)


@router.get("/history", response_model=SuccessResponse[List[AttendanceResponse]])
async def attendance_history(
    student_id: Optional[UUID] = None,
    course_id: Optional[UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    records = await AttendanceService.get_attendance_history(
        db, current_user.school_id, student_id, course_id, start_date, end_date
    )
    return SuccessResponse(data=records)


@router.post("/{attendance_id}/cancel", response_model=SuccessResponse[AttendanceResponse])
async def cancel_attendance(
    attendance_id: UUID,
    cancel_in: CancelRequest,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Cancel a check-in and refund its credit.
    """
    attendance = await AttendanceService.cancel_attendance(
        db, current_user.school_id, attendance_id, cancel_in.reason
    )
    return SuccessResponse(data=attendance, message="Attendance cancelled")
