from datetime import date
from typing import Any, List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.api import deps
from classpass.models.user import User
from classpass.models.enums import CreditStatus
from classpass.services.credit_service import CreditService
from classpass.schemas.credit import (
    PurchaseRequest, CreditResponse, AdjustmentRequest, AdjustmentResponse, ExpireResult
)
from classpass.schemas.responses import SuccessResponse

router = APIRouter()


@router.post("/purchase", response_model=SuccessResponse[CreditResponse])
async def purchase_package(
    purchase_in: PurchaseRequest,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Sell a package to a student. Payment is recorded as paid and a receipt number issued.
    """
    credit = await CreditService.purchase(db, current_user.school_id, purchase_in, current_user)
    return SuccessResponse(data=CreditService.to_response(credit), message="Purchase completed")


@router.get("", response_model=SuccessResponse[List[CreditResponse]])
async def list_school_credits(
    course_id: Optional[UUID] = None,
    status: Optional[CreditStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    credits = await CreditService.list_school_credits(
        db, current_user.school_id, course_id, status, start_date, end_date
    )
    return SuccessResponse(data=[CreditService.to_response(c) for c in credits])


@router.get("/students/{student_id}", response_model=SuccessResponse[List[CreditResponse]])
async def list_student_credits(
    student_id: UUID,
    course_id: Optional[UUID] = None,
    active_only: bool = True,
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    A student's credits, newest purchase first. With course_id only credits usable for that course.
    """
    credits = await CreditService.list_student_credits(
        db, current_user.school_id, student_id, course_id, active_only
    )
    return SuccessResponse(data=[CreditService.to_response(c) for c in credits])


@router.get("/adjustments", response_model=SuccessResponse[List[AdjustmentResponse]])
async def list_adjustments(
    student_id: Optional[UUID] = None,
    limit: int = Query(20, ge=1, le=500),
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    adjustments = await CreditService.list_adjustments(db, current_user.school_id, student_id, limit)
    return SuccessResponse(data=adjustments)


@router.post("/expire", response_model=SuccessResponse[ExpireResult])
async def expire_credits(
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    expired = await CreditService.expire_credits(db, current_user.school_id)
    return SuccessResponse(data=ExpireResult(expired=expired))


@router.get("/{credit_id}", response_model=SuccessResponse[CreditResponse])
async def get_credit(
    credit_id: UUID,
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Credit detail, also used to print the receipt.
    """
    credit = await CreditService.get_credit(db, current_user.school_id, credit_id)
    if not credit:
        raise HTTPException(status_code=404, detail="Credit not found")
    return SuccessResponse(data=CreditService.to_response(credit))


@router.post("/{credit_id}/use", response_model=SuccessResponse[CreditResponse])
async def use_credits(
    credit_id: UUID,
    amount: int = Query(1, ge=1),
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    credit = await CreditService.use_credits(db, current_user.school_id, credit_id, amount)
    return SuccessResponse(data=CreditService.to_response(credit), message="Credits used")


@router.post("/{credit_id}/adjust", response_model=SuccessResponse[CreditResponse])
async def adjust_credits(
    credit_id: UUID,
    adjustment_in: AdjustmentRequest,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Add, subtract or set remaining credits. The reason is kept in the adjustment history.
    """
    credit, _ = await CreditService.adjust_credits(
        db, current_user.school_id, credit_id, adjustment_in, current_user
    )
    return SuccessResponse(data=CreditService.to_response(credit), message="Credits adjusted")
