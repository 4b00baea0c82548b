from typing import Any
from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.api import deps
from classpass.models.user import User
from classpass.services.school_service import SchoolService
from classpass.services import storage_service as storage
from classpass.schemas.school import SchoolResponse, SchoolUpdate, SchoolUsage
from classpass.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("/profile", response_model=SuccessResponse[SchoolResponse])
async def get_school_profile(
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Fetch the caller's school settings, plan and features.
    """
    school = await SchoolService.get_school_by_id(db, current_user.school_id)
    if not school:
        raise HTTPException(status_code=404, detail="School not found")
    return SuccessResponse(data=school)


@router.put("/profile", response_model=SuccessResponse[SchoolResponse])
async def update_school_profile(
    school_in: SchoolUpdate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Update contact details, locale and business hours. Admin only.
    """
    school = await SchoolService.update_school(db, current_user.school_id, school_in)
    if not school:
        raise HTTPException(status_code=404, detail="School not found")
    return SuccessResponse(data=school, message="School updated")


@router.get("/usage", response_model=SuccessResponse[SchoolUsage])
async def get_school_usage(
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    school = await SchoolService.get_school_by_id(db, current_user.school_id)
    if not school:
        raise HTTPException(status_code=404, detail="School not found")
    return SuccessResponse(data=await SchoolService.get_usage(db, school))


@router.post("/logo", response_model=SuccessResponse)
async def upload_logo(
    file: UploadFile = File(...),
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Upload branding logo to storage (Cloudflare R2).
    """
    content = await file.read()
    logo_url = await storage.upload_image(current_user.school_id, "logos", content, file.content_type)
    await SchoolService.update_school(db, current_user.school_id, SchoolUpdate(logo_url=logo_url))
    return SuccessResponse(data={"url": logo_url}, message="Logo uploaded")
