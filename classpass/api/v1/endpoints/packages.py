from typing import Any, List
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.api import deps
from classpass.models.user import User
from classpass.services.package_service import PackageService
from classpass.schemas.package import (
    PackageCreate, PackageUpdate, PackageResponse, PackageOrderUpdate, MigrationResult
)
from classpass.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[PackageResponse]])
async def list_packages(
    include_inactive: bool = False,
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Packages in display order. Only active ones unless include_inactive is set.
    """
    packages = await PackageService.list_packages(db, current_user.school_id, include_inactive)
    return SuccessResponse(data=packages)


@router.get("/for-courses", response_model=SuccessResponse[List[PackageResponse]])
async def packages_for_courses(
    course_ids: List[UUID] = Query(...),
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Active packages a student can buy for any of the given courses.
    """
    packages = await PackageService.get_packages_for_courses(db, current_user.school_id, course_ids)
    return SuccessResponse(data=packages)


@router.post("", response_model=SuccessResponse[PackageResponse])
async def create_package(
    package_in: PackageCreate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    package = await PackageService.create_package(db, current_user.school_id, package_in)
    return SuccessResponse(data=package, message="Package created")


@router.put("/order", response_model=SuccessResponse)
async def update_package_order(
    order_in: PackageOrderUpdate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    await PackageService.update_package_order(db, current_user.school_id, order_in.items)
    return SuccessResponse(message="Package order updated")


@router.post("/migrate", response_model=SuccessResponse[MigrationResult])
async def migrate_packages(
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Convert this school's single-course packages and credits to multi-course targeting.
    """
    result = await PackageService.migrate_legacy_targeting(db, current_user.school_id)
    return SuccessResponse(data=result, message="Migration finished")


@router.get("/{package_id}", response_model=SuccessResponse[PackageResponse])
async def get_package(
    package_id: UUID,
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    package = await PackageService.get_package(db, current_user.school_id, package_id)
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")
    return SuccessResponse(data=package)


@router.put("/{package_id}", response_model=SuccessResponse[PackageResponse])
async def update_package(
    package_id: UUID,
    package_in: PackageUpdate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    package = await PackageService.update_package(db, current_user.school_id, package_id, package_in)
    if not package:
        raise HTTPException(status_code=404, detail="Package not found")
    return SuccessResponse(data=package, message="Package updated")


@router.delete("/{package_id}", response_model=SuccessResponse)
async def delete_package(
    package_id: UUID,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    deleted = await PackageService.delete_package(db, current_user.school_id, package_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Package not found")
    return SuccessResponse(message="Package deleted")
