from typing import Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.api import deps
from classpass.models.user import User
from classpass.models.enums import CourseStatus
from classpass.services.course_service import CourseService
from classpass.schemas.course import CourseCreate, CourseUpdate, CourseResponse
from classpass.schemas.responses import SuccessResponse

router = APIRouter()


@router.get("", response_model=SuccessResponse[list[CourseResponse]])
async def list_courses(
    status: Optional[CourseStatus] = None,
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Course catalog ordered by name.
    """
    courses = await CourseService.list_courses(db, current_user.school_id, status)
    return SuccessResponse(data=courses)


@router.get("/search", response_model=SuccessResponse[list[CourseResponse]])
async def search_courses(
    q: str = Query(..., min_length=1),
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    courses = await CourseService.search_courses(db, current_user.school_id, q)
    return SuccessResponse(data=courses)


@router.post("", response_model=SuccessResponse[CourseResponse])
async def create_course(
    course_in: CourseCreate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    course = await CourseService.create_course(db, current_user.school_id, course_in)
    return SuccessResponse(data=course, message="Course created")


@router.get("/{course_id}", response_model=SuccessResponse[CourseResponse])
async def get_course(
    course_id: UUID,
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    course = await CourseService.get_course(db, current_user.school_id, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return SuccessResponse(data=course)


@router.put("/{course_id}", response_model=SuccessResponse[CourseResponse])
async def update_course(
    course_id: UUID,
    course_in: CourseUpdate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    course = await CourseService.update_course(db, current_user.school_id, course_id, course_in)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    return SuccessResponse(data=course, message="Course updated")


@router.delete("/{course_id}", response_model=SuccessResponse)
async def delete_course(
    course_id: UUID,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Archive a course. Its history and sold credits stay intact.
    """
    deleted = await CourseService.delete_course(db, current_user.school_id, course_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Course not found")
    return SuccessResponse(message="Course deleted")
