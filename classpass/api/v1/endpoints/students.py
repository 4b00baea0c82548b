from typing import Any, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from classpass.api import deps
from classpass.models.user import User
from classpass.models.enums import StudentStatus
from classpass.services.student_service import StudentService
from classpass.services import storage_service as storage
from classpass.schemas.student import StudentCreate, StudentUpdate, StudentResponse
from classpass.schemas.responses import SuccessResponse, PaginatedResponse, PaginationMeta

router = APIRouter()


@router.get("", response_model=PaginatedResponse[StudentResponse])
async def list_students(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    status: Optional[StudentStatus] = None,
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    List students, newest first. Soft-deleted students are never returned.
    """
    students = await StudentService.list_students(db, current_user.school_id, status)
    start = (page - 1) * page_size
    return PaginatedResponse(
        data=[StudentResponse.model_validate(s) for s in students[start:start + page_size]],
        meta=PaginationMeta.build(page, page_size, len(students)),
    )


@router.get("/search", response_model=SuccessResponse[list[StudentResponse]])
async def search_students(
    q: str = Query(..., min_length=1),
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    students = await StudentService.search_students(db, current_user.school_id, q)
    return SuccessResponse(data=students)


@router.post("", response_model=SuccessResponse[StudentResponse])
async def create_student(
    student_in: StudentCreate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Register a student. The student code is generated.
    """
    student = await StudentService.create_student(db, current_user.school_id, student_in)
    return SuccessResponse(data=student, message="Student created")


@router.get("/{student_id}", response_model=SuccessResponse[StudentResponse])
async def get_student(
    student_id: UUID,
    current_user: User = Depends(deps.require_staff),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    student = await StudentService.get_student(db, current_user.school_id, student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return SuccessResponse(data=student)


@router.put("/{student_id}", response_model=SuccessResponse[StudentResponse])
async def update_student(
    student_id: UUID,
    student_in: StudentUpdate,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    student = await StudentService.update_student(db, current_user.school_id, student_id, student_in)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return SuccessResponse(data=student, message="Student updated")


@router.delete("/{student_id}", response_model=SuccessResponse)
async def delete_student(
    student_id: UUID,
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    deleted = await StudentService.delete_student(db, current_user.school_id, student_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Student not found")
    return SuccessResponse(message="Student deleted")


@router.post("/{student_id}/photo", response_model=SuccessResponse[StudentResponse])
async def upload_student_photo(
    student_id: UUID,
    file: UploadFile = File(...),
    current_user: User = Depends(deps.require_admin),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Upload a profile photo to storage (Cloudflare R2).
    """
    if not await StudentService.get_student(db, current_user.school_id, student_id):
        raise HTTPException(status_code=404, detail="Student not found")
    content = await file.read()
    url = await storage.upload_image(current_user.school_id, "students", content, file.content_type)
    student = await StudentService.set_profile_image(db, current_user.school_id, student_id, url)
    return SuccessResponse(data=student, message="Photo uploaded")
