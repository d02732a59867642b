from typing import Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.auth.permissions import CallerContext, get_current_identity
from lms_backend.database import get_db
from lms_backend.enrollments import enrollment_service as service
from lms_backend.enrollments.enrollment_models import EnrollmentStatus
from lms_backend.enrollments.enrollment_permissions import verify_enrollment_actor
from lms_backend.enrollments.enrollment_schemas import (
    EnrollmentCreate, EnrollmentUpdate, EnrollmentStatusUpdate, EnrollmentGradeUpdate, EnrollmentProgressUpdate,
    EnrollmentOut, EnrollmentResult, EnrollmentList, EnrollmentCollection,
    EnrollmentStats, EnrollmentSearchResult
)
from lms_backend.schemas import MessageResponse

router = APIRouter(prefix="/api/enrollments", tags=["Enrollments"])

# ==================== ENROLL ====================


@router.post("/", response_model=EnrollmentResult, status_code=201)
async def create_enrollment(
    data: EnrollmentCreate,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Enroll a student in a course

    Server validates:
    - Caller is the student, or the course's instructor (403)
    - Student and course exist (404)
    - Not already enrolled, course not full (409)
    """
    await verify_enrollment_actor(db, caller, data.student_id, data.course_id)
    enrollment = await service.create_enrollment(db, data.student_id, data.course_id)
    return {"message": "Enrollment created successfully", "enrollment": enrollment}

# ==================== LOOKUPS ====================


@router.get("/", response_model=EnrollmentList)
async def list_enrollments(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    status: Optional[EnrollmentStatus] = None,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_enrollments(db, page, limit, status.value if status else None)


@router.get("/stats", response_model=EnrollmentStats)
async def enrollment_stats(db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.enrollment_stats(db)


@router.get("/search", response_model=EnrollmentSearchResult)
async def search_enrollments(
    query: Optional[str] = None,
    status: Optional[EnrollmentStatus] = None,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.search_enrollments(db, query, status.value if status else None)


@router.get("/student/{student_id}", response_model=EnrollmentCollection)
async def student_enrollments(student_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    enrollments = await service.list_student_enrollments(db, student_id)
    return {"enrollments": enrollments, "total": len(enrollments)}


@router.get("/course/{course_id}", response_model=EnrollmentCollection)
async def course_enrollments(course_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    enrollments = await service.list_course_enrollments(db, course_id)
    return {"enrollments": enrollments, "total": len(enrollments)}


@router.get("/{enrollment_id}", response_model=EnrollmentOut)
async def get_enrollment(enrollment_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.get_enrollment(db, enrollment_id)

# ==================== UPDATES ====================


@router.put("/{enrollment_id}", response_model=EnrollmentResult)
async def update_enrollment(
    enrollment_id: str,
    data: EnrollmentUpdate,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Course instructor only

    Raises:
        400: Empty body or progress outside 0-100
    """
    current = await service.get_enrollment(db, enrollment_id)
    await verify_enrollment_actor(db, caller, current["student_id"], current["course_id"], allow_student=False)
    enrollment = await service.update_enrollment(db, enrollment_id, data.model_dump(exclude_none=True, mode="json"))
    return {"message": "Enrollment updated successfully", "enrollment": enrollment}


@router.patch("/{enrollment_id}/status", response_model=EnrollmentResult)
async def update_enrollment_status(
    enrollment_id: str,
    data: EnrollmentStatusUpdate,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Course instructor only"""
    current = await service.get_enrollment(db, enrollment_id)
    await verify_enrollment_actor(db, caller, current["student_id"], current["course_id"], allow_student=False)
    enrollment = await service.update_enrollment_status(db, enrollment_id, data.status)
    return {"message": "Enrollment status updated successfully", "enrollment": enrollment}


@router.patch("/{enrollment_id}/grade", response_model=EnrollmentResult)
async def update_enrollment_grade(
    enrollment_id: str,
    data: EnrollmentGradeUpdate,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """Course instructor only"""
    current = await service.get_enrollment(db, enrollment_id)
    await verify_enrollment_actor(db, caller, current["student_id"], current["course_id"], allow_student=False)
    enrollment = await service.update_enrollment_grade(db, enrollment_id, data.grade)
    return {"message": "Grade updated successfully", "enrollment": enrollment}


@router.patch("/{enrollment_id}/progress", response_model=EnrollmentResult)
async def update_enrollment_progress(
    enrollment_id: str,
    data: EnrollmentProgressUpdate,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    current = await service.get_enrollment(db, enrollment_id)
    await verify_enrollment_actor(db, caller, current["student_id"], current["course_id"])
    enrollment = await service.update_enrollment_progress(db, enrollment_id, data.progress)
    return {"message": "Progress updated successfully", "enrollment": enrollment}


@router.delete("/{enrollment_id}", response_model=MessageResponse)
async def delete_enrollment(
    enrollment_id: str,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    current = await service.get_enrollment(db, enrollment_id)
    await verify_enrollment_actor(db, caller, current["student_id"], current["course_id"])
    await service.delete_enrollment(db, enrollment_id)
    return {"message": "Enrollment deleted successfully"}
