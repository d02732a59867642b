from typing import Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.auth.permissions import CallerContext, get_current_identity, require_self, require_variant
from lms_backend.courses import course_service as service
from lms_backend.courses.course_models import CourseLevel, CourseStatus
from lms_backend.courses.course_permissions import verify_course_owner
from lms_backend.courses.course_schemas import (
    CourseCreate, CourseUpdate, CourseStatusUpdate,
    CourseOut, CourseCreated, CourseList, CourseCollection, InstructorCourses
)
from lms_backend.database import get_db
from lms_backend.identity.identity_models import IdentityVariant
from lms_backend.schemas import MessageResponse

router = APIRouter(prefix="/api/courses", tags=["Course Management"])

# ==================== COURSE CRUD ====================


@router.post("/", response_model=CourseCreated, status_code=201)
async def create_course(
    data: CourseCreate,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Instructors create courses under their own id

    Raises:
        403: Caller is not the instructor named in the body
        409: Title already used
    """
    require_variant(caller, IdentityVariant.INSTRUCTOR, "create courses")
    require_self(caller, data.instructor_id, "create courses")
    course = await service.create_course(db, data)
    return {"message": "Course created successfully", "course": course}


@router.get("/", response_model=CourseList)
async def list_courses(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    category: Optional[str] = None,
    level: Optional[CourseLevel] = None,
    status: Optional[CourseStatus] = None,
    search: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_courses(
        db, page, limit, category,
        level.value if level else None,
        status.value if status else None,
        search
    )


@router.get("/featured", response_model=CourseCollection)
async def featured_courses(db: AsyncIOMotorDatabase = Depends(get_db)):
    return {"courses": await service.list_featured_courses(db)}


@router.get("/category/{category}", response_model=CourseCollection)
async def courses_by_category(category: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return {"courses": await service.list_courses_by_category(db, category)}


@router.get("/instructor/{instructor_id}", response_model=InstructorCourses)
async def courses_by_instructor(instructor_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.list_instructor_courses(db, instructor_id)


@router.get("/{course_id}", response_model=CourseOut)
async def get_course(course_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.get_course(db, course_id)


@router.put("/{course_id}", response_model=CourseOut)
async def update_course(
    course_id: str,
    data: CourseUpdate,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    await verify_course_owner(db, course_id, caller)
    return await service.update_course(db, course_id, data)


@router.patch("/{course_id}/status", response_model=CourseOut)
async def update_course_status(
    course_id: str,
    data: CourseStatusUpdate,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    await verify_course_owner(db, course_id, caller)
    return await service.update_course_status(db, course_id, data.status)


@router.delete("/{course_id}", response_model=MessageResponse)
async def delete_course(
    course_id: str,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    await verify_course_owner(db, course_id, caller)
    await service.delete_course(db, course_id)
    return {"message": "Course deleted successfully"}
