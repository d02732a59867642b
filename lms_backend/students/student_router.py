from typing import Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.auth.auth_schemas import LoginRequest, PasswordChangeRequest
from lms_backend.auth.permissions import CallerContext, get_current_identity, require_self, require_variant
from lms_backend.database import get_db
from lms_backend.identity.identity_models import IdentityVariant
from lms_backend.schemas import MessageResponse
from lms_backend.students import student_service as service
from lms_backend.students.student_models import StudentStatus, AcademicLevel
from lms_backend.students.student_schemas import (
    StudentRegister, StudentUpdate, StudentStatusUpdate,
    StudentOut, StudentAuthResponse, StudentList, StudentSearchResult, StudentUpdated
)

router = APIRouter(prefix="/api/students", tags=["Students"])

# ==================== ACCOUNT ====================


@router.post("/", response_model=StudentAuthResponse, status_code=201)
async def register_student(data: StudentRegister, db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Student signup, returns a token for immediate login

    Raises:
        409: Email or student number already registered
    """
    return await service.register_student(db, data)


@router.post("/login", response_model=StudentAuthResponse)
async def login_student(data: LoginRequest, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.login_student(db, data.email, data.password)

# ==================== LOOKUPS ====================


@router.get("/", response_model=StudentList)
async def list_students(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    status: Optional[StudentStatus] = None,
    academic_level: Optional[AcademicLevel] = Query(None, alias="academicLevel"),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_students(
        db, page, limit,
        status.value if status else None,
        academic_level.value if academic_level else None
    )


@router.get("/search", response_model=StudentSearchResult)
async def search_students(
    query: Optional[str] = None,
    status: Optional[StudentStatus] = None,
    academic_level: Optional[AcademicLevel] = Query(None, alias="academicLevel"),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    At least one of query/status/academicLevel is required (400 otherwise)
    """
    return await service.search_students(
        db, query,
        status.value if status else None,
        academic_level.value if academic_level else None
    )


@router.get("/student-number/{student_number}", response_model=StudentOut)
async def get_student_by_number(student_number: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.get_student_by_number(db, student_number)


@router.get("/{student_id}", response_model=StudentOut)
async def get_student(student_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.get_student(db, student_id)

# ==================== UPDATES ====================


@router.put("/{student_id}", response_model=StudentUpdated)
async def update_student(
    student_id: str,
    data: StudentUpdate,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    require_self(caller, student_id, "update your profile")
    return await service.update_student(db, student_id, data)


@router.patch("/{student_id}/status", response_model=MessageResponse)
async def update_student_status(
    student_id: str,
    data: StudentStatusUpdate,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Instructors only
    """
    require_variant(caller, IdentityVariant.INSTRUCTOR, "change a student's status")
    return await service.update_student_status(db, student_id, data.status.value)


@router.patch("/{student_id}/password", response_model=MessageResponse)
async def change_student_password(
    student_id: str,
    data: PasswordChangeRequest,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Raises:
        403: Not your account, or current password is incorrect
    """
    require_self(caller, student_id, "change your password")
    return await service.change_student_password(db, student_id, data.current_password, data.new_password)


@router.delete("/{student_id}", response_model=MessageResponse)
async def delete_student(
    student_id: str,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    require_self(caller, student_id, "delete your account")
    return await service.delete_student(db, student_id)
