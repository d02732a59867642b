from typing import Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.auth.auth_schemas import LoginRequest, PasswordChangeRequest
from lms_backend.auth.permissions import CallerContext, get_current_identity, require_self
from lms_backend.database import get_db
from lms_backend.instructors import instructor_service as service
from lms_backend.instructors.instructor_schemas import (
    InstructorRegister, InstructorUpdate,
    InstructorOut, InstructorAuthResponse, InstructorList, InstructorSearchResult, InstructorUpdated
)
from lms_backend.schemas import MessageResponse

router = APIRouter(prefix="/api/instructors", tags=["Instructors"])

# ==================== ACCOUNT ====================


@router.post("/", response_model=InstructorAuthResponse, status_code=201)
async def register_instructor(data: InstructorRegister, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.register_instructor(db, data)


@router.post("/login", response_model=InstructorAuthResponse)
async def login_instructor(data: LoginRequest, db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Raises:
        401: Invalid credentials
    """
    return await service.login_instructor(db, data.email, data.password)

# ==================== LOOKUPS ====================


@router.get("/", response_model=InstructorList)
async def list_instructors(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    expertise: Optional[str] = None,
    experience: Optional[int] = Query(None, ge=0, description="Minimum years of experience"),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_instructors(db, page, limit, expertise, experience)


@router.get("/search", response_model=InstructorSearchResult)
async def search_instructors(
    query: Optional[str] = None,
    expertise: Optional[str] = None,
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.search_instructors(db, query, expertise)


@router.get("/{instructor_id}", response_model=InstructorOut)
async def get_instructor(instructor_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.get_instructor(db, instructor_id)

# ==================== UPDATES ====================


@router.put("/{instructor_id}", response_model=InstructorUpdated)
async def update_instructor(
    instructor_id: str,
    data: InstructorUpdate,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    require_self(caller, instructor_id, "update your profile")
    return await service.update_instructor(db, instructor_id, data)


@router.patch("/{instructor_id}/password", response_model=MessageResponse)
async def change_instructor_password(
    instructor_id: str,
    data: PasswordChangeRequest,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    require_self(caller, instructor_id, "change your password")
    return await service.change_instructor_password(db, instructor_id, data.current_password, data.new_password)


@router.delete("/{instructor_id}", response_model=MessageResponse)
async def delete_instructor(
    instructor_id: str,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    require_self(caller, instructor_id, "delete your account")
    return await service.delete_instructor(db, instructor_id)
