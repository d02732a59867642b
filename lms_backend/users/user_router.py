from typing import List

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.auth.auth_schemas import LoginRequest
from lms_backend.database import get_db
from lms_backend.schemas import MessageResponse
from lms_backend.users import user_service as service
from lms_backend.users.user_permissions import get_current_admin
from lms_backend.users.user_schemas import UserCreate, UserRoleUpdate, UserOut, UserCreated, UserAuthResponse

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("/", response_model=UserCreated, status_code=201)
async def create_user(data: UserCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Platform user signup

    Raises:
        409: Email already registered
    """
    return await service.create_user(db, data)


@router.post("/login", response_model=UserAuthResponse)
async def login_user(data: LoginRequest, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.login_user(db, data.email, data.password)

# ==================== ADMIN ONLY ====================


@router.get("/", response_model=List[UserOut])
async def list_users(
    admin: dict = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.list_users(db)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    admin: dict = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.delete_user(db, user_id)


@router.put("/{user_id}", response_model=MessageResponse)
async def update_user_role(
    user_id: str,
    data: UserRoleUpdate,
    admin: dict = Depends(get_current_admin),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Raises:
        400: Role is not user or admin
        404: User not found
    """
    return await service.update_user_role(db, user_id, data.role)
