from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.auth.permissions import CallerContext, get_current_identity
from lms_backend.database import get_db
from lms_backend.profiles import profile_service as service
from lms_backend.profiles.profile_schemas import ProfileUpdate, ProfileResult, ProfileDeleted

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get("/", response_model=ProfileResult)
async def get_my_profile(
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    The caller's identity basics merged with their profile
    A blank profile is created on first access
    """
    return await service.get_profile(db, caller)


@router.put("/", response_model=ProfileResult)
async def update_my_profile(
    data: ProfileUpdate,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.update_profile(db, caller, data)


@router.delete("/", response_model=ProfileDeleted)
async def delete_my_profile(
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Raises:
        404: No profile stored for the caller
    """
    return await service.delete_profile(db, caller)
