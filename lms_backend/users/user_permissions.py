from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.auth.auth_utils import verify_bearer_token
from lms_backend.database import get_db
from lms_backend.errors import AccessDeniedError, AuthenticationError
from lms_backend.identity.identity_store import PRIVATE_FIELDS
from lms_backend.users.user_models import UserRole


async def get_current_admin(
    payload: dict = Depends(verify_bearer_token),
    db: AsyncIOMotorDatabase = Depends(get_db)
) -> dict:
    """
    Dependency: the caller must be a platform user whose stored role is admin

    Raises:
        401: Missing/invalid token, or the user no longer exists
        403: Not a platform user token, or not an admin
    """
    if payload.get("role") not in {role.value for role in UserRole}:
        raise AccessDeniedError("Admin access required")

    user = await db.users.find_one({"user_id": payload.get("sub")}, PRIVATE_FIELDS)
    if not user:
        raise AuthenticationError("Token valid but user not found")

    # Stored role wins over the claim, demotions take effect immediately
    if user["role"] != UserRole.ADMIN.value:
        raise AccessDeniedError("Admin access required")
    return user
