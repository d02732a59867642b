from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.auth.auth_utils import verify_bearer_token
from lms_backend.database import get_db
from lms_backend.errors import AuthenticationError, AccessDeniedError
from lms_backend.identity.identity_models import IdentityVariant
from lms_backend.identity.identity_store import IdentityStore


class CallerContext:
    """
    Authenticated caller, passed explicitly into permission checks
    """
    def __init__(self, identity_id: str, variant: IdentityVariant, email: str = None):
        self.identity_id = identity_id
        self.variant = variant
        self.email = email

    def is_identity(self, identity_id: str) -> bool:
        return self.identity_id == identity_id


async def get_current_identity(
    payload: dict = Depends(verify_bearer_token),
    db: AsyncIOMotorDatabase = Depends(get_db)
) -> CallerContext:
    """
    Dependency: Validates the bearer token and that the identity still exists

    Raises:
        401: Missing/invalid token, unknown role, or identity deleted
    """
    identity_id = payload.get("sub")
    if not identity_id:
        raise AuthenticationError("Invalid token: missing subject")

    try:
        variant = IdentityVariant(payload.get("role"))
    except ValueError:
        raise AuthenticationError("Invalid token: unknown role")

    if not await IdentityStore(db).exists(identity_id, variant):
        raise AuthenticationError("Token valid but user not found")

    return CallerContext(identity_id, variant, payload.get("email"))


def require_self(caller: CallerContext, identity_id: str, action: str):
    """Raises 403 unless the caller is acting as themselves"""
    if not caller.is_identity(identity_id):
        raise AccessDeniedError(f"You can only {action} as yourself")


def require_variant(caller: CallerContext, variant: IdentityVariant, action: str):
    """Raises 403 unless the caller is of the given identity variant"""
    if caller.variant != variant:
        raise AccessDeniedError(f"Only {variant.value}s can {action}")
