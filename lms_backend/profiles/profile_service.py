import logging
from datetime import datetime

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from lms_backend.auth.permissions import CallerContext
from lms_backend.database import generate_id
from lms_backend.errors import NotFoundError
from lms_backend.identity import account_service as accounts
from lms_backend.identity.identity_models import IDENTITY_TABLES
from lms_backend.identity.identity_store import IdentityStore
from lms_backend.profiles.profile_models import Profile, PROFILE_FIELDS
from lms_backend.profiles.profile_schemas import ProfileUpdate

logger = logging.getLogger(__name__)

NAME_FIELDS = ("first_name", "last_name")


def _owner_filter(caller: CallerContext) -> dict:
    return {"owner_id": caller.identity_id, "owner_variant": caller.variant.value}


async def _owner(db: AsyncIOMotorDatabase, caller: CallerContext) -> dict:
    record = await IdentityStore(db).get(caller.identity_id, caller.variant)
    if not record:
        raise NotFoundError(f"{caller.variant.value.capitalize()} not found")
    return record


async def _ensure_profile(db: AsyncIOMotorDatabase, caller: CallerContext) -> dict:
    """Find the caller's profile, inserting a blank one on first access"""
    blank = Profile(
        profile_id=generate_id("PRO"),
        owner_id=caller.identity_id,
        owner_variant=caller.variant
    ).model_dump()
    owner = _owner_filter(caller)
    for key in owner:
        blank.pop(key)

    try:
        return await db.profiles.find_one_and_update(
            owner,
            {"$setOnInsert": blank},
            upsert=True,
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER
        )
    except DuplicateKeyError:
        # Another request created it first
        return await db.profiles.find_one(owner, {"_id": 0})


def _merged(identity: dict, profile: dict, caller: CallerContext) -> dict:
    _, id_field = IDENTITY_TABLES[caller.variant]
    merged = {
        "identity_id": identity[id_field],
        "variant": caller.variant.value,
        "first_name": identity["first_name"],
        "last_name": identity["last_name"],
        "email": identity["email"],
        "created_at": profile["created_at"],
        "updated_at": profile["updated_at"],
    }
    merged.update({field: profile[field] for field in PROFILE_FIELDS})
    return merged

# ==================== PROFILE ====================


async def get_profile(db: AsyncIOMotorDatabase, caller: CallerContext) -> dict:
    """
    Raises:
        404: The caller's identity no longer exists
    """
    identity = await _owner(db, caller)
    profile = await _ensure_profile(db, caller)
    return {"success": True, "data": _merged(identity, profile, caller)}


async def update_profile(db: AsyncIOMotorDatabase, caller: CallerContext, data: ProfileUpdate) -> dict:
    """
    Blank values are ignored, like omitted ones

    Raises:
        404: The caller's identity no longer exists
    """
    updates = {
        field: value.strip()
        for field, value in data.model_dump(exclude_none=True).items()
        if value.strip()
    }

    changed = sorted(updates)
    names = {field: updates.pop(field) for field in NAME_FIELDS if field in updates}
    if names:
        identity = await accounts.update_identity(db, caller.variant, caller.identity_id, names)
    else:
        identity = await _owner(db, caller)

    profile = await _ensure_profile(db, caller)
    if updates:
        updates["updated_at"] = datetime.utcnow()
        profile = await db.profiles.find_one_and_update(
            _owner_filter(caller),
            {"$set": updates},
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER
        )

    logger.info("Profile of %s %s updated: %s", caller.variant.value, caller.identity_id, changed)
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": _merged(identity, profile, caller)
    }


async def delete_profile(db: AsyncIOMotorDatabase, caller: CallerContext) -> dict:
    result = await db.profiles.delete_one(_owner_filter(caller))
    if result.deleted_count == 0:
        raise NotFoundError("Profile not found")

    logger.info("Profile of %s %s deleted", caller.variant.value, caller.identity_id)
    return {"success": True, "message": "Profile deleted successfully"}
