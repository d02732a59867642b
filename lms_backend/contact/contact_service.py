import logging
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from lms_backend.contact.contact_models import ContactMessage
from lms_backend.database import generate_id
from lms_backend.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


async def create_contact(db: AsyncIOMotorDatabase, name: str, email: str, comment: Optional[str]) -> dict:
    """
    Raises:
        409: A message from this email already exists
    """
    contact = ContactMessage(
        contact_id=generate_id("CNT"),
        name=name.strip(),
        email=email.strip().lower(),
        comment=(comment or "").strip() or "NOT GIVEN"
    )
    doc = contact.model_dump()

    try:
        await db.contacts.insert_one(doc)
    except DuplicateKeyError:
        raise ConflictError("A message from this email already exists")

    doc.pop("_id", None)
    logger.info("Contact message %s received", doc["contact_id"])
    return doc


async def list_contacts(db: AsyncIOMotorDatabase) -> List[dict]:
    """Newest first"""
    cursor = db.contacts.find({}, {"_id": 0}).sort("created_at", -1)
    return await cursor.to_list(length=None)


async def get_contact_by_email(db: AsyncIOMotorDatabase, email: str) -> dict:
    contact = await db.contacts.find_one({"email": email.strip().lower()}, {"_id": 0})
    if not contact:
        raise NotFoundError("Contact message not found")
    return contact


async def delete_contact(db: AsyncIOMotorDatabase, contact_id: str):
    result = await db.contacts.delete_one({"contact_id": contact_id})
    if result.deleted_count == 0:
        raise NotFoundError("Contact message not found")
    logger.info("Contact message %s deleted", contact_id)
