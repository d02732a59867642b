from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.auth.permissions import CallerContext, get_current_identity, require_variant
from lms_backend.contact import contact_service as service
from lms_backend.contact.contact_schemas import ContactCreate, ContactResult, ContactList
from lms_backend.database import get_db
from lms_backend.identity.identity_models import IdentityVariant
from lms_backend.schemas import MessageResponse

router = APIRouter(prefix="/api/contact", tags=["Contact"])


@router.post("/", response_model=ContactResult, status_code=201)
async def create_contact(data: ContactCreate, db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Public endpoint

    Raises:
        409: A message from this email already exists
    """
    contact = await service.create_contact(db, data.name, data.email, data.comment)
    return {"message": "Contact message saved successfully", "data": contact}

# ==================== STAFF ====================


@router.get("/", response_model=ContactList)
async def list_contacts(
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    require_variant(caller, IdentityVariant.INSTRUCTOR, "read contact messages")
    contacts = await service.list_contacts(db)
    return {"count": len(contacts), "data": contacts}


@router.get("/{email}", response_model=ContactResult)
async def get_contact(
    email: str,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    require_variant(caller, IdentityVariant.INSTRUCTOR, "read contact messages")
    return {"data": await service.get_contact_by_email(db, email)}


@router.delete("/{contact_id}", response_model=MessageResponse)
async def delete_contact(
    contact_id: str,
    caller: CallerContext = Depends(get_current_identity),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    require_variant(caller, IdentityVariant.INSTRUCTOR, "delete contact messages")
    await service.delete_contact(db, contact_id)
    return {"message": "Contact message deleted successfully"}
