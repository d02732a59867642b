from datetime import datetime

from pydantic import BaseModel, Field


class ContactMessage(BaseModel):
    """
    Public "contact us" submission (collection: contacts)
    One message per email address
    """
    contact_id: str  # CNT_XXXXXX
    name: str
    email: str  # lower-cased, unique
    comment: str = "NOT GIVEN"
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
