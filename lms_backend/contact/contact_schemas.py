from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from lms_backend.schemas import ApiModel, non_blank


class ContactCreate(ApiModel):
    name: str = Field(..., max_length=100)
    email: EmailStr
    comment: Optional[str] = Field(None, max_length=1000)

    @field_validator("name")
    @classmethod
    def not_blank(cls, v):
        return non_blank(v)


class ContactOut(ApiModel):
    contact_id: str
    name: str
    email: str
    comment: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class ContactResult(ApiModel):
    success: bool = True
    message: Optional[str] = None
    data: ContactOut


class ContactList(ApiModel):
    success: bool = True
    count: int
    data: List[ContactOut]
