from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from lms_backend.identity.identity_models import IdentityVariant
from lms_backend.schemas import ApiModel, non_blank

# ==================== REQUEST SCHEMAS ====================


class ProfileUpdate(ApiModel):
    """
    firstName/lastName are written to the identity record,
    everything else to the profile
    """
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=1000)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)
    zipcode: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)
    gender: Optional[str] = Field(None, max_length=20)

    @field_validator("first_name", "last_name")
    @classmethod
    def not_blank(cls, v):
        return non_blank(v)

# ==================== RESPONSE SCHEMAS ====================


class ProfileOut(ApiModel):
    identity_id: str
    variant: IdentityVariant
    first_name: str
    last_name: str
    email: str
    bio: str
    phone: str
    address: str
    city: str
    province: str
    zipcode: str
    country: str
    gender: str
    created_at: datetime
    updated_at: datetime


class ProfileResult(ApiModel):
    success: bool = True
    message: Optional[str] = None
    data: ProfileOut


class ProfileDeleted(ApiModel):
    success: bool = True
    message: str
