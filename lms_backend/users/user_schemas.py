from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from lms_backend.config import MIN_PASSWORD_LENGTH
from lms_backend.schemas import ApiModel, non_blank
from lms_backend.users.user_models import UserRole


class UserCreate(ApiModel):
    first_name: str = Field(..., max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)

    @field_validator("first_name")
    @classmethod
    def not_blank(cls, v):
        return non_blank(v)


class UserRoleUpdate(ApiModel):
    role: UserRole


class UserOut(ApiModel):
    user_id: str
    first_name: str
    last_name: str
    email: str
    phone: str = "NOT GIVEN"
    role: UserRole
    created_at: Optional[datetime] = None


class UserCreated(ApiModel):
    message: str
    user: UserOut


class UserAuthResponse(ApiModel):
    token: str
    message: str
    user: UserOut
