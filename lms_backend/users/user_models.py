from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(BaseModel):
    """
    Platform account (collection: users)
    Not a chat identity; the role gates the user administration routes
    """
    model_config = ConfigDict(use_enum_values=True)

    user_id: str  # USR_XXXXXX
    first_name: str
    last_name: str = ""
    email: str  # lower-cased, unique
    password: str  # bcrypt hash
    phone: str = "NOT GIVEN"
    role: UserRole = UserRole.USER
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
