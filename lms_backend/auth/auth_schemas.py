from pydantic import EmailStr, Field

from lms_backend.config import MIN_PASSWORD_LENGTH
from lms_backend.schemas import ApiModel


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class PasswordChangeRequest(ApiModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
