from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from lms_backend.config import MIN_PASSWORD_LENGTH
from lms_backend.schemas import ApiModel, Pagination, RatingSummary, non_blank

# ==================== REQUEST SCHEMAS ====================


class SocialLinksIn(ApiModel):
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    website: Optional[str] = None


class InstructorRegister(ApiModel):
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    phone: Optional[str] = None
    bio: str = ""
    expertise: List[str] = []
    experience: int = Field(0, ge=0)
    qualification: str = ""
    social_links: SocialLinksIn = Field(default_factory=SocialLinksIn)

    @field_validator("first_name", "last_name")
    @classmethod
    def not_blank(cls, v):
        return non_blank(v)

    @field_validator("expertise")
    @classmethod
    def clean_expertise(cls, v):
        return [item.strip() for item in v if item and item.strip()]


class InstructorUpdate(ApiModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    expertise: Optional[List[str]] = None
    experience: Optional[int] = Field(None, ge=0)
    qualification: Optional[str] = None
    profile_image: Optional[str] = None
    social_links: Optional[SocialLinksIn] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def not_blank(cls, v):
        return non_blank(v)

# ==================== RESPONSE SCHEMAS ====================


class InstructorOut(ApiModel):
    instructor_id: str
    first_name: str
    last_name: str
    email: str
    phone: str = "NOT GIVEN"
    bio: str = ""
    expertise: List[str] = []
    experience: int = 0
    qualification: str = ""
    profile_image: Optional[str] = None
    social_links: SocialLinksIn = Field(default_factory=SocialLinksIn)
    is_verified: bool = False
    rating: RatingSummary = Field(default_factory=RatingSummary)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InstructorAuthResponse(ApiModel):
    token: str
    instructor: InstructorOut
    message: str


class InstructorPagination(Pagination):
    total_instructors: int


class InstructorList(ApiModel):
    instructors: List[InstructorOut]
    pagination: InstructorPagination


class InstructorSearchResult(ApiModel):
    search_results: List[InstructorOut]
    total_results: int
    search_query: Optional[str] = None
    expertise_filter: Optional[str] = None


class InstructorUpdated(ApiModel):
    message: str
    instructor: InstructorOut
