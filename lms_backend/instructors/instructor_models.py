from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

# ==================== DATABASE MODELS ====================


class SocialLinks(BaseModel):
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    website: Optional[str] = None


class Rating(BaseModel):
    average: float = 0.0
    count: int = 0


class Instructor(BaseModel):
    """
    Instructor identity record (collection: instructors)
    """
    instructor_id: str  # INS_XXXXXX
    first_name: str
    last_name: str
    email: str  # lower-cased, unique
    password: str  # bcrypt hash
    phone: str = "NOT GIVEN"
    bio: str = ""
    expertise: List[str] = []
    experience: int = 0  # years
    qualification: str = ""
    profile_image: Optional[str] = None
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    is_verified: bool = False
    rating: Rating = Field(default_factory=Rating)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
