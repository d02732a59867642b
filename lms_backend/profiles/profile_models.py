from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from lms_backend.identity.identity_models import IdentityVariant

NOT_GIVEN = "NOT GIVEN"

# Free-form fields the owner may edit
PROFILE_FIELDS = ("bio", "phone", "address", "city", "province", "zipcode", "country", "gender")


class Profile(BaseModel):
    """
    Optional personal details of a student or instructor (collection: profiles)
    Names and email stay on the identity record and are merged in on read
    """
    model_config = ConfigDict(use_enum_values=True)

    profile_id: str  # PRO_XXXXXX
    owner_id: str
    owner_variant: IdentityVariant
    bio: str = NOT_GIVEN
    phone: str = NOT_GIVEN
    address: str = NOT_GIVEN
    city: str = NOT_GIVEN
    province: str = NOT_GIVEN
    zipcode: str = NOT_GIVEN
    country: str = NOT_GIVEN
    gender: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
