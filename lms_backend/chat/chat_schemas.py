from datetime import datetime
from typing import List, Optional

from lms_backend.schemas import ApiModel

# ==================== REQUEST SCHEMAS ====================


class GetOrCreateRequest(ApiModel):
    """
    Variants are validated by the service so that bad values map to 400
    """
    id_a: str
    variant_a: str
    id_b: str
    variant_b: str


class SendMessageRequest(ApiModel):
    conversation_id: str
    sender_id: str
    sender_variant: str
    text: Optional[str] = None

# ==================== RESPONSE SCHEMAS ====================


class IdentitySummary(ApiModel):
    """
    Resolved identity reference
    display_name/email are null when the identity no longer exists
    """
    id: str
    variant: str
    display_name: Optional[str] = None
    email: Optional[str] = None


class MessageOut(ApiModel):
    id: Optional[str] = None
    sender: IdentitySummary
    text: str
    created_at: datetime


class ConversationOut(ApiModel):
    id: str
    participants: List[IdentitySummary]
    messages: List[MessageOut] = []
    created_at: datetime
    updated_at: datetime
