from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from lms_backend.identity.identity_models import IdentityVariant

# ==================== DATABASE MODELS ====================


class ParticipantRef(BaseModel):
    """
    Tagged identity reference (id + which table it lives in)
    """
    model_config = ConfigDict(use_enum_values=True)

    id: str
    variant: IdentityVariant


class ChatMessage(BaseModel):
    """
    Embedded in a conversation, never stored on its own
    Append-only: no edit, no delete
    """
    message_id: str  # MSG_XXXXXX
    sender: ParticipantRef
    text: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Conversation(BaseModel):
    """
    Two-party thread, one per unordered participant pair
    participants are fixed at creation
    """
    conversation_id: str  # CHAT_XXXXXX
    participants: List[ParticipantRef]
    participant_ids: List[str]  # for "all conversations of X" queries
    pair_key: str  # sorted "idA|idB", unique index
    messages: List[ChatMessage] = []
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


PAIR_SEPARATOR = "|"


def make_pair_key(id_a: str, id_b: str) -> str:
    """Order-independent key for a participant pair"""
    return PAIR_SEPARATOR.join(sorted([id_a, id_b]))
