from typing import List

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from lms_backend.auth.permissions import CallerContext, get_current_identity, require_self
from lms_backend.chat.chat_permissions import verify_participant, verify_acting_as
from lms_backend.chat.chat_schemas import GetOrCreateRequest, SendMessageRequest, ConversationOut
from lms_backend.chat.conversation_service import ConversationService
from lms_backend.chat.conversation_store import ConversationStore
from lms_backend.database import get_db
from lms_backend.errors import AccessDeniedError
from lms_backend.identity.identity_store import IdentityStore

router = APIRouter(prefix="/api/chat", tags=["Chat"])


async def get_conversation_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> ConversationService:
    return ConversationService(ConversationStore(db), IdentityStore(db))


@router.post("/get-or-create", response_model=ConversationOut)
async def get_or_create_chat(
    data: GetOrCreateRequest,
    caller: CallerContext = Depends(get_current_identity),
    service: ConversationService = Depends(get_conversation_service)
):
    """
    Find the conversation between two identities, creating it on first contact

    The caller must be one of the two identities (403 otherwise).
    Calling again, in either order, returns the same conversation.
    """
    caller_refs = {(data.id_a, data.variant_a), (data.id_b, data.variant_b)}
    if (caller.identity_id, caller.variant.value) not in caller_refs:
        raise AccessDeniedError("You can only open conversations you take part in")

    return await service.get_or_create(data.id_a, data.variant_a, data.id_b, data.variant_b)


@router.post("/send", response_model=ConversationOut)
async def send_message(
    data: SendMessageRequest,
    caller: CallerContext = Depends(get_current_identity),
    service: ConversationService = Depends(get_conversation_service)
):
    """
    Append a message to a conversation

    Server validates:
    - Caller is the sender (403)
    - Text is not empty (400)
    - Conversation exists (404)
    - Sender is a participant (400)
    """
    verify_acting_as(caller, data.sender_id, data.sender_variant, "send messages")
    return await service.post_message(
        data.conversation_id,
        data.sender_id,
        data.sender_variant,
        data.text
    )


@router.get("/conversation/{conversation_id}", response_model=ConversationOut)
async def get_chat_by_id(
    conversation_id: str,
    caller: CallerContext = Depends(get_current_identity),
    service: ConversationService = Depends(get_conversation_service)
):
    conversation = await service.get_conversation(conversation_id)
    return verify_participant(conversation, caller)


@router.get("/conversations/{identity_id}", response_model=List[ConversationOut])
async def get_user_chats(
    identity_id: str,
    caller: CallerContext = Depends(get_current_identity),
    service: ConversationService = Depends(get_conversation_service)
):
    """
    All conversations of an identity, most recently active first
    """
    require_self(caller, identity_id, "list conversations")
    return await service.list_conversations_for(identity_id)
