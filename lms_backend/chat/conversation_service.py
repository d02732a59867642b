import logging
from datetime import datetime
from typing import Iterable, List

from lms_backend.chat.chat_models import ChatMessage, ParticipantRef, PAIR_SEPARATOR
from lms_backend.chat.conversation_store import ConversationStore
from lms_backend.database import generate_id
from lms_backend.errors import NotFoundError, ValidationError
from lms_backend.identity.identity_models import IdentityVariant, resolved_ref
from lms_backend.identity.identity_store import IdentityStore

logger = logging.getLogger(__name__)


def parse_variant(value, field: str = "variant") -> IdentityVariant:
    try:
        return IdentityVariant(value)
    except ValueError:
        allowed = ", ".join(v.value for v in IdentityVariant)
        raise ValidationError(f"Invalid {field} '{value}'. Allowed: {allowed}")


def check_identity_id(value, field: str = "id") -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    if PAIR_SEPARATOR in value:
        raise ValidationError(f"{field} contains an invalid character")
    return value.strip()


class ConversationService:
    """
    Business rules for two-party chat

    All operations take identities explicitly, callers are authorized at the
    router. Returned conversations always carry resolved participants and
    senders (looked up live on every read).
    """

    def __init__(self, store: ConversationStore, identities: IdentityStore):
        self.store = store
        self.identities = identities

    # ==================== OPERATIONS ====================

    async def get_or_create(
        self,
        id_a: str,
        variant_a,
        id_b: str,
        variant_b
    ) -> dict:
        """
        Return the conversation between A and B, creating it on first contact

        Raises:
            ValidationError: malformed ids/variants, or A == B
            NotFoundError: either identity does not exist
        """
        participant_a = ParticipantRef(id=check_identity_id(id_a, "idA"), variant=parse_variant(variant_a, "variantA"))
        participant_b = ParticipantRef(id=check_identity_id(id_b, "idB"), variant=parse_variant(variant_b, "variantB"))

        if participant_a.id == participant_b.id:
            raise ValidationError("A conversation needs two distinct participants")

        for participant in (participant_a, participant_b):
            if not await self.identities.exists(participant.id, participant.variant):
                raise NotFoundError(f"{participant.variant.capitalize()} {participant.id} not found")

        conversation = await self.store.find_or_create(participant_a, participant_b)
        return (await self._resolve([conversation]))[0]

    async def post_message(
        self,
        conversation_id: str,
        sender_id: str,
        sender_variant,
        text: str
    ) -> dict:
        """
        Append a message and return the updated conversation

        Raises:
            ValidationError: empty text, bad variant, or sender not a participant
            NotFoundError: conversation does not exist
        """
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Message cannot be empty")

        sender = ParticipantRef(
            id=check_identity_id(sender_id, "senderId"),
            variant=parse_variant(sender_variant, "senderVariant")
        )

        conversation = await self.store.get_by_id(conversation_id)
        if conversation is None:
            raise NotFoundError("Chat not found")

        if not self._is_participant(conversation, sender):
            raise ValidationError("Sender is not a participant of this conversation")

        message = ChatMessage(
            message_id=generate_id("MSG"),
            sender=sender,
            text=text,
            created_at=datetime.utcnow()
        )
        updated = await self.store.append_message(conversation_id, message.model_dump())
        logger.info("Message %s appended to %s by %s", message.message_id, conversation_id, sender.id)

        return (await self._resolve([updated]))[0]

    async def get_conversation(self, conversation_id: str) -> dict:
        conversation = await self.store.get_by_id(conversation_id)
        if conversation is None:
            raise NotFoundError("Chat not found")
        return (await self._resolve([conversation]))[0]

    async def list_conversations_for(self, identity_id: str) -> List[dict]:
        identity_id = check_identity_id(identity_id, "identityId")
        conversations = await self.store.list_for_participant(identity_id)
        return await self._resolve(conversations)

    # ==================== HELPERS ====================

    @staticmethod
    def _is_participant(conversation: dict, ref: ParticipantRef) -> bool:
        return any(
            p["id"] == ref.id and p["variant"] == ref.variant
            for p in conversation["participants"]
        )

    async def _resolve(self, conversations: Iterable[dict]) -> List[dict]:
        """
        Shape conversations for output with identity details filled in
        One identity query per variant covers every conversation in the batch
        """
        conversations = list(conversations)
        refs = []
        for conversation in conversations:
            refs.extend(conversation["participants"])
            refs.extend(message["sender"] for message in conversation.get("messages", []))

        records = await self.identities.resolve_many(refs)

        def lookup(ref):
            return resolved_ref(ref, records.get((ref["id"], ref["variant"])))

        return [
            {
                "id": conversation["conversation_id"],
                "participants": [lookup(p) for p in conversation["participants"]],
                "messages": [
                    {
                        "id": message.get("message_id"),
                        "sender": lookup(message["sender"]),
                        "text": message["text"],
                        "created_at": message["created_at"],
                    }
                    for message in conversation.get("messages", [])
                ],
                "created_at": conversation["created_at"],
                "updated_at": conversation["updated_at"],
            }
            for conversation in conversations
        ]
