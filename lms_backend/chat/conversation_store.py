import logging
from datetime import datetime
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from lms_backend.chat.chat_models import Conversation, ParticipantRef, make_pair_key
from lms_backend.config import STORE_TIMEOUT_SECONDS
from lms_backend.database import bounded, clean_doc, clean_many, generate_id
from lms_backend.errors import ConflictError, DuplicatePairError, NotFoundError

logger = logging.getLogger(__name__)


class ConversationStore:
    """
    Persistence for conversation documents and their embedded messages

    Every call is bounded by `timeout` seconds and raises StoreTimeoutError
    when the database does not answer in time.
    """

    def __init__(self, db: AsyncIOMotorDatabase, timeout: float = STORE_TIMEOUT_SECONDS):
        self.collection = db.conversations
        self.timeout = timeout

    @staticmethod
    def _new_conversation(participant_a: ParticipantRef, participant_b: ParticipantRef) -> dict:
        now = datetime.utcnow()
        conversation = Conversation(
            conversation_id=generate_id("CHAT"),
            participants=[participant_a, participant_b],
            participant_ids=[participant_a.id, participant_b.id],
            pair_key=make_pair_key(participant_a.id, participant_b.id),
            messages=[],
            created_at=now,
            updated_at=now
        )
        return conversation.model_dump()

    # ==================== LOOKUPS ====================

    async def find_conversation_between(self, id_a: str, id_b: str) -> Optional[dict]:
        """Pair lookup, independent of the order the ids were stored in"""
        return await bounded(
            self.collection.find_one({"pair_key": make_pair_key(id_a, id_b)}, {"_id": 0}),
            self.timeout,
            "find_conversation_between"
        )

    async def get_by_id(self, conversation_id: str) -> Optional[dict]:
        return await bounded(
            self.collection.find_one({"conversation_id": conversation_id}, {"_id": 0}),
            self.timeout,
            "get_by_id"
        )

    async def list_for_participant(self, identity_id: str) -> List[dict]:
        """All conversations involving identity_id, most recently active first"""
        cursor = self.collection.find(
            {"participant_ids": identity_id},
            {"_id": 0}
        ).sort("updated_at", -1)
        docs = await bounded(cursor.to_list(length=None), self.timeout, "list_for_participant")
        return clean_many(docs)

    # ==================== MUTATIONS ====================

    async def create_conversation(
        self,
        participant_a: ParticipantRef,
        participant_b: ParticipantRef
    ) -> dict:
        """
        Plain insert

        Raises:
            DuplicatePairError: a conversation already exists for this pair
        """
        doc = self._new_conversation(participant_a, participant_b)
        try:
            await bounded(self.collection.insert_one(doc), self.timeout, "create_conversation")
        except DuplicateKeyError:
            raise DuplicatePairError(doc["pair_key"])

        logger.info("Created conversation %s for pair %s", doc["conversation_id"], doc["pair_key"])
        return clean_doc(doc)

    async def find_or_create(
        self,
        participant_a: ParticipantRef,
        participant_b: ParticipantRef
    ) -> dict:
        """
        Atomic find-or-insert keyed by the canonical pair key

        Concurrent first contacts converge on one document: the upsert either
        matches the existing conversation or inserts it, and a caller that loses
        the insert race on the unique index gets the winner's document back.
        """
        doc = self._new_conversation(participant_a, participant_b)
        pair_key = doc.pop("pair_key")

        try:
            conversation = await bounded(
                self.collection.find_one_and_update(
                    {"pair_key": pair_key},
                    {"$setOnInsert": doc},
                    upsert=True,
                    projection={"_id": 0},
                    return_document=ReturnDocument.AFTER
                ),
                self.timeout,
                "find_or_create"
            )
        except DuplicateKeyError:
            logger.info("Lost create race for pair %s, returning existing conversation", pair_key)
            conversation = await self.find_conversation_between(participant_a.id, participant_b.id)
            if conversation is None:
                raise ConflictError(f"Conversation for pair {pair_key} could not be resolved")
            return conversation

        if conversation["conversation_id"] == doc["conversation_id"]:
            logger.info("Created conversation %s for pair %s", doc["conversation_id"], pair_key)
        return conversation

    async def append_message(self, conversation_id: str, message: dict) -> dict:
        """
        Push one message and bump updated_at in a single atomic update

        updated_at only moves forward, a message stamped earlier than one
        already stored does not rewind it.

        Raises:
            NotFoundError: no conversation with this id
        """
        conversation = await bounded(
            self.collection.find_one_and_update(
                {"conversation_id": conversation_id},
                {
                    "$push": {"messages": message},
                    "$max": {"updated_at": message["created_at"]}
                },
                projection={"_id": 0},
                return_document=ReturnDocument.AFTER
            ),
            self.timeout,
            "append_message"
        )

        if conversation is None:
            raise NotFoundError("Chat not found")
        return conversation
