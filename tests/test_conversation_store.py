import asyncio
from datetime import datetime, timedelta

import pytest

from lms_backend.chat.chat_models import ParticipantRef, make_pair_key
from lms_backend.chat.conversation_store import ConversationStore
from lms_backend.errors import DuplicatePairError, NotFoundError, StoreTimeoutError


def ref(identity_id, variant="student"):
    return ParticipantRef(id=identity_id, variant=variant)


def message(text, sender_id="STU_A", variant="student"):
    return {
        "message_id": f"MSG_{text}",
        "sender": {"id": sender_id, "variant": variant},
        "text": text,
        "created_at": datetime.utcnow(),
    }


@pytest.fixture()
def store(db):
    return ConversationStore(db)


def test_pair_key_is_order_independent():
    assert make_pair_key("STU_A", "INS_B") == make_pair_key("INS_B", "STU_A")


async def test_find_between_ignores_argument_order(store):
    created = await store.create_conversation(ref("STU_A"), ref("INS_B", "instructor"))

    found = await store.find_conversation_between("INS_B", "STU_A")

    assert found["conversation_id"] == created["conversation_id"]
    assert found["participant_ids"] == ["STU_A", "INS_B"]
    assert found["messages"] == []


async def test_find_between_unknown_pair(store):
    assert await store.find_conversation_between("STU_A", "STU_Z") is None


async def test_create_rejects_second_conversation_for_pair(store):
    await store.create_conversation(ref("STU_A"), ref("INS_B", "instructor"))

    with pytest.raises(DuplicatePairError) as exc:
        await store.create_conversation(ref("INS_B", "instructor"), ref("STU_A"))
    assert exc.value.pair_key == make_pair_key("STU_A", "INS_B")


async def test_find_or_create_returns_existing(store, db):
    first = await store.find_or_create(ref("STU_A"), ref("INS_B", "instructor"))
    second = await store.find_or_create(ref("INS_B", "instructor"), ref("STU_A"))

    assert first["conversation_id"] == second["conversation_id"]
    assert await db.conversations.count_documents({}) == 1


async def test_concurrent_find_or_create_makes_one_document(store, db):
    results = await asyncio.gather(*[
        store.find_or_create(ref("STU_A"), ref("INS_B", "instructor"))
        for _ in range(10)
    ])

    assert len({r["conversation_id"] for r in results}) == 1
    assert await db.conversations.count_documents({}) == 1


async def test_append_keeps_order_and_bumps_updated_at(store):
    conversation = await store.find_or_create(ref("STU_A"), ref("INS_B", "instructor"))

    await asyncio.sleep(0.01)
    await store.append_message(conversation["conversation_id"], message("one"))
    updated = await store.append_message(conversation["conversation_id"], message("two"))

    assert [m["text"] for m in updated["messages"]] == ["one", "two"]
    assert updated["updated_at"] > conversation["updated_at"]


async def test_append_out_of_order_never_rewinds_updated_at(store):
    conversation = await store.find_or_create(ref("STU_A"), ref("INS_B", "instructor"))
    stamped = datetime.utcnow() + timedelta(seconds=5)

    late = message("late")
    late["created_at"] = stamped + timedelta(seconds=1)
    early = message("early")
    early["created_at"] = stamped

    after_late = await store.append_message(conversation["conversation_id"], late)
    after_early = await store.append_message(conversation["conversation_id"], early)

    assert after_early["updated_at"] >= after_late["updated_at"]
    assert [m["text"] for m in after_early["messages"]] == ["late", "early"]


async def test_append_to_missing_conversation(store):
    with pytest.raises(NotFoundError):
        await store.append_message("CHAT_MISSING", message("hello"))


async def test_list_for_participant_newest_activity_first(store):
    older = await store.find_or_create(ref("STU_A"), ref("INS_B", "instructor"))
    await asyncio.sleep(0.01)
    newer = await store.find_or_create(ref("STU_A"), ref("STU_C"))
    await store.find_or_create(ref("STU_C"), ref("INS_B", "instructor"))

    listed = await store.list_for_participant("STU_A")
    assert [c["conversation_id"] for c in listed] == [newer["conversation_id"], older["conversation_id"]]

    await asyncio.sleep(0.01)
    await store.append_message(older["conversation_id"], message("bump"))

    listed = await store.list_for_participant("STU_A")
    assert [c["conversation_id"] for c in listed] == [older["conversation_id"], newer["conversation_id"]]


async def test_list_for_participant_without_conversations(store):
    assert await store.list_for_participant("STU_NOBODY") == []


class SlowCollection:
    async def find_one(self, *args, **kwargs):
        await asyncio.sleep(1)


async def test_slow_store_raises_timeout(db):
    store = ConversationStore(db, timeout=0.01)
    store.collection = SlowCollection()

    with pytest.raises(StoreTimeoutError):
        await store.get_by_id("CHAT_ANY")
