import asyncio

from conftest import bearer, seed_student
from lms_backend.chat.conversation_service import ConversationService
from lms_backend.chat.conversation_store import ConversationStore
from lms_backend.chat.router import get_conversation_service
from lms_backend.identity.identity_models import IdentityVariant
from lms_backend.identity.identity_store import IdentityStore
from lms_backend.main import app


def open_body(student, instructor):
    return {
        "idA": student["student_id"],
        "variantA": "student",
        "idB": instructor["instructor_id"],
        "variantB": "instructor",
    }


async def test_get_or_create_returns_camel_case_conversation(client, student, instructor, student_headers):
    response = await client.post("/api/chat/get-or-create", json=open_body(student, instructor), headers=student_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["id"].startswith("CHAT_")
    assert body["messages"] == []
    assert {"createdAt", "updatedAt"} <= body.keys()
    assert {p["displayName"] for p in body["participants"]} == {"Ada Lovelace", "Alan Turing"}


async def test_get_or_create_requires_token(client, student, instructor):
    response = await client.post("/api/chat/get-or-create", json=open_body(student, instructor))
    assert response.status_code == 401


async def test_get_or_create_for_someone_else(client, db, student, instructor):
    outsider = await seed_student(db, "Eve", "Outsider", "eve@campus.org", "S-6666")

    response = await client.post(
        "/api/chat/get-or-create",
        json=open_body(student, instructor),
        headers=bearer(outsider, IdentityVariant.STUDENT)
    )
    assert response.status_code == 403


async def test_get_or_create_bad_variant(client, student, instructor, student_headers):
    body = open_body(student, instructor)
    body["variantB"] = "admin"

    response = await client.post("/api/chat/get-or-create", json=body, headers=student_headers)
    assert response.status_code == 400


async def test_send_and_read_back(client, student, instructor, student_headers, instructor_headers):
    chat = (await client.post(
        "/api/chat/get-or-create", json=open_body(student, instructor), headers=student_headers
    )).json()

    response = await client.post("/api/chat/send", json={
        "conversationId": chat["id"],
        "senderId": student["student_id"],
        "senderVariant": "student",
        "text": "When is the exam?",
    }, headers=student_headers)
    assert response.status_code == 200
    assert response.json()["messages"][0]["sender"]["displayName"] == "Ada Lovelace"

    fetched = await client.get(f"/api/chat/conversation/{chat['id']}", headers=instructor_headers)
    assert fetched.status_code == 200
    message = fetched.json()["messages"][0]
    assert message["text"] == "When is the exam?"
    assert "createdAt" in message


async def test_send_as_someone_else(client, student, instructor, student_headers):
    chat = (await client.post(
        "/api/chat/get-or-create", json=open_body(student, instructor), headers=student_headers
    )).json()

    response = await client.post("/api/chat/send", json={
        "conversationId": chat["id"],
        "senderId": instructor["instructor_id"],
        "senderVariant": "instructor",
        "text": "forged",
    }, headers=student_headers)
    assert response.status_code == 403


async def test_send_empty_text(client, student, instructor, student_headers):
    chat = (await client.post(
        "/api/chat/get-or-create", json=open_body(student, instructor), headers=student_headers
    )).json()

    response = await client.post("/api/chat/send", json={
        "conversationId": chat["id"],
        "senderId": student["student_id"],
        "senderVariant": "student",
        "text": "  ",
    }, headers=student_headers)
    assert response.status_code == 400


async def test_send_to_unknown_conversation(client, student, student_headers):
    response = await client.post("/api/chat/send", json={
        "conversationId": "CHAT_MISSING",
        "senderId": student["student_id"],
        "senderVariant": "student",
        "text": "hello?",
    }, headers=student_headers)
    assert response.status_code == 404


async def test_read_conversation_as_outsider(client, db, student, instructor, student_headers):
    outsider = await seed_student(db, "Eve", "Outsider", "eve@campus.org", "S-6666")
    chat = (await client.post(
        "/api/chat/get-or-create", json=open_body(student, instructor), headers=student_headers
    )).json()

    response = await client.get(
        f"/api/chat/conversation/{chat['id']}",
        headers=bearer(outsider, IdentityVariant.STUDENT)
    )
    assert response.status_code == 403


async def test_list_own_conversations(client, student, instructor, student_headers):
    chat = (await client.post(
        "/api/chat/get-or-create", json=open_body(student, instructor), headers=student_headers
    )).json()

    response = await client.get(f"/api/chat/conversations/{student['student_id']}", headers=student_headers)
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == [chat["id"]]

    other = await client.get(f"/api/chat/conversations/{instructor['instructor_id']}", headers=student_headers)
    assert other.status_code == 403


async def test_token_of_deleted_identity_rejected(client, db, student, student_headers):
    await db.students.delete_one({"student_id": student["student_id"]})

    response = await client.get(f"/api/chat/conversations/{student['student_id']}", headers=student_headers)
    assert response.status_code == 401


async def test_read_unknown_conversation(client, student_headers):
    response = await client.get("/api/chat/conversation/CHAT_MISSING", headers=student_headers)

    assert response.status_code == 404
    assert response.json() == {"detail": "Chat not found"}


class SlowCollection:
    async def find_one(self, *args, **kwargs):
        await asyncio.sleep(1)


async def test_store_timeout_answers_retryable_503(client, db, student_headers):
    def slow_service():
        store = ConversationStore(db, timeout=0.01)
        store.collection = SlowCollection()
        return ConversationService(store, IdentityStore(db))

    app.dependency_overrides[get_conversation_service] = slow_service

    response = await client.get("/api/chat/conversation/CHAT_ANY", headers=student_headers)

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "5"
    assert "timed out" in response.json()["detail"]
