import pytest

from conftest import PASSWORD, bearer
from lms_backend.auth.auth_utils import create_access_token, decode_access_token, hash_password
from lms_backend.database import generate_id
from lms_backend.identity.identity_models import IdentityVariant
from lms_backend.users import user_service
from lms_backend.users.user_models import User, UserRole


async def seed_user(db, email="root@campus.org", role=UserRole.ADMIN):
    record = User(
        user_id=generate_id("USR"),
        first_name="Root",
        email=email,
        password=hash_password(PASSWORD),
        role=role
    ).model_dump()
    await db.users.insert_one(record)
    record.pop("_id", None)
    return record


def user_headers(record):
    token = create_access_token(record["user_id"], record["role"], record["email"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
async def admin(db):
    return await seed_user(db)


async def test_signup_then_login(client, db):
    response = await client.post("/api/users/", json={
        "firstName": "Linus",
        "email": "Linus@Campus.org",
        "password": "kernel42",
    })

    assert response.status_code == 201
    user = response.json()["user"]
    assert user["email"] == "linus@campus.org"
    assert user["role"] == "user"
    assert user["lastName"] == ""
    assert "password" not in user

    login = await client.post("/api/users/login", json={"email": "linus@campus.org", "password": "kernel42"})
    assert login.status_code == 200
    payload = decode_access_token(login.json()["token"])
    assert payload["sub"] == user["userId"]
    assert payload["role"] == "user"


async def test_signup_duplicate_and_short_password(client, admin):
    duplicate = await client.post("/api/users/", json={
        "firstName": "Again", "email": admin["email"], "password": "secret99",
    })
    assert duplicate.status_code == 409

    short = await client.post("/api/users/", json={
        "firstName": "Short", "email": "short@campus.org", "password": "123",
    })
    assert short.status_code == 400


async def test_signup_with_configured_admin_email(client, monkeypatch):
    monkeypatch.setattr(user_service, "ADMIN_EMAILS", ["ops@campus.org"])

    response = await client.post("/api/users/", json={
        "firstName": "Ops", "email": "ops@campus.org", "password": "secret99",
    })
    assert response.json()["user"]["role"] == "admin"


async def test_login_wrong_password(client, admin):
    response = await client.post("/api/users/login", json={"email": admin["email"], "password": "nope"})
    assert response.status_code == 401


async def test_list_is_admin_only(client, db, admin, student):
    member = await seed_user(db, "member@campus.org", UserRole.USER)

    assert (await client.get("/api/users/")).status_code == 401
    assert (await client.get("/api/users/", headers=user_headers(member))).status_code == 403
    assert (await client.get("/api/users/", headers=bearer(student, IdentityVariant.STUDENT))).status_code == 403

    response = await client.get("/api/users/", headers=user_headers(admin))
    assert response.status_code == 200
    assert {u["email"] for u in response.json()} == {"root@campus.org", "member@campus.org"}
    assert all("password" not in u for u in response.json())


async def test_role_change(client, db, admin):
    member = await seed_user(db, "member@campus.org", UserRole.USER)
    url = f"/api/users/{member['user_id']}"

    invalid = await client.put(url, json={"role": "superuser"}, headers=user_headers(admin))
    assert invalid.status_code == 400

    response = await client.put(url, json={"role": "admin"}, headers=user_headers(admin))
    assert response.status_code == 200
    assert (await db.users.find_one({"user_id": member["user_id"]}))["role"] == "admin"

    missing = await client.put("/api/users/USR_GHOST", json={"role": "user"}, headers=user_headers(admin))
    assert missing.status_code == 404


async def test_demoted_admin_loses_access(client, db, admin):
    headers = user_headers(admin)
    await db.users.update_one({"user_id": admin["user_id"]}, {"$set": {"role": "user"}})

    response = await client.get("/api/users/", headers=headers)
    assert response.status_code == 403


async def test_delete_user(client, db, admin):
    member = await seed_user(db, "member@campus.org", UserRole.USER)

    response = await client.delete(f"/api/users/{member['user_id']}", headers=user_headers(admin))
    assert response.status_code == 200
    assert await db.users.count_documents({"user_id": member["user_id"]}) == 0

    again = await client.delete(f"/api/users/{member['user_id']}", headers=user_headers(admin))
    assert again.status_code == 404


async def test_user_token_is_not_a_chat_identity(client, admin):
    response = await client.get("/api/profile/", headers=user_headers(admin))
    assert response.status_code == 401
