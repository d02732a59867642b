from conftest import PASSWORD, seed_instructor
from lms_backend.auth.auth_utils import decode_access_token


async def test_register_and_login(client):
    response = await client.post("/api/instructors/", json={
        "firstName": "Barbara",
        "lastName": "Liskov",
        "email": "barbara@campus.org",
        "password": "substitution",
        "expertise": ["Programming Languages", "  "],
        "experience": 30,
        "socialLinks": {"website": "https://example.org/liskov"},
    })

    assert response.status_code == 201
    body = response.json()
    instructor = body["instructor"]
    assert instructor["expertise"] == ["Programming Languages"]
    assert instructor["socialLinks"]["website"] == "https://example.org/liskov"
    assert instructor["rating"] == {"average": 0.0, "count": 0}
    assert decode_access_token(body["token"])["role"] == "instructor"

    login = await client.post("/api/instructors/login", json={"email": "barbara@campus.org", "password": "substitution"})
    assert login.status_code == 200
    assert login.json()["instructor"]["instructorId"] == instructor["instructorId"]


async def test_register_duplicate_email(client, instructor):
    response = await client.post("/api/instructors/", json={
        "firstName": "Alan",
        "lastName": "Again",
        "email": instructor["email"],
        "password": "another1",
    })
    assert response.status_code == 409


async def test_login_unknown_email(client):
    response = await client.post("/api/instructors/login", json={"email": "nobody@campus.org", "password": PASSWORD})
    assert response.status_code == 401


async def test_list_filters(client, db, instructor):
    await seed_instructor(db, "Barbara", "Liskov", "barbara@campus.org", expertise=["Distributed Systems"])

    response = await client.get("/api/instructors/", params={"expertise": "Distributed Systems"})
    assert response.status_code == 200
    body = response.json()
    assert [i["lastName"] for i in body["instructors"]] == ["Liskov"]
    assert body["pagination"]["totalInstructors"] == 1


async def test_search_by_expertise(client, db, instructor):
    response = await client.get("/api/instructors/search", params={"expertise": "Computing"})

    assert response.status_code == 200
    assert response.json()["totalResults"] == 1
    assert response.json()["expertiseFilter"] == "Computing"


async def test_search_needs_query_or_expertise(client):
    assert (await client.get("/api/instructors/search")).status_code == 400


async def test_update_and_delete(client, db, instructor, instructor_headers):
    updated = await client.put(
        f"/api/instructors/{instructor['instructor_id']}",
        json={"bio": "Enigma", "experience": 15},
        headers=instructor_headers
    )
    assert updated.status_code == 200
    assert updated.json()["instructor"]["bio"] == "Enigma"

    deleted = await client.delete(f"/api/instructors/{instructor['instructor_id']}", headers=instructor_headers)
    assert deleted.status_code == 200
    assert (await client.get(f"/api/instructors/{instructor['instructor_id']}")).status_code == 404


async def test_change_password(client, instructor, instructor_headers):
    response = await client.patch(
        f"/api/instructors/{instructor['instructor_id']}/password",
        json={"currentPassword": PASSWORD, "newPassword": "bombe-machine"},
        headers=instructor_headers
    )
    assert response.status_code == 200

    old = await client.post("/api/instructors/login", json={"email": instructor["email"], "password": PASSWORD})
    assert old.status_code == 401
