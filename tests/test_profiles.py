async def test_first_read_creates_blank_profile(client, db, student, student_headers):
    response = await client.get("/api/profile/", headers=student_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["identityId"] == student["student_id"]
    assert data["variant"] == "student"
    assert data["firstName"] == "Ada"
    assert data["email"] == student["email"]
    assert data["bio"] == "NOT GIVEN"
    assert data["gender"] == ""
    assert await db.profiles.count_documents({"owner_id": student["student_id"]}) == 1

    again = await client.get("/api/profile/", headers=student_headers)
    assert again.json()["data"]["createdAt"] == data["createdAt"]
    assert await db.profiles.count_documents({}) == 1


async def test_update_splits_names_and_profile_fields(client, db, instructor, instructor_headers):
    response = await client.put("/api/profile/", json={
        "firstName": "Alan M.",
        "bio": "Computing pioneer",
        "city": "Wilmslow",
        "country": "  ",
    }, headers=instructor_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Profile updated successfully"
    assert body["data"]["firstName"] == "Alan M."
    assert body["data"]["bio"] == "Computing pioneer"
    assert body["data"]["city"] == "Wilmslow"
    assert body["data"]["country"] == "NOT GIVEN"
    assert body["data"]["variant"] == "instructor"

    stored = await db.instructors.find_one({"instructor_id": instructor["instructor_id"]})
    assert stored["first_name"] == "Alan M."
    profile = await db.profiles.find_one({"owner_id": instructor["instructor_id"]})
    assert "first_name" not in profile


async def test_profiles_are_per_identity(client, student, student_headers, instructor_headers):
    await client.put("/api/profile/", json={"bio": "Mathematician"}, headers=student_headers)

    other = await client.get("/api/profile/", headers=instructor_headers)
    assert other.json()["data"]["bio"] == "NOT GIVEN"


async def test_profile_requires_token(client):
    assert (await client.get("/api/profile/")).status_code == 401
    assert (await client.put("/api/profile/", json={"bio": "x"})).status_code == 401


async def test_delete_profile(client, db, student_headers):
    missing = await client.delete("/api/profile/", headers=student_headers)
    assert missing.status_code == 404

    await client.get("/api/profile/", headers=student_headers)
    response = await client.delete("/api/profile/", headers=student_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Profile deleted successfully"}
    assert await db.profiles.count_documents({}) == 0


async def test_deleting_the_account_removes_the_profile(client, db, student, student_headers):
    await client.put("/api/profile/", json={"phone": "555-0101"}, headers=student_headers)

    response = await client.delete(f"/api/students/{student['student_id']}", headers=student_headers)

    assert response.status_code == 200
    assert await db.profiles.count_documents({"owner_id": student["student_id"]}) == 0
