import pytest

from conftest import bearer, seed_instructor
from lms_backend.courses import course_service
from lms_backend.courses.course_schemas import CourseCreate
from lms_backend.errors import NotFoundError
from lms_backend.identity.identity_models import IdentityVariant


def course_body(instructor, **overrides):
    body = {
        "title": "Computability",
        "description": "Machines, decidability and the halting problem",
        "instructorId": instructor["instructor_id"],
        "category": "Theory",
        "level": "Advanced",
        "tags": ["logic", "automata"],
    }
    body.update(overrides)
    return body


async def create(client, instructor, headers, **overrides):
    response = await client.post("/api/courses/", json=course_body(instructor, **overrides), headers=headers)
    assert response.status_code == 201
    return response.json()["course"]


async def test_create_course(client, instructor, instructor_headers):
    course = await create(client, instructor, instructor_headers)

    assert course["courseId"].startswith("CRS_")
    assert course["status"] == "Draft"
    assert course["maxStudents"] == 50
    assert course["instructor"] == {
        "id": instructor["instructor_id"],
        "displayName": "Alan Turing",
        "email": "alan@campus.org",
    }


async def test_create_duplicate_title(client, instructor, instructor_headers):
    await create(client, instructor, instructor_headers)

    response = await client.post("/api/courses/", json=course_body(instructor), headers=instructor_headers)
    assert response.status_code == 409


async def test_students_cannot_create_courses(client, instructor, student_headers):
    response = await client.post("/api/courses/", json=course_body(instructor), headers=student_headers)
    assert response.status_code == 403


async def test_create_for_missing_instructor(db):
    data = CourseCreate(title="Ghost course", description="nobody teaches it", instructor_id="INS_GHOST")

    with pytest.raises(NotFoundError):
        await course_service.create_course(db, data)


async def test_list_filters(client, instructor, instructor_headers):
    await create(client, instructor, instructor_headers)
    await create(
        client, instructor, instructor_headers,
        title="Intro to Python", description="Variables and loops", category="Programming", level="Beginner"
    )

    everything = await client.get("/api/courses/")
    assert everything.json()["pagination"]["totalCourses"] == 2

    beginner = await client.get("/api/courses/", params={"level": "Beginner"})
    assert [c["title"] for c in beginner.json()["courses"]] == ["Intro to Python"]

    search = await client.get("/api/courses/", params={"search": "halting"})
    assert [c["title"] for c in search.json()["courses"]] == ["Computability"]


async def test_featured_and_category_only_show_published(client, instructor, instructor_headers):
    await create(client, instructor, instructor_headers, isFeatured=True)
    await create(client, instructor, instructor_headers, title="Cryptanalysis", isFeatured=True, status="Published")

    featured = await client.get("/api/courses/featured")
    assert [c["title"] for c in featured.json()["courses"]] == ["Cryptanalysis"]

    theory = await client.get("/api/courses/category/Theory")
    assert [c["title"] for c in theory.json()["courses"]] == ["Cryptanalysis"]


async def test_instructor_courses_with_stats(client, instructor, instructor_headers):
    await create(client, instructor, instructor_headers)
    await create(client, instructor, instructor_headers, title="Cryptanalysis", status="Published")

    response = await client.get(f"/api/courses/instructor/{instructor['instructor_id']}")
    body = response.json()

    assert body["totalCourses"] == 2
    assert body["instructorStats"]["publishedCourses"] == 1
    assert body["instructorStats"]["draftCourses"] == 1


async def test_update_and_status_by_owner(client, instructor, instructor_headers):
    course = await create(client, instructor, instructor_headers)

    updated = await client.put(
        f"/api/courses/{course['courseId']}", json={"price": 49.5}, headers=instructor_headers
    )
    assert updated.status_code == 200
    assert updated.json()["price"] == 49.5

    published = await client.patch(
        f"/api/courses/{course['courseId']}/status", json={"status": "Published"}, headers=instructor_headers
    )
    assert published.json()["status"] == "Published"


async def test_only_owner_manages_course(client, db, instructor, instructor_headers):
    course = await create(client, instructor, instructor_headers)
    other = await seed_instructor(db, "Barbara", "Liskov", "barbara@campus.org")

    response = await client.delete(
        f"/api/courses/{course['courseId']}", headers=bearer(other, IdentityVariant.INSTRUCTOR)
    )
    assert response.status_code == 403


async def test_get_and_delete(client, instructor, instructor_headers):
    course = await create(client, instructor, instructor_headers)

    fetched = await client.get(f"/api/courses/{course['courseId']}")
    assert fetched.json()["title"] == "Computability"

    deleted = await client.delete(f"/api/courses/{course['courseId']}", headers=instructor_headers)
    assert deleted.status_code == 200
    assert (await client.get(f"/api/courses/{course['courseId']}")).status_code == 404


async def test_course_of_deleted_instructor(client, db, instructor, instructor_headers):
    course = await create(client, instructor, instructor_headers)
    await db.instructors.delete_one({"instructor_id": instructor["instructor_id"]})

    fetched = await client.get(f"/api/courses/{course['courseId']}")
    assert fetched.json()["instructor"]["displayName"] is None
