import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.models import AuditLog


@pytest.fixture()
async def student_and_course(client: AsyncClient, auth_headers):
    headers = auth_headers["secretar"]
    response = await client.post(
        "/api/students",
        json={"last_name": "Pop", "first_name": "Ion", "email": "ion@example.com", "study_year": 1},
        headers=headers,
    )
    student_id = response.json()["id"]
    response = await client.post(
        "/api/courses",
        json={"name": "Databases", "professor": "Ionescu", "credits": 5, "semester": 1},
        headers=headers,
    )
    return student_id, response.json()["id"]


@pytest.mark.asyncio
async def test_enrollment_lifecycle(
    client: AsyncClient, auth_headers, student_and_course, db_session: AsyncSession
) -> None:
    student_id, course_id = student_and_course
    headers = auth_headers["secretar"]

    response = await client.post(
        "/api/enrollments", json={"student_id": student_id, "course_id": course_id}, headers=headers
    )
    assert response.status_code == 201
    assert response.json()["student_name"] == "Pop Ion"
    assert response.json()["final_grade"] is None

    response = await client.put(
        f"/api/enrollments/{student_id}/{course_id}", json={"final_grade": "9.5"}, headers=headers
    )
    assert response.status_code == 200
    assert float(response.json()["final_grade"]) == 9.5

    response = await client.get("/api/enrollments/filter", params={"student_id": student_id}, headers=headers)
    assert len(response.json()) == 1
    response = await client.get("/api/enrollments", headers=headers)
    assert response.json()["total_elements"] == 1

    response = await client.delete(f"/api/enrollments/{student_id}/{course_id}", headers=auth_headers["admin"])
    assert response.status_code == 204

    result = await db_session.execute(select(AuditLog).where(AuditLog.entity == "Enrollment").order_by(AuditLog.id))
    entries = result.scalars().all()
    assert [e.action for e in entries] == ["CREATE", "UPDATE", "DELETE"]
    assert all(e.entity_id is None for e in entries)


@pytest.mark.asyncio
async def test_duplicate_enrollment_conflicts(client: AsyncClient, auth_headers, student_and_course) -> None:
    student_id, course_id = student_and_course
    body = {"student_id": student_id, "course_id": course_id}
    await client.post("/api/enrollments", json=body, headers=auth_headers["secretar"])

    response = await client.post("/api/enrollments", json=body, headers=auth_headers["secretar"])
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_unknown_course_is_404(client: AsyncClient, auth_headers, student_and_course) -> None:
    student_id, _ = student_and_course
    response = await client.post(
        "/api/enrollments", json={"student_id": student_id, "course_id": 999}, headers=auth_headers["secretar"]
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_grade_out_of_range(client: AsyncClient, auth_headers, student_and_course) -> None:
    student_id, course_id = student_and_course
    response = await client.post(
        "/api/enrollments",
        json={"student_id": student_id, "course_id": course_id, "final_grade": 11},
        headers=auth_headers["secretar"],
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_deleting_student_cascades(client: AsyncClient, auth_headers, student_and_course) -> None:
    student_id, course_id = student_and_course
    await client.post(
        "/api/enrollments", json={"student_id": student_id, "course_id": course_id}, headers=auth_headers["secretar"]
    )

    response = await client.delete(f"/api/students/{student_id}", headers=auth_headers["admin"])
    assert response.status_code == 204

    response = await client.get(f"/api/enrollments/{student_id}/{course_id}", headers=auth_headers["admin"])
    assert response.status_code == 404
