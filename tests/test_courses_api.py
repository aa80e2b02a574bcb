import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.models import AuditLog


def _course(name: str, semester: int = 1, professor: str = "Ionescu") -> dict:
    return {"name": name, "professor": professor, "credits": 5, "semester": semester}


@pytest.mark.asyncio
async def test_course_lifecycle(client: AsyncClient, auth_headers, db_session: AsyncSession) -> None:
    response = await client.post("/api/courses", json=_course("Databases"), headers=auth_headers["secretar"])
    assert response.status_code == 201
    course_id = response.json()["id"]

    response = await client.patch(f"/api/courses/{course_id}", json={"credits": 6}, headers=auth_headers["secretar"])
    assert response.status_code == 200
    assert response.json()["credits"] == 6

    response = await client.put(
        f"/api/courses/{course_id}", json=_course("Databases II", 2), headers=auth_headers["admin"]
    )
    assert response.json()["semester"] == 2

    response = await client.delete(f"/api/courses/{course_id}", headers=auth_headers["admin"])
    assert response.status_code == 204

    result = await db_session.execute(select(AuditLog.action).where(AuditLog.entity_id == course_id, AuditLog.entity == "Course").order_by(AuditLog.id))
    assert result.scalars().all() == ["CREATE", "UPDATE", "UPDATE", "DELETE"]


@pytest.mark.asyncio
async def test_search_courses(client: AsyncClient, auth_headers) -> None:
    headers = auth_headers["secretar"]
    await client.post("/api/courses", json=_course("Databases", 1), headers=headers)
    await client.post("/api/courses", json=_course("Algorithms", 2, "Popa"), headers=headers)

    response = await client.get("/api/courses", params={"q": "popa"}, headers=auth_headers["profesor"])
    assert [c["name"] for c in response.json()["data"]] == ["Algorithms"]

    response = await client.get("/api/courses", params={"semester": 1}, headers=auth_headers["profesor"])
    assert [c["name"] for c in response.json()["data"]] == ["Databases"]


@pytest.mark.asyncio
async def test_invalid_semester_rejected(client: AsyncClient, auth_headers) -> None:
    response = await client.post("/api/courses", json=_course("Databases", 3), headers=auth_headers["admin"])
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_missing_course_is_404(client: AsyncClient, auth_headers) -> None:
    response = await client.patch("/api/courses/404", json={"credits": 3}, headers=auth_headers["admin"])
    assert response.status_code == 404
