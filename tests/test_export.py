import csv
import io
from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.api.v1.export.service import grade_average, strip_diacritics


def _rows(text: str):
    return list(csv.reader(io.StringIO(text)))


@pytest.mark.asyncio
async def test_export_students_csv(client: AsyncClient, auth_headers) -> None:
    await client.post(
        "/api/students",
        json={"last_name": "Pop", "first_name": "Ion", "email": "ion@example.com", "study_year": 1},
        headers=auth_headers["secretar"],
    )

    response = await client.get("/api/export/csv/students", headers=auth_headers["profesor"])
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "students.csv" in response.headers["content-disposition"]
    rows = _rows(response.text)
    assert rows[0] == ["ID", "Last Name", "First Name", "Email", "Phone", "Study Year"]
    assert rows[1][1:] == ["Pop", "Ion", "ion@example.com", "", "1"]


@pytest.mark.asyncio
@pytest.mark.parametrize("export_type", ["courses", "attendance", "enrollments"])
async def test_export_empty_tables(client: AsyncClient, auth_headers, export_type: str) -> None:
    response = await client.get(f"/api/export/csv/{export_type}", headers=auth_headers["admin"])
    assert response.status_code == 200
    assert len(_rows(response.text)) == 1


@pytest.mark.asyncio
async def test_unknown_export_type(client: AsyncClient, auth_headers) -> None:
    response = await client.get("/api/export/csv/grades", headers=auth_headers["admin"])
    assert response.status_code == 404


def test_strip_diacritics() -> None:
    assert strip_diacritics("Ștefănescu Țuțea Îonel") == "Stefanescu Tutea Ionel"


def test_grade_average() -> None:
    assert grade_average([Decimal("9.50"), None, Decimal("8"), Decimal("7.25")]) == Decimal("8.25")
    assert grade_average([Decimal("9"), Decimal("8"), Decimal("8")]) == Decimal("8.33")
    assert grade_average([None, None]) is None


@pytest.mark.asyncio
async def test_transcript_pdf(client: AsyncClient, auth_headers) -> None:
    headers = auth_headers["secretar"]
    response = await client.post(
        "/api/students",
        json={"last_name": "Ștefănescu", "first_name": "Ion", "email": "stefanescu@example.com", "study_year": 2},
        headers=headers,
    )
    student_id = response.json()["id"]
    for name, grade in (("Baze de date", "9.5"), ("Algoritmi", None)):
        response = await client.post(
            "/api/courses",
            json={"name": name, "professor": "Popa", "credits": 5, "semester": 1},
            headers=headers,
        )
        course_id = response.json()["id"]
        body = {"student_id": student_id, "course_id": course_id, "final_grade": grade}
        assert (await client.post("/api/enrollments", json=body, headers=headers)).status_code == 201

    response = await client.get(f"/api/export/pdf/transcript/{student_id}", headers=auth_headers["profesor"])
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "Matricola_Stefanescu_Ion.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_transcript_without_enrollments(client: AsyncClient, auth_headers) -> None:
    response = await client.post(
        "/api/students",
        json={"last_name": "Pop", "first_name": "Ana", "email": "ana@example.com", "study_year": 1},
        headers=auth_headers["secretar"],
    )
    response = await client.get(f"/api/export/pdf/transcript/{response.json()['id']}", headers=auth_headers["admin"])
    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_transcript_unknown_student(client: AsyncClient, auth_headers) -> None:
    response = await client.get("/api/export/pdf/transcript/999", headers=auth_headers["admin"])
    assert response.status_code == 404
    assert response.json()["detail"] == "Student with ID 999 not found"
